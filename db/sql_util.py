"""
db/sql_util.py
--------------
Scoped execution of SQL against a DataSource.

Every interaction with the database goes through `with_statement` (or
`with_connection`): one connection and one cursor per logical call, committed
on success, rolled back on failure and always released. psycopg2 errors are
translated into `ExecutionError` here so nothing above this module has to
know about the driver's exception types.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar

import psycopg2

from db.connection import DataSource
from db.exceptions import ExecutionError
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ── EXECUTION ─────────────────────────────────────────────

def execute_safely(cursor, sql: str, params: Optional[Sequence[Any]] = None) -> bool:
    """
    Execute a single statement.

    Returns:
        True if the statement produced a result set, False otherwise.

    Raises:
        ExecutionError: If the driver rejects the statement.
    """
    try:
        cursor.execute(sql, params)
    except psycopg2.Error as e:
        logger.error(f"Failed to execute statement: {e}")
        raise ExecutionError("Can't execute statement", cause=e, sql=sql) from e
    return cursor.description is not None


def execute_query_safely(cursor, sql: str, params: Optional[Sequence[Any]] = None):
    """
    Execute a query and return the cursor positioned on its result set.

    Raises:
        ExecutionError: If the driver rejects the query.
    """
    try:
        cursor.execute(sql, params)
    except psycopg2.Error as e:
        logger.error(f"Failed to execute query: {e}")
        raise ExecutionError("Can't execute query", cause=e, sql=sql) from e
    return cursor


def execute_update_safely(cursor, sql: str, params: Optional[Sequence[Any]] = None) -> int:
    """Execute a DML statement and return the number of affected rows."""
    try:
        cursor.execute(sql, params)
    except psycopg2.Error as e:
        logger.error(f"Failed to execute update: {e}")
        raise ExecutionError("Can't execute update", cause=e, sql=sql) from e
    return cursor.rowcount


# ── SCOPES ────────────────────────────────────────────────

def _acquire(data_source: DataSource):
    try:
        return data_source.get_connection()
    except psycopg2.Error as e:
        logger.error(f"Failed to retrieve connection: {e}")
        raise ExecutionError("Can't retrieve connection", cause=e) from e


def _rollback_quietly(conn) -> None:
    # Only called while another exception is propagating.
    try:
        conn.rollback()
    except psycopg2.Error as e:
        logger.warning(f"Rollback failed: {e}")


def _commit(conn) -> None:
    try:
        conn.commit()
    except psycopg2.Error as e:
        logger.error(f"Failed to commit: {e}")
        raise ExecutionError("Can't commit transaction", cause=e) from e


def _release(data_source: DataSource, conn) -> None:
    try:
        data_source.release_connection(conn)
    except psycopg2.Error as e:
        logger.error(f"Failed to release connection: {e}")
        raise ExecutionError("Can't release connection", cause=e) from e


def _release_quietly(data_source: DataSource, conn) -> None:
    # Only called while another exception is propagating.
    try:
        data_source.release_connection(conn)
    except psycopg2.Error as e:
        logger.warning(f"Releasing connection failed: {e}")


def _close(cursor) -> None:
    try:
        cursor.close()
    except psycopg2.Error as e:
        logger.error(f"Failed to close cursor: {e}")
        raise ExecutionError("Can't close cursor", cause=e) from e


def _close_quietly(cursor) -> None:
    # Only called while another exception is propagating.
    try:
        cursor.close()
    except psycopg2.Error as e:
        logger.warning(f"Closing cursor failed: {e}")


@contextmanager
def connection(data_source: DataSource) -> Iterator[Any]:
    """
    Borrow one connection for the duration of the block.

    Commits when the block exits normally, rolls back when it raises and
    releases the connection in both cases. A psycopg2 error escaping the
    block, or raised while releasing after a successful block, is re-raised
    as `ExecutionError`. A release failure never replaces an error that is
    already propagating.
    """
    conn = _acquire(data_source)
    try:
        yield conn
        _commit(conn)
    except psycopg2.Error as e:
        _rollback_quietly(conn)
        _release_quietly(data_source, conn)
        logger.error(f"Database operation failed: {e}")
        raise ExecutionError("Database operation failed", cause=e) from e
    except BaseException:
        _rollback_quietly(conn)
        _release_quietly(data_source, conn)
        raise
    _release(data_source, conn)


@contextmanager
def statement(data_source: DataSource) -> Iterator[Any]:
    """Same scope as `connection`, but yields a cursor that is closed on exit."""
    with connection(data_source) as conn:
        cursor = conn.cursor()
        try:
            yield cursor
        except BaseException:
            _close_quietly(cursor)
            raise
        _close(cursor)


def with_statement(data_source: DataSource, unit_of_work: Callable[[Any], T]) -> T:
    """
    Run `unit_of_work(cursor)` inside a fresh connection/cursor scope.

    This is the only sanctioned way to reach the database: callers never
    handle raw connections or cursors outside of it.

    Returns:
        Whatever `unit_of_work` returns.

    Raises:
        ExecutionError: For any driver failure, including acquisition and commit.
        DaoOperationError: Raised by `unit_of_work` itself, unchanged.
    """
    with statement(data_source) as cursor:
        return unit_of_work(cursor)


def with_connection(data_source: DataSource, unit_of_work: Callable[[Any], T]) -> T:
    """Run `unit_of_work(conn)` inside a fresh connection scope."""
    with connection(data_source) as conn:
        return unit_of_work(conn)
