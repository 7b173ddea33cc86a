"""
db/connection.py
----------------
Connection sources for PostgreSQL.

The rest of the database layer depends only on the `DataSource` contract:
`get_connection()` hands out a psycopg2 connection and `release_connection()`
takes it back. Two implementations are provided: one connection per call,
or psycopg2's SimpleConnectionPool for connection reuse.
"""

from typing import Protocol

import psycopg2
from psycopg2 import pool

from config import DATABASE_URL, DB_POOL_MAX_CONN, DB_POOL_MIN_CONN
from utils.logger import get_logger

logger = get_logger(__name__)


class DataSource(Protocol):
    """Anything that can hand out and take back DB-API connections."""

    def get_connection(self): ...

    def release_connection(self, conn) -> None: ...


def format_postgres_url(
    database_name: str,
    host: str = "localhost",
    port: int = 5432,
    user: str = "",
    password: str = "",
) -> str:
    """Build a ``postgresql://`` URL usable as a psycopg2 DSN."""
    credentials = ""
    if user:
        credentials = f"{user}:{password}@" if password else f"{user}@"
    return f"postgresql://{credentials}{host}:{port}/{database_name}"


class DriverDataSource:
    """Opens a fresh connection on every call and closes it on release."""

    def __init__(self, dsn: str, **connect_kwargs):
        self.dsn = dsn
        self.connect_kwargs = connect_kwargs

    def get_connection(self):
        """
        Open a new connection.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        return psycopg2.connect(self.dsn, **self.connect_kwargs)

    def release_connection(self, conn) -> None:
        conn.close()


class PooledDataSource:
    """Hands out connections from a psycopg2 SimpleConnectionPool."""

    def __init__(self, dsn: str, min_conn: int = 1, max_conn: int = 5, **connect_kwargs):
        """
        Initialize the database connection pool.

        Args:
            dsn: PostgreSQL connection string.
            min_conn: Minimum number of connections to keep open.
            max_conn: Maximum number of connections allowed.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        try:
            self._pool = pool.SimpleConnectionPool(min_conn, max_conn, dsn, **connect_kwargs)
            logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    def get_connection(self):
        """
        Get a connection from the pool.

        Raises:
            psycopg2.pool.PoolError: If the pool is exhausted or closed.
        """
        return self._pool.getconn()

    def release_connection(self, conn) -> None:
        """Return a connection back to the pool."""
        self._pool.putconn(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        if not self._pool.closed:
            self._pool.closeall()
            logger.info("Database connection pool closed.")


def create_default_data_source() -> DriverDataSource:
    """Data source for the database configured in `config.DATABASE_URL`."""
    return DriverDataSource(DATABASE_URL)


def create_default_pooled_data_source() -> PooledDataSource:
    """Pooled data source sized by `DB_POOL_MIN_CONN` / `DB_POOL_MAX_CONN`."""
    return PooledDataSource(DATABASE_URL, DB_POOL_MIN_CONN, DB_POOL_MAX_CONN)
