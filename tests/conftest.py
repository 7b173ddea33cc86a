import uuid
from unittest.mock import MagicMock

import psycopg2
import pytest

from config import TEST_DATABASE_URL
from db.connection import DriverDataSource
from db.sql_util import execute_query_safely, with_statement


# ── Fakes for unit tests ──────────────────────────────────

@pytest.fixture()
def cursor():
    cur = MagicMock(name="cursor")
    cur.description = None
    cur.rowcount = 1
    cur.fetchone.return_value = None
    cur.fetchall.return_value = []
    return cur


@pytest.fixture()
def conn(cursor):
    connection = MagicMock(name="connection")
    connection.cursor.return_value = cursor
    return connection


@pytest.fixture()
def data_source(conn):
    ds = MagicMock(name="data_source")
    ds.get_connection.return_value = conn
    return ds


# ── Live PostgreSQL for integration tests ─────────────────

@pytest.fixture()
def pg_schema():
    """
    Create a throwaway schema on TEST_DATABASE_URL and drop it afterwards.
    Skips the test when no database is configured or reachable.
    """
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL is not set")
    try:
        admin = psycopg2.connect(TEST_DATABASE_URL)
    except psycopg2.OperationalError as e:
        pytest.skip(f"PostgreSQL is unreachable: {e}")
    admin.autocommit = True
    schema = f"test_{uuid.uuid4().hex[:12]}"
    with admin.cursor() as cur:
        cur.execute(f"CREATE SCHEMA {schema}")
    try:
        yield schema
    finally:
        with admin.cursor() as cur:
            cur.execute(f"DROP SCHEMA {schema} CASCADE")
        admin.close()


@pytest.fixture()
def pg_data_source(pg_schema):
    return DriverDataSource(TEST_DATABASE_URL, options=f"-c search_path={pg_schema}")


@pytest.fixture()
def fetch_rows(pg_data_source):
    """Run a query through the scoped helper and return all rows."""
    def _fetch(sql, params=None) -> list[tuple]:
        return with_statement(
            pg_data_source, lambda cur: execute_query_safely(cur, sql, params).fetchall()
        )
    return _fetch
