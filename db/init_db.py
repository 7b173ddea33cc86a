"""
db/init_db.py
-------------
Bootstrap schemas for a fresh database.

Each initializer owns one DDL script and applies it through
`db.sql_util.with_statement`. The scripts use plain CREATE TABLE: running an
initializer twice against the same database fails on the second run, and
that failure is reported rather than hidden.

Run this module directly to initialize the configured database:
    python -m db.init_db account
"""

import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from db.connection import DataSource, create_default_data_source
from db.exceptions import ExecutionError
from db.sql_util import execute_safely, with_statement
from utils.logger import get_logger

logger = get_logger(__name__)

ACCOUNT_SCHEMA_SQL = """
-- Account table: one row per customer account
CREATE TABLE account (
    id              BIGSERIAL NOT NULL,
    first_name      VARCHAR(255) NOT NULL,
    last_name       VARCHAR(255) NOT NULL,
    email           VARCHAR(255) NOT NULL,
    gender          VARCHAR(255) NOT NULL,
    balance         DECIMAL(19,4),
    birthday        DATE NOT NULL,
    creation_time   TIMESTAMP NOT NULL DEFAULT NOW(),
    CONSTRAINT account_pk PRIMARY KEY (id),
    CONSTRAINT account_email_uq UNIQUE (email)
);
"""

USER_PROFILE_SCHEMA_SQL = """
-- Users table: registered users
CREATE TABLE users (
    id              BIGSERIAL NOT NULL,
    email           VARCHAR(255) NOT NULL,
    first_name      VARCHAR(255) NOT NULL,
    last_name       VARCHAR(255) NOT NULL,
    birthday        DATE NOT NULL,
    CONSTRAINT "users_PK" PRIMARY KEY (id),
    CONSTRAINT "users_email_AK" UNIQUE (email)
);

-- Profiles table: one optional profile per user, keyed by the user id
CREATE TABLE profiles (
    user_id         BIGINT NOT NULL,
    city            VARCHAR(255),
    job_position    VARCHAR(255),
    company         VARCHAR(255),
    education       VARCHAR(255),
    CONSTRAINT "profiles_PK" PRIMARY KEY (user_id),
    CONSTRAINT "profiles_users_FK" FOREIGN KEY (user_id) REFERENCES users (id)
);
"""

WALL_STREET_SCHEMA_SQL = """
-- Brokers
CREATE TABLE broker (
    id              BIGSERIAL NOT NULL,
    username        VARCHAR(255) NOT NULL,
    first_name      VARCHAR(255) NOT NULL,
    last_name       VARCHAR(255) NOT NULL,
    CONSTRAINT "PK_broker" PRIMARY KEY (id),
    CONSTRAINT "UQ_broker_username" UNIQUE (username)
);

-- Sales groups
CREATE TABLE sales_group (
    id                      BIGSERIAL NOT NULL,
    name                    VARCHAR(255) NOT NULL,
    transaction_type        VARCHAR(255) NOT NULL,
    max_transaction_amount  INT NOT NULL,
    CONSTRAINT "PK_sales_group" PRIMARY KEY (id),
    CONSTRAINT "UQ_sales_group_name" UNIQUE (name)
);

-- Many-to-many link between brokers and sales groups
CREATE TABLE broker_sales_group (
    broker_id       BIGINT NOT NULL,
    sales_group_id  BIGINT NOT NULL,
    CONSTRAINT "FK_broker_sales_group_broker" FOREIGN KEY (broker_id) REFERENCES broker (id),
    CONSTRAINT "FK_broker_sales_group_sales_group" FOREIGN KEY (sales_group_id) REFERENCES sales_group (id),
    CONSTRAINT "UQ_broker_sales_group_broker_id_sales_group_id" UNIQUE (broker_id, sales_group_id)
);
"""

PRODUCT_SCHEMA_SQL = """
-- Products table: backing store for repositories.product_repo
CREATE TABLE products (
    id              BIGSERIAL NOT NULL,
    name            VARCHAR(255) NOT NULL,
    producer        VARCHAR(255) NOT NULL,
    price           DECIMAL(19,4),
    expiration_date DATE,
    creation_time   TIMESTAMP NOT NULL DEFAULT NOW(),
    CONSTRAINT products_pk PRIMARY KEY (id)
);
"""


class SchemaInitializer(Protocol):
    """Applies one schema to the database it was configured with."""

    def init(self) -> None: ...


class InitializerState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


def read_ddl(path) -> str:
    """Read a DDL script from disk as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


class ScriptSchemaInitializer:
    """
    Executes a DDL script once per `init()` call.

    The script is opaque: it is neither parsed nor validated here. A failed
    run moves the initializer to FAILED, which is terminal; later `init()`
    calls raise without touching the database.
    """

    def __init__(self, data_source: DataSource, ddl: str, name: Optional[str] = None):
        self.data_source = data_source
        self.ddl = ddl
        self.name = name or type(self).__name__
        self.state = InitializerState.UNINITIALIZED
        self._failure: Optional[ExecutionError] = None

    def init(self) -> None:
        """
        Apply the DDL script.

        Raises:
            ExecutionError: If the script cannot run, or a previous run failed.
        """
        if self.state is InitializerState.FAILED:
            raise ExecutionError(
                f"{self.name} previously failed and cannot be re-run",
                cause=self._failure,
            )
        try:
            with_statement(self.data_source, lambda cur: execute_safely(cur, self.ddl))
        except ExecutionError as e:
            self.state = InitializerState.FAILED
            self._failure = e
            logger.error(f"Failed to initialize schema with {self.name}: {e}")
            raise
        self.state = InitializerState.READY
        logger.info(f"Database schema applied by {self.name}.")


class AccountDbInitializer(ScriptSchemaInitializer):
    """Creates the `account` table."""

    def __init__(self, data_source: DataSource):
        super().__init__(data_source, ACCOUNT_SCHEMA_SQL)


class UserProfileDbInitializer(ScriptSchemaInitializer):
    """Creates the `users` and `profiles` tables."""

    def __init__(self, data_source: DataSource):
        super().__init__(data_source, USER_PROFILE_SCHEMA_SQL)


class WallStreetDbInitializer(ScriptSchemaInitializer):
    """Creates brokers, sales groups and the link table between them."""

    def __init__(self, data_source: DataSource):
        super().__init__(data_source, WALL_STREET_SCHEMA_SQL)


class ProductDbInitializer(ScriptSchemaInitializer):
    """Creates the `products` table."""

    def __init__(self, data_source: DataSource):
        super().__init__(data_source, PRODUCT_SCHEMA_SQL)


INITIALIZERS = {
    "account": AccountDbInitializer,
    "user_profile": UserProfileDbInitializer,
    "wall_street": WallStreetDbInitializer,
    "products": ProductDbInitializer,
}


def main(argv: list[str]) -> int:
    if len(argv) != 1 or argv[0] not in INITIALIZERS:
        print(f"usage: python -m db.init_db {{{','.join(INITIALIZERS)}}}", file=sys.stderr)
        return 2
    initializer = INITIALIZERS[argv[0]](create_default_data_source())
    try:
        initializer.init()
    except ExecutionError:
        return 1
    print(f"✅ Schema '{argv[0]}' created successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
