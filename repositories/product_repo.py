"""
repositories/product_repo.py
-----------------------------
Data access layer for products.
All SQL queries related to the `products` table live here.
"""

from datetime import datetime
from typing import Optional

import psycopg2

from db.connection import DataSource
from db.exceptions import ExecutionError, IllegalArgumentError, NotFoundError
from db.sql_util import execute_query_safely, execute_update_safely, with_statement
from models.product import Product
from utils.logger import get_logger

logger = get_logger(__name__)

# Column order matches the products DDL; rows are decoded positionally.
_COLUMNS = "id, name, producer, price, expiration_date, creation_time"

SAVE_PRODUCT_SQL = (
    "INSERT INTO products (name, producer, price, expiration_date) "
    "VALUES (%s, %s, %s, %s) RETURNING id;"
)
FIND_ONE_SQL = f"SELECT {_COLUMNS} FROM products WHERE id = %s;"
FIND_ALL_SQL = f"SELECT {_COLUMNS} FROM products;"
UPDATE_PRODUCT_SQL = (
    "UPDATE products SET name = %s, producer = %s, price = %s, expiration_date = %s "
    "WHERE id = %s;"
)
DELETE_PRODUCT_SQL = "DELETE FROM products WHERE id = %s;"


class ProductRepository:
    """
    Repository for CRUD operations on the products table.

    Every public method runs in its own connection/cursor scope obtained from
    the data source and raises only `db.exceptions` types.
    """

    def __init__(self, data_source: DataSource):
        self.data_source = data_source

    # ── CREATE ────────────────────────────────────────────

    def save(self, product: Product) -> Product:
        """
        Insert a new product.

        Args:
            product: The Product to persist. Its `id` is ignored.

        Returns:
            The same Product with its `id` populated.

        Raises:
            IllegalArgumentError: If `product` is None.
            ExecutionError: If the insert fails or returns no generated key.
        """
        if product is None:
            raise IllegalArgumentError("Cannot save a null product")

        def insert(cur) -> int:
            execute_update_safely(cur, SAVE_PRODUCT_SQL, self._insert_params(product))
            row = self._fetchone(cur, "save")
            if row is None:
                raise ExecutionError(
                    f"No generated key returned when saving product: {product}",
                    sql=SAVE_PRODUCT_SQL,
                )
            return row[0]

        product.id = with_statement(self.data_source, insert)
        logger.info(f"Saved product #{product.id}")
        return product

    # ── READ ──────────────────────────────────────────────

    def find_one(self, product_id: int) -> Product:
        """
        Fetch a single product by id.

        Raises:
            IllegalArgumentError: If `product_id` is None.
            NotFoundError: If no product has that id.
            ExecutionError: If the query fails.
        """
        if product_id is None:
            raise IllegalArgumentError("Cannot find a product without ID")
        return with_statement(self.data_source, lambda cur: self._find_one(cur, product_id))

    def find_all(self) -> list[Product]:
        """
        Fetch every product, in the order the database returns them.

        Raises:
            ExecutionError: If the query fails.
        """
        def select_all(cur) -> list[Product]:
            execute_query_safely(cur, FIND_ALL_SQL)
            return [self._row_to_product(r) for r in self._fetchall(cur)]

        return with_statement(self.data_source, select_all)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, product: Product) -> None:
        """
        Overwrite the stored row of an existing product.

        Raises:
            IllegalArgumentError: If `product` or its id is None (no SQL is issued).
            NotFoundError: If the product does not exist.
            ExecutionError: If no row was updated or the statement fails.
        """
        self._require_id(product)

        def apply(cur) -> None:
            self._find_one(cur, product.id)
            params = self._insert_params(product) + (product.id,)
            self._require_affected(execute_update_safely(cur, UPDATE_PRODUCT_SQL, params), "update")

        with_statement(self.data_source, apply)
        logger.info(f"Updated product #{product.id}")

    # ── DELETE ────────────────────────────────────────────

    def remove(self, product: Product) -> None:
        """
        Delete an existing product.

        Raises:
            IllegalArgumentError: If `product` or its id is None (no SQL is issued).
            NotFoundError: If the product does not exist.
            ExecutionError: If no row was deleted or the statement fails.
        """
        self._require_id(product)

        def apply(cur) -> None:
            self._find_one(cur, product.id)
            self._require_affected(
                execute_update_safely(cur, DELETE_PRODUCT_SQL, (product.id,)), "remove"
            )

        with_statement(self.data_source, apply)
        logger.info(f"Removed product #{product.id}")

    # ── HELPERS ───────────────────────────────────────────

    def _find_one(self, cur, product_id: int) -> Product:
        # update/remove reuse this as an existence check on their own cursor.
        # A row deleted between the check and the mutation surfaces as zero
        # affected rows.
        execute_query_safely(cur, FIND_ONE_SQL, (product_id,))
        row = self._fetchone(cur, "find one")
        if row is None:
            raise NotFoundError(f"Product with id = {product_id} does not exist", entity_id=product_id)
        return self._row_to_product(row)

    @staticmethod
    def _fetchone(cur, operation: str) -> Optional[tuple]:
        try:
            return cur.fetchone()
        except psycopg2.Error as e:
            raise ExecutionError(f"Error parsing '{operation}' result set", cause=e) from e

    @staticmethod
    def _fetchall(cur) -> list[tuple]:
        try:
            return cur.fetchall()
        except psycopg2.Error as e:
            raise ExecutionError("Error parsing 'find all' result set", cause=e) from e

    @staticmethod
    def _require_id(product: Optional[Product]) -> None:
        if product is None:
            raise IllegalArgumentError("Product must not be null")
        if not product.is_persisted():
            raise IllegalArgumentError("Product ID must not be null")

    @staticmethod
    def _require_affected(affected_rows: int, operation: str) -> None:
        if affected_rows < 1:
            raise ExecutionError(f"Error executing '{operation}', affected rows: {affected_rows}")

    @staticmethod
    def _insert_params(product: Product) -> tuple:
        """Bind order: name, producer, price, expiration_date."""
        return (product.name, product.producer, product.price, product.expiration_date)

    @staticmethod
    def _row_to_product(row: tuple) -> Product:
        """Convert a database row tuple to a Product domain object."""
        expiration_date = row[4]
        if isinstance(expiration_date, datetime):
            expiration_date = expiration_date.date()
        return Product(
            id=row[0],
            name=row[1],
            producer=row[2],
            price=row[3],
            expiration_date=expiration_date,
            creation_time=row[5],
        )
