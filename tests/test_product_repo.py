"""
Unit tests for repositories/product_repo.py against a fake DB-API cursor.
"""

from datetime import date, datetime
from decimal import Decimal

import psycopg2
import pytest

from db.exceptions import ExecutionError, IllegalArgumentError, NotFoundError
from models.product import Product
from repositories.product_repo import (
    DELETE_PRODUCT_SQL,
    FIND_ALL_SQL,
    FIND_ONE_SQL,
    SAVE_PRODUCT_SQL,
    UPDATE_PRODUCT_SQL,
    ProductRepository,
)

CREATED = datetime(2024, 3, 1, 12, 30, 15)


def make_product(**overrides) -> Product:
    fields = dict(
        name="Fresh Milk",
        producer="Dairy Farm",
        price=Decimal("1.9900"),
        expiration_date=date(2024, 3, 14),
    )
    fields.update(overrides)
    return Product(**fields)


def row_for(product_id: int, name: str = "Fresh Milk") -> tuple:
    return (product_id, name, "Dairy Farm", Decimal("1.9900"), date(2024, 3, 14), CREATED)


@pytest.fixture()
def repo(data_source):
    return ProductRepository(data_source)


class TestSave:

    def test_assigns_generated_id(self, repo, cursor):
        cursor.fetchone.return_value = (42,)
        product = make_product()
        assert not product.is_persisted()

        saved = repo.save(product)

        assert saved is product
        assert saved.is_persisted()
        assert saved.id == 42
        assert saved.name == "Fresh Milk"
        assert saved.price == Decimal("1.9900")
        assert saved.creation_time is None

    def test_binds_parameters_in_column_order(self, repo, cursor):
        cursor.fetchone.return_value = (1,)
        repo.save(make_product())

        cursor.execute.assert_called_once_with(
            SAVE_PRODUCT_SQL,
            ("Fresh Milk", "Dairy Farm", Decimal("1.9900"), date(2024, 3, 14)),
        )

    def test_commits_and_releases(self, repo, data_source, conn, cursor):
        cursor.fetchone.return_value = (1,)
        repo.save(make_product())

        conn.commit.assert_called_once()
        data_source.get_connection.assert_called_once()
        data_source.release_connection.assert_called_once_with(conn)

    def test_rejects_none(self, repo, data_source):
        with pytest.raises(IllegalArgumentError):
            repo.save(None)
        data_source.get_connection.assert_not_called()

    def test_missing_generated_key_fails(self, repo, conn, cursor):
        cursor.fetchone.return_value = None
        product = make_product()

        with pytest.raises(ExecutionError, match="No generated key"):
            repo.save(product)

        assert product.id is None
        conn.rollback.assert_called_once()

    def test_driver_error_is_translated(self, repo, data_source, conn, cursor):
        cursor.execute.side_effect = psycopg2.IntegrityError("null value in column")
        product = make_product()

        with pytest.raises(ExecutionError) as exc_info:
            repo.save(product)

        assert not isinstance(exc_info.value, psycopg2.Error)
        assert product.id is None
        data_source.release_connection.assert_called_once_with(conn)

    def test_commit_failure_leaves_id_unset(self, repo, conn, cursor):
        cursor.fetchone.return_value = (5,)
        conn.commit.side_effect = psycopg2.OperationalError("server closed the connection")
        product = make_product()

        with pytest.raises(ExecutionError):
            repo.save(product)

        assert product.id is None


class TestFindOne:

    def test_decodes_row(self, repo, cursor):
        cursor.fetchone.return_value = row_for(7)

        product = repo.find_one(7)

        cursor.execute.assert_called_once_with(FIND_ONE_SQL, (7,))
        assert product == Product(
            id=7,
            name="Fresh Milk",
            producer="Dairy Farm",
            price=Decimal("1.9900"),
            expiration_date=date(2024, 3, 14),
            creation_time=CREATED,
        )

    def test_missing_row_raises_not_found(self, repo, cursor):
        cursor.fetchone.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            repo.find_one(99)

        assert exc_info.value.entity_id == 99
        assert "99" in str(exc_info.value)

    def test_rejects_none_id(self, repo, data_source):
        with pytest.raises(IllegalArgumentError):
            repo.find_one(None)
        data_source.get_connection.assert_not_called()

    def test_fetch_error_is_translated(self, repo, cursor):
        cursor.fetchone.side_effect = psycopg2.DataError("invalid input")
        with pytest.raises(ExecutionError, match="find one"):
            repo.find_one(1)


class TestFindAll:

    def test_keeps_result_set_order(self, repo, cursor):
        cursor.fetchall.return_value = [row_for(3, "C"), row_for(1, "A"), row_for(2, "B")]

        products = repo.find_all()

        cursor.execute.assert_called_once_with(FIND_ALL_SQL, None)
        assert [p.id for p in products] == [3, 1, 2]
        assert [p.name for p in products] == ["C", "A", "B"]

    def test_empty_table(self, repo):
        assert repo.find_all() == []

    def test_timestamp_expiration_is_truncated_to_date(self, repo, cursor):
        row = (1, "Bread", "Bakery", Decimal("0.5000"), datetime(2024, 5, 1, 0, 0), CREATED)
        cursor.fetchall.return_value = [row]

        [product] = repo.find_all()

        assert type(product.expiration_date) is date
        assert product.expiration_date == date(2024, 5, 1)

    def test_query_error_is_translated(self, repo, cursor):
        cursor.execute.side_effect = psycopg2.ProgrammingError('relation "products" does not exist')
        with pytest.raises(ExecutionError):
            repo.find_all()


class TestUpdate:

    def test_checks_existence_then_updates(self, repo, data_source, conn, cursor):
        cursor.fetchone.return_value = row_for(7)
        product = make_product(id=7, name="Skimmed Milk")

        assert repo.update(product) is None

        statements = [c.args for c in cursor.execute.call_args_list]
        assert statements == [
            (FIND_ONE_SQL, (7,)),
            (
                UPDATE_PRODUCT_SQL,
                ("Skimmed Milk", "Dairy Farm", Decimal("1.9900"), date(2024, 3, 14), 7),
            ),
        ]
        conn.commit.assert_called_once()
        data_source.get_connection.assert_called_once()

    def test_rejects_missing_id_without_sql(self, repo, data_source):
        with pytest.raises(IllegalArgumentError):
            repo.update(make_product())
        data_source.get_connection.assert_not_called()

    def test_rejects_none(self, repo, data_source):
        with pytest.raises(IllegalArgumentError):
            repo.update(None)
        data_source.get_connection.assert_not_called()

    def test_unknown_product_raises_not_found(self, repo, cursor):
        cursor.fetchone.return_value = None

        with pytest.raises(NotFoundError):
            repo.update(make_product(id=404))

        assert cursor.execute.call_count == 1

    def test_zero_affected_rows_fails(self, repo, conn, cursor):
        cursor.fetchone.return_value = row_for(7)
        cursor.rowcount = 0

        with pytest.raises(ExecutionError, match="affected rows: 0"):
            repo.update(make_product(id=7))

        conn.rollback.assert_called_once()


class TestRemove:

    def test_checks_existence_then_deletes(self, repo, conn, cursor):
        cursor.fetchone.return_value = row_for(7)

        repo.remove(make_product(id=7))

        statements = [c.args for c in cursor.execute.call_args_list]
        assert statements == [(FIND_ONE_SQL, (7,)), (DELETE_PRODUCT_SQL, (7,))]
        conn.commit.assert_called_once()

    def test_rejects_missing_id_without_sql(self, repo, data_source):
        with pytest.raises(IllegalArgumentError):
            repo.remove(make_product())
        data_source.get_connection.assert_not_called()

    def test_unknown_product_raises_not_found(self, repo, cursor):
        cursor.fetchone.return_value = None
        with pytest.raises(NotFoundError):
            repo.remove(make_product(id=404))

    def test_row_deleted_concurrently_fails(self, repo, cursor):
        cursor.fetchone.return_value = row_for(7)
        cursor.rowcount = 0

        with pytest.raises(ExecutionError, match="remove"):
            repo.remove(make_product(id=7))
