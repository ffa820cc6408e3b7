import pandas as pd
import pandas.testing as pd_testing
import pytest
import sqlalchemy as sa
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from stock_core import database_url
from stock_core.data_repository import Database
from stock_core.repositories import Product, SqlUnitOfWork
from stock_core.settings import AppSettings
from tests.sample_data import quantity_of, seed_product


class _FakeConnection:
    def __init__(self, executed_container):
        self._executed = executed_container

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, statement, params=None):
        self._executed.append(str(statement))
        raise TypeError("expected string or bytes-like object, got 'TextClause'")

    def exec_driver_sql(self, sql_text):
        self._executed.append(sql_text)
        raise AssertionError("the statement must not be re-sent as literal SQL")


class _FakeEngine:
    def __init__(self, executed_container):
        self._executed = executed_container

    def connect(self):
        return _FakeConnection(self._executed)


def test_query_df_propagates_driver_type_errors():
    executed = []
    database = Database(_FakeEngine(executed))

    with pytest.raises(TypeError, match="TextClause"):
        database.query_df(text("SELECT :value AS val"), params={"value": 7})

    assert executed == ["SELECT :value AS val"]


def test_query_df_binds_params_on_select_statements(db):
    seed_product(db, name="Milk", quantity=3)
    seed_product(db, name="Flour", quantity=0)

    stmt = sa.select(sa.column("name")).select_from(sa.table("products")).where(
        sa.column("quantity") >= sa.bindparam("minimum")
    )
    df = db.query_df(stmt, {"minimum": 1})

    pd_testing.assert_frame_equal(df, pd.DataFrame([("Milk",)], columns=["name"]))


def test_query_df_returns_typed_columns(db):
    seed_product(db, name="Milk", quantity=3)

    df = db.query_df("SELECT name, quantity FROM products WHERE quantity >= :minimum", {"minimum": 1})

    assert list(df.columns) == ["name", "quantity"]
    assert df.iloc[0]["name"] == "Milk"


def test_query_df_empty_keeps_columns(db):
    df = db.query_df("SELECT id, name FROM products")
    assert df.empty
    assert list(df.columns) == ["id", "name"]


def test_query_df_rejects_non_mapping_params(db):
    with pytest.raises(TypeError):
        db.query_df("SELECT 1", params=[1])


def test_ping_and_dialect(db):
    assert db.ping() is True
    assert db.dialect_name == "sqlite"


def test_sqlite_foreign_keys_are_enforced(db):
    with pytest.raises(IntegrityError):
        with db.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO stock_movements (id, product_id, type, quantity, created_at) "
                    "VALUES ('m1', 'no-such-product', 'IN', 1, CURRENT_TIMESTAMP)"
                )
            )


def test_quantity_check_constraint(db):
    pid = seed_product(db, quantity=1)
    with pytest.raises(IntegrityError):
        with db.engine.begin() as conn:
            conn.execute(text("UPDATE products SET quantity = -1 WHERE id = :id"), {"id": pid})
    assert quantity_of(db, pid) == 1


def test_unit_of_work_rolls_back_without_commit(db):
    pid = seed_product(db, quantity=4)

    with SqlUnitOfWork(db) as uow:
        assert uow.products.apply_quantity_delta(pid, 6)

    assert quantity_of(db, pid) == 4


def test_unit_of_work_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with SqlUnitOfWork(db) as uow:
            uow.products.add(Product(id=None, name="Ghost", price=1, quantity=0))
            raise RuntimeError("boom")

    assert db.query_df("SELECT id FROM products").empty


def test_unit_of_work_commit(db):
    pid = seed_product(db, quantity=4)

    with SqlUnitOfWork(db) as uow:
        assert not uow.products.apply_quantity_delta(pid, -5)
        assert uow.products.apply_quantity_delta(pid, -4)
        uow.commit()

    assert quantity_of(db, pid) == 0


def test_product_repository_refuses_direct_quantity_writes(db):
    pid = seed_product(db, quantity=4)
    with SqlUnitOfWork(db) as uow:
        with pytest.raises(ValueError):
            uow.products.update(pid, {"quantity": 99})


def test_unit_of_work_requires_with_block(db):
    with pytest.raises(RuntimeError):
        SqlUnitOfWork(db).connection


def test_get_database_url_prefers_explicit_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///explicit.db")
    assert database_url.get_database_url() == "sqlite:///explicit.db"


def test_get_database_url_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "POSTGRES_HOST", "POSTGRES_PORT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DB_USER", "store")
    monkeypatch.setenv("DB_PASSWORD", "p@ss word")
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_NAME", "inventory")
    monkeypatch.delenv("DB_PORT", raising=False)

    assert database_url.get_database_url() == "postgresql+psycopg2://store:p%40ss+word@db:5432/inventory"


def test_settings_load_from_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET_KEYS", "first-secret, second-secret")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://shop.example.com")
    monkeypatch.delenv("AUTO_CREATE_SCHEMA", raising=False)
    monkeypatch.delenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)

    settings = AppSettings.load()

    assert settings.is_production
    assert settings.jwt_secret_keys == ["first-secret", "second-secret"]
    assert settings.cors_allowed_origins == ["https://shop.example.com"]
    assert settings.auto_create_schema is False
    assert settings.jwt_expire_minutes == 24 * 60


def test_database_from_settings_uses_explicit_url():
    database = Database.from_settings(AppSettings(database_url="sqlite://"))
    try:
        assert database.dialect_name == "sqlite"
        assert database.engine.url.render_as_string() == "sqlite://"
    finally:
        database.dispose()


def test_schema_tables_exist(db):
    names = set(sa.inspect(db.engine).get_table_names())
    assert {"users", "categories", "products", "stock_movements"} <= names
