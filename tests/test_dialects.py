import pytest
from sqlalchemy import text
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from newton import models
from newton.core import Settings
from newton.dialects import Dialect, MariaDBDialect, SQLiteDialect, dialect_for_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite:///./newton.db", SQLiteDialect),
        ("sqlite://", SQLiteDialect),
        ("mysql+pymysql://newton:pw@localhost/newton", MariaDBDialect),
        ("mariadb+pymysql://newton:pw@localhost/newton", MariaDBDialect),
    ],
)
def test_dialect_for_url(url, expected):
    assert isinstance(dialect_for_url(url), expected)


def test_unsupported_backend():
    with pytest.raises(ValueError, match="unsupported"):
        dialect_for_url("postgresql://localhost/newton")


def test_dialect_base_needs_an_upsert():
    with pytest.raises(TypeError):
        Dialect()


def test_sqlite_upsert_statement():
    stmt = SQLiteDialect().upsert(
        models.ContactPhoto.__table__, {"contact_id": 1, "photo": b"x"}, "contact_id"
    )

    sql = str(stmt.compile(dialect=sqlite.dialect()))
    assert "ON CONFLICT (contact_id) DO UPDATE" in sql
    assert "excluded.photo" in sql


def test_mariadb_upsert_statement():
    stmt = MariaDBDialect().upsert(
        models.ContactPhoto.__table__, {"contact_id": 1, "photo": b"x"}, "contact_id"
    )

    sql = str(stmt.compile(dialect=mysql.dialect()))
    assert "ON DUPLICATE KEY UPDATE photo" in sql


def test_in_memory_sqlite_shares_one_connection():
    engine = SQLiteDialect().create_engine("sqlite://", Settings())
    try:
        assert isinstance(engine.pool, StaticPool)
    finally:
        engine.dispose()


def test_sqlite_enforces_foreign_keys(db):
    with pytest.raises(IntegrityError):
        with db.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO contacts_websites (contact_id, address) VALUES (404, 'x')")
            )


def test_mariadb_engine_options():
    options = MariaDBDialect().engine_options(None, Settings(DB_POOL_RECYCLE=120))

    assert options["pool_pre_ping"] is True
    assert options["pool_recycle"] == 120
