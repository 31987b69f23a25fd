"""Engine-specific behaviour of the two backing stores.

Everything that differs between the embedded SQLite file and a MariaDB
server lives here: engine options, connection hooks, the connectivity check
and upsert syntax. The rest of the persistence layer is written once against
SQLAlchemy and asks the active :class:`Dialect` for these pieces.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from sqlalchemy import Table, create_engine, event, text
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.dml import Insert

from .core import Settings

logger = logging.getLogger(__name__)


class Dialect(ABC):
    """Capabilities a backing engine provides to the persistence layer."""

    name = "generic"

    def engine_options(self, url: URL, settings: Settings) -> dict[str, Any]:
        return {"future": True, "echo": settings.SQL_ECHO}

    def create_engine(self, url: str | URL, settings: Settings) -> Engine:
        url = make_url(url)
        engine = create_engine(url, **self.engine_options(url, settings))
        self.configure(engine)
        return engine

    def configure(self, engine: Engine) -> None:
        """Install connection hooks on a freshly created engine."""

    def verify(self, engine: Engine) -> None:
        """Raise if the store cannot be reached."""
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    @abstractmethod
    def upsert(self, table: Table, values: Mapping[str, Any], key: str) -> Insert:
        """Statement inserting ``values`` or replacing the row sharing ``key``."""


class SQLiteDialect(Dialect):
    """Embedded single-file store."""

    name = "sqlite"

    def engine_options(self, url: URL, settings: Settings) -> dict[str, Any]:
        options = super().engine_options(url, settings)
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise every checkout sees an empty db
            options["poolclass"] = StaticPool
        return options

    def configure(self, engine: Engine) -> None:
        # pysqlite neither begins a transaction before DDL nor honours
        # foreign keys by default; take over BEGIN so migrations and
        # aggregate writes roll back as a whole.
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def upsert(self, table: Table, values: Mapping[str, Any], key: str) -> Insert:
        stmt = sqlite_insert(table).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[key],
            set_={name: stmt.excluded[name] for name in values if name != key},
        )


class MariaDBDialect(Dialect):
    """Client/server store reached over the network."""

    name = "mariadb"

    def engine_options(self, url: URL, settings: Settings) -> dict[str, Any]:
        options = super().engine_options(url, settings)
        options["pool_pre_ping"] = True
        options["pool_recycle"] = settings.DB_POOL_RECYCLE
        return options

    def verify(self, engine: Engine) -> None:
        try:
            super().verify(engine)
        except Exception:
            logger.error(
                "mariadb ping failed",
                extra={"url": engine.url.render_as_string(hide_password=True)},
            )
            raise

    def upsert(self, table: Table, values: Mapping[str, Any], key: str) -> Insert:
        stmt = mysql_insert(table).values(**values)
        return stmt.on_duplicate_key_update(
            {name: stmt.inserted[name] for name in values if name != key}
        )


DIALECTS: dict[str, type[Dialect]] = {
    "sqlite": SQLiteDialect,
    "mysql": MariaDBDialect,
    "mariadb": MariaDBDialect,
}


def dialect_for_url(url: str | URL) -> Dialect:
    """Return the dialect serving ``url``.

    Raises:
        ValueError: If the URL is empty or names an unsupported backend.
    """
    if not url:
        raise ValueError("database url is empty")
    parsed = make_url(url)
    backend: Optional[str] = parsed.get_backend_name()
    try:
        return DIALECTS[backend]()
    except KeyError:
        raise ValueError(f"unsupported database backend '{backend}'") from None
