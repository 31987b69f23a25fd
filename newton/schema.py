"""Schema versioning and forward-only migrations.

The store keeps its schema version in the single row of
``database_version``. Each migration moves the store from version ``n`` to
``n + 1`` inside one transaction, so a failing step leaves both the tables
and the recorded version exactly as they were. There is no downgrade path.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from . import models
from .dialects import Dialect
from .errors import MigrationError

logger = logging.getLogger(__name__)

Migration = Callable[[Connection, Dialect], None]

#: Tables of the first schema generation.
INITIAL_MODELS = (
    models.Bookmark,
    models.User,
    models.Session,
    models.Contact,
) + models.CONTACT_CHILD_TABLES


def _create_initial_tables(conn: Connection, dialect: Dialect) -> None:
    models.Base.metadata.create_all(
        conn, tables=[model.__table__ for model in INITIAL_MODELS], checkfirst=True
    )


def _add_unique_indexes_and_locations(conn: Connection, dialect: Dialect) -> None:
    for model in (models.User, models.Session):
        for index in model.__table__.indexes:
            if index.unique:
                index.create(conn, checkfirst=True)
    models.LocationRecord.__table__.create(conn, checkfirst=True)


#: ``MIGRATIONS[n]`` upgrades a store from version ``n`` to ``n + 1``.
MIGRATIONS: tuple[Migration, ...] = (
    _create_initial_tables,
    _add_unique_indexes_and_locations,
)
LATEST_VERSION = len(MIGRATIONS)


def ensure_schema(conn: Connection) -> None:
    """Create the version table and its singleton row (version 0) if absent."""
    models.DatabaseVersion.__table__.create(conn, checkfirst=True)
    if _read_version(conn) is None:
        conn.execute(insert(models.DatabaseVersion).values(version=0))


def _read_version(conn: Connection) -> int | None:
    return conn.execute(
        select(models.DatabaseVersion.version)
        .order_by(models.DatabaseVersion.id)
        .limit(1)
    ).scalar_one_or_none()


def current_version(conn: Connection) -> int:
    """Return the recorded schema version, or 0 for a store never initialised."""
    version = _read_version(conn)
    return version or 0


def migrate(
    engine: Engine,
    dialect: Dialect,
    version: int,
    migrations: Sequence[Migration] = MIGRATIONS,
) -> int:
    """Apply the single step that moves the store past ``version``.

    Returns:
        int: The new schema version.

    Raises:
        MigrationError: If any statement of the step fails; the transaction
            is rolled back and the recorded version stays at ``version``.
    """
    if not 0 <= version < len(migrations):
        raise ValueError(f"no migration starts at version {version}")
    step = migrations[version]
    try:
        with engine.begin() as conn:
            step(conn, dialect)
            conn.execute(update(models.DatabaseVersion).values(version=version + 1))
    except SQLAlchemyError as exc:
        logger.error(
            "schema migration failed",
            extra={"from_version": version, "dialect": dialect.name},
        )
        raise MigrationError(
            f"error migrating {dialect.name} schema from {version} to {version + 1} - {exc}",
            version=version,
        ) from exc
    logger.info(
        "schema migrated",
        extra={"from_version": version, "to_version": version + 1, "dialect": dialect.name},
    )
    return version + 1


def upgrade(
    engine: Engine,
    dialect: Dialect,
    migrations: Sequence[Migration] = MIGRATIONS,
) -> int:
    """Bring the store up to the newest schema version.

    Safe to call on every start: an up-to-date store is left untouched.
    """
    with engine.begin() as conn:
        ensure_schema(conn)
        version = current_version(conn)

    if version > len(migrations):
        raise MigrationError(
            f"store schema version {version} is newer than this release supports",
            version=version,
        )
    while version < len(migrations):
        version = migrate(engine, dialect, version, migrations)
    return version


if __name__ == "__main__":
    from .core import get_settings
    from .dialects import dialect_for_url

    settings = get_settings()
    dialect = dialect_for_url(settings.DATABASE_URL)
    engine = dialect.create_engine(settings.DATABASE_URL, settings)
    print(f"schema version {upgrade(engine, dialect)}")
