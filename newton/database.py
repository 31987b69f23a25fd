"""Persistence facade.

:class:`NewtonDB` lists every operation the rest of Newton may perform on the
store. One instance is opened at startup with :func:`open_database`, kept on
``app.state.db`` and handed to request handlers through :func:`get_db`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Request

from . import schemas
from .core import Settings, get_settings
from .dialects import dialect_for_url
from .schema import upgrade

logger = logging.getLogger(__name__)


class NewtonDB(ABC):
    """Every operation a backing store must support.

    Single-entity fetches return ``None`` when nothing matches (including
    entities owned by somebody else). Storage failures surface as
    :class:`~newton.errors.StorageError`; mutations of missing entities as
    :class:`~newton.errors.NotFoundError`.
    """

    # bookmarks
    @abstractmethod
    def bookmark(self, bookmark_id: int, owner_id: int) -> Optional[schemas.Bookmark]: ...

    @abstractmethod
    def bookmark_exists(self, bookmark_id: int) -> bool: ...

    @abstractmethod
    def bookmarks(
        self, owner_id: int, page_size: int = 0, page: int = 0
    ) -> list[schemas.Bookmark]: ...

    @abstractmethod
    def create_bookmark(self, bookmark: schemas.Bookmark) -> int: ...

    @abstractmethod
    def edit_bookmark(self, bookmark: schemas.Bookmark) -> None: ...

    @abstractmethod
    def delete_bookmark(self, bookmark_id: int, owner_id: int) -> None: ...

    # users
    @abstractmethod
    def user(self, user_id: int) -> Optional[schemas.User]: ...

    @abstractmethod
    def user_exists(self, user_id: int) -> bool: ...

    @abstractmethod
    def user_by_username(self, username: str) -> Optional[schemas.User]: ...

    @abstractmethod
    def create_user(self, user: schemas.User) -> int: ...

    @abstractmethod
    def edit_user(self, user: schemas.User) -> None: ...

    # sessions
    @abstractmethod
    def create_session(self, session: schemas.Session) -> int: ...

    @abstractmethod
    def session_by_access_token(self, token: str) -> Optional[schemas.Session]: ...

    # contacts
    @abstractmethod
    def create_contact(self, contact: schemas.Contact) -> int: ...

    @abstractmethod
    def contact_exists(self, contact_id: int) -> bool: ...

    @abstractmethod
    def contact(self, contact_id: int, owner_id: int) -> Optional[schemas.Contact]: ...

    @abstractmethod
    def contacts(self, owner_id: int) -> list[schemas.Contact]: ...

    @abstractmethod
    def delete_contact(self, contact_id: int, owner_id: int) -> None: ...

    @abstractmethod
    def set_contact_photo(self, contact_id: int, photo: Optional[bytes]) -> None: ...

    @abstractmethod
    def contact_photo(self, contact_id: int) -> Optional[bytes]: ...

    @abstractmethod
    def contact_owner(self, contact_id: int) -> Optional[int]: ...

    # locations
    @abstractmethod
    def add_location_record(self, record: schemas.LocationRecord) -> None: ...

    # housekeeping
    @abstractmethod
    def schema_version(self) -> int: ...

    @abstractmethod
    def close(self) -> None: ...


def open_database(url: Optional[str] = None, settings: Optional[Settings] = None) -> NewtonDB:
    """
    Open the store named by ``url`` and bring its schema up to date.

    Args:
        url (str | None): SQLAlchemy URL; defaults to ``settings.DATABASE_URL``.
        settings (Settings | None): Configuration; defaults to the cached one.

    Returns:
        NewtonDB: Handle bound to the store.

    Raises:
        ValueError: If the URL is empty or names an unsupported backend.
        MigrationError: If the schema cannot be brought up to date.
    """
    from .sqldb import SQLNewtonDB

    settings = settings or get_settings()
    url = settings.DATABASE_URL if url is None else url
    dialect = dialect_for_url(url)
    engine = dialect.create_engine(url, settings)
    try:
        dialect.verify(engine)
        version = upgrade(engine, dialect)
    except Exception:
        engine.dispose()
        raise
    logger.info(
        "database opened",
        extra={
            "dialect": dialect.name,
            "url": engine.url.render_as_string(hide_password=True),
            "schema_version": version,
        },
    )
    return SQLNewtonDB(engine, dialect, settings)


def get_db(request: Request) -> NewtonDB:
    """
    Return the store handle opened at startup.

    This function is used as a FastAPI dependency and is overridden in tests.
    """
    return request.app.state.db
