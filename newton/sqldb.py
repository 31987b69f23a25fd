"""SQLAlchemy implementation of :class:`~newton.database.NewtonDB`.

The same code serves both backing engines; whatever differs between them is
asked of the :class:`~newton.dialects.Dialect` the handle was opened with.
Each method runs in a transaction of its own that commits on return and
rolls back on any exception.
"""

from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from . import contact_mapper, crud, schemas
from .core import Settings, get_settings
from .database import NewtonDB
from .dialects import Dialect
from .errors import wrap_storage_errors
from .schema import current_version


class SQLNewtonDB(NewtonDB):
    """Store handle over a SQLAlchemy engine."""

    def __init__(self, engine: Engine, dialect: Dialect, settings: Optional[Settings] = None):
        self.engine = engine
        self.dialect = dialect
        self.settings = settings or get_settings()
        self.SessionLocal = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )

    # -------------------------- bookmarks --------------------------
    @wrap_storage_errors
    def bookmark(self, bookmark_id: int, owner_id: int) -> Optional[schemas.Bookmark]:
        with self.SessionLocal.begin() as db:
            return crud.get_bookmark(db, bookmark_id, owner_id)

    @wrap_storage_errors
    def bookmark_exists(self, bookmark_id: int) -> bool:
        with self.SessionLocal.begin() as db:
            return crud.bookmark_exists(db, bookmark_id)

    @wrap_storage_errors
    def bookmarks(self, owner_id: int, page_size: int = 0, page: int = 0) -> list[schemas.Bookmark]:
        with self.SessionLocal.begin() as db:
            return crud.list_bookmarks(db, owner_id, page_size, page)

    @wrap_storage_errors
    def create_bookmark(self, bookmark: schemas.Bookmark) -> int:
        with self.SessionLocal.begin() as db:
            return crud.create_bookmark(db, bookmark)

    @wrap_storage_errors
    def edit_bookmark(self, bookmark: schemas.Bookmark) -> None:
        with self.SessionLocal.begin() as db:
            crud.edit_bookmark(db, bookmark)

    @wrap_storage_errors
    def delete_bookmark(self, bookmark_id: int, owner_id: int) -> None:
        with self.SessionLocal.begin() as db:
            crud.delete_bookmark(db, bookmark_id, owner_id)

    # -------------------------- users --------------------------
    @wrap_storage_errors
    def user(self, user_id: int) -> Optional[schemas.User]:
        with self.SessionLocal.begin() as db:
            return crud.get_user(db, user_id)

    @wrap_storage_errors
    def user_exists(self, user_id: int) -> bool:
        with self.SessionLocal.begin() as db:
            return crud.user_exists(db, user_id)

    @wrap_storage_errors
    def user_by_username(self, username: str) -> Optional[schemas.User]:
        with self.SessionLocal.begin() as db:
            return crud.get_user_by_username(db, username)

    @wrap_storage_errors
    def create_user(self, user: schemas.User) -> int:
        with self.SessionLocal.begin() as db:
            return crud.create_user(db, user)

    @wrap_storage_errors
    def edit_user(self, user: schemas.User) -> None:
        with self.SessionLocal.begin() as db:
            crud.edit_user(db, user)

    # -------------------------- sessions --------------------------
    @wrap_storage_errors
    def create_session(self, session: schemas.Session) -> int:
        with self.SessionLocal.begin() as db:
            return crud.create_session(db, session, self.settings.ACCESS_TOKEN_LENGTH)

    @wrap_storage_errors
    def session_by_access_token(self, token: str) -> Optional[schemas.Session]:
        with self.SessionLocal.begin() as db:
            return crud.get_session_by_access_token(db, token)

    # -------------------------- contacts --------------------------
    @wrap_storage_errors
    def create_contact(self, contact: schemas.Contact) -> int:
        with self.SessionLocal.begin() as db:
            return contact_mapper.create_contact(db, contact)

    @wrap_storage_errors
    def contact_exists(self, contact_id: int) -> bool:
        with self.SessionLocal.begin() as db:
            return contact_mapper.contact_exists(db, contact_id)

    @wrap_storage_errors
    def contact(self, contact_id: int, owner_id: int) -> Optional[schemas.Contact]:
        with self.SessionLocal.begin() as db:
            return contact_mapper.get_contact(db, contact_id, owner_id)

    @wrap_storage_errors
    def contacts(self, owner_id: int) -> list[schemas.Contact]:
        with self.SessionLocal.begin() as db:
            return contact_mapper.list_contacts(db, owner_id)

    @wrap_storage_errors
    def delete_contact(self, contact_id: int, owner_id: int) -> None:
        with self.SessionLocal.begin() as db:
            contact_mapper.delete_contact(db, contact_id, owner_id)

    @wrap_storage_errors
    def set_contact_photo(self, contact_id: int, photo: Optional[bytes]) -> None:
        with self.SessionLocal.begin() as db:
            contact_mapper.set_photo(db, self.dialect, contact_id, photo)

    @wrap_storage_errors
    def contact_photo(self, contact_id: int) -> Optional[bytes]:
        with self.SessionLocal.begin() as db:
            return contact_mapper.get_photo(db, contact_id)

    @wrap_storage_errors
    def contact_owner(self, contact_id: int) -> Optional[int]:
        with self.SessionLocal.begin() as db:
            return contact_mapper.get_owner(db, contact_id)

    # -------------------------- locations --------------------------
    @wrap_storage_errors
    def add_location_record(self, record: schemas.LocationRecord) -> None:
        with self.SessionLocal.begin() as db:
            crud.add_location_record(db, record)

    # -------------------------- housekeeping --------------------------
    @wrap_storage_errors
    def schema_version(self) -> int:
        with self.engine.connect() as conn:
            return current_version(conn)

    def close(self) -> None:
        self.engine.dispose()
