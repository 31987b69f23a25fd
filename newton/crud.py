"""Row mappers for bookmarks, users, sessions and location records.

Every function works inside a transaction owned by the caller and takes
the open SQLAlchemy session as its first argument. Single-entity lookups
return ``None`` when nothing matches; mutations of missing rows raise
:class:`~newton.errors.NotFoundError`.
"""

import secrets
import string
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import NotFoundError

TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_access_token(length: int = 32) -> str:
    """Return a random alphanumeric token drawn from ``secrets``."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


# -------------------------- bookmarks --------------------------
def get_bookmark(db: Session, bookmark_id: int, owner_id: int) -> schemas.Bookmark | None:
    """
    Retrieve a bookmark owned by ``owner_id``.

    A bookmark owned by somebody else is reported exactly like a missing one.
    """
    row = db.execute(
        select(models.Bookmark).where(
            models.Bookmark.id == bookmark_id,
            models.Bookmark.owner_id == owner_id,
        )
    ).scalar_one_or_none()
    if row is None:
        return None
    return schemas.Bookmark.model_validate(row, from_attributes=True)


def bookmark_exists(db: Session, bookmark_id: int) -> bool:
    stmt = select(models.Bookmark.id).where(models.Bookmark.id == bookmark_id)
    return db.execute(stmt).first() is not None


def list_bookmarks(
    db: Session, owner_id: int, page_size: int = 0, page: int = 0
) -> list[schemas.Bookmark]:
    """
    Retrieve one page of a user's bookmarks, ordered by id.

    Args:
        db (Session): Database session.
        owner_id (int): Bookmark owner.
        page_size (int): Rows per page; ``0`` disables paging.
        page (int): Zero-based page number.

    Returns:
        list[Bookmark]: Bookmarks on the requested page.
    """
    stmt = (
        select(models.Bookmark)
        .where(models.Bookmark.owner_id == owner_id)
        .order_by(models.Bookmark.id)
    )
    if page_size > 0:
        stmt = stmt.limit(page_size)
    if page > 0:
        stmt = stmt.offset(page * page_size)
    return [
        schemas.Bookmark.model_validate(row, from_attributes=True)
        for row in db.execute(stmt).scalars()
    ]


def create_bookmark(db: Session, bookmark: schemas.Bookmark) -> int:
    """Persist a new bookmark and return its id; any supplied id is ignored."""
    row = models.Bookmark(
        url=bookmark.url,
        title=bookmark.title,
        owner_id=bookmark.owner_id,
    )
    db.add(row)
    db.flush()
    return row.id


def edit_bookmark(db: Session, bookmark: schemas.Bookmark) -> None:
    """Overwrite url and title of a bookmark, matched by id and owner."""
    result = db.execute(
        update(models.Bookmark)
        .where(
            models.Bookmark.id == bookmark.id,
            models.Bookmark.owner_id == bookmark.owner_id,
        )
        .values(url=bookmark.url, title=bookmark.title)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"bookmark {bookmark.id} not found")


def delete_bookmark(db: Session, bookmark_id: int, owner_id: int) -> None:
    result = db.execute(
        delete(models.Bookmark).where(
            models.Bookmark.id == bookmark_id,
            models.Bookmark.owner_id == owner_id,
        )
    )
    if result.rowcount == 0:
        raise NotFoundError(f"bookmark {bookmark_id} not found")


# -------------------------- users --------------------------
def get_user(db: Session, user_id: int) -> schemas.User | None:
    row = db.get(models.User, user_id)
    if row is None:
        return None
    return schemas.User.model_validate(row, from_attributes=True)


def user_exists(db: Session, user_id: int) -> bool:
    stmt = select(models.User.id).where(models.User.id == user_id)
    return db.execute(stmt).first() is not None


def get_user_by_username(db: Session, username: str) -> schemas.User | None:
    """Retrieve a user by username, as needed for authentication."""
    row = db.execute(
        select(models.User).where(models.User.username == username)
    ).scalar_one_or_none()
    if row is None:
        return None
    return schemas.User.model_validate(row, from_attributes=True)


def create_user(db: Session, user: schemas.User) -> int:
    """
    Persist a new user.

    Args:
        db (Session): Database session.
        user (User): User whose ``password`` is already hashed.

    Returns:
        int: Identifier of the new user.
    """
    row = models.User(
        username=user.username,
        full_name=user.full_name,
        password=user.password,
    )
    db.add(row)
    db.flush()
    return row.id


def edit_user(db: Session, user: schemas.User) -> None:
    """Overwrite every column of the user row matching ``user.id``."""
    result = db.execute(
        update(models.User)
        .where(models.User.id == user.id)
        .values(
            username=user.username,
            full_name=user.full_name,
            password=user.password,
        )
    )
    if result.rowcount == 0:
        raise NotFoundError(f"user {user.id} not found")


# -------------------------- sessions --------------------------
def create_session(db: Session, session: schemas.Session, token_length: int = 32) -> int:
    """
    Persist a session and return its id.

    A missing access token or creation date is generated here and written
    back onto ``session`` so the caller can hand it to the client.
    """
    if not session.access_token:
        session.access_token = generate_access_token(token_length)
    if session.creation_date is None:
        session.creation_date = datetime.now(timezone.utc)
    row = models.Session(
        access_token=session.access_token,
        user_id=session.user_id,
        creation_date=session.creation_date,
    )
    db.add(row)
    db.flush()
    session.id = row.id
    return row.id


def get_session_by_access_token(db: Session, token: str) -> schemas.Session | None:
    row = db.execute(
        select(models.Session).where(models.Session.access_token == token)
    ).scalar_one_or_none()
    if row is None:
        return None
    return schemas.Session.model_validate(row, from_attributes=True)


# -------------------------- locations --------------------------
def add_location_record(db: Session, record: schemas.LocationRecord) -> None:
    db.add(
        models.LocationRecord(
            owner_id=record.owner_id,
            timestamp=record.timestamp,
            latitude=record.latitude,
            longitude=record.longitude,
        )
    )
    db.flush()
