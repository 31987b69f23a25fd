"""User-related routes for the Newton API."""

from fastapi import APIRouter, Depends, HTTPException, status

from . import schemas
from .auth import get_current_user_id, get_password_hash
from .database import NewtonDB, get_db

router = APIRouter(prefix="/users", tags=["users"])


def _username_taken(db: NewtonDB, username: str, user_id: int | None = None) -> bool:
    existing = db.user_by_username(username)
    return existing is not None and existing.id != user_id


@router.post("", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user_in: schemas.UserCreate, db: NewtonDB = Depends(get_db)):
    """
    Register a new user.

    Args:
        user_in (UserCreate): Username, full name and plain password.
        db (NewtonDB): Store handle.

    Raises:
        HTTPException: 409 if the username is already registered.

    Returns:
        UserOut: The created user, without its password.
    """
    if _username_taken(db, user_in.username):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="username already registered"
        )
    user = schemas.User(
        username=user_in.username,
        full_name=user_in.full_name,
        password=get_password_hash(user_in.password),
    )
    user.id = db.create_user(user)
    return user


def _own_user(db: NewtonDB, user_id: int, current_user_id: int) -> schemas.User:
    user = db.user(user_id) if user_id == current_user_id else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"user {user_id} not found"
        )
    return user


@router.get("/{user_id}", response_model=schemas.UserOut)
def read_user(
    user_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Retrieve the authenticated user's profile; other users read as 404."""
    return _own_user(db, user_id, current_user_id)


@router.put("/{user_id}", response_model=schemas.UserOut)
def update_user(
    user_id: int,
    user_in: schemas.UserUpdate,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Edit the authenticated user's profile.

    Only fields present in the payload change; a new password is hashed
    before it is stored.
    """
    user = _own_user(db, user_id, current_user_id)
    if user_in.username is not None and _username_taken(db, user_in.username, user_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="username already registered"
        )

    changes = user_in.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in changes:
        changes["password"] = get_password_hash(changes["password"])
    user = user.model_copy(update=changes)
    db.edit_user(user)
    return user
