"""Authentication related routes and helpers."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from . import schemas
from .core import get_settings
from .database import NewtonDB, get_db

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().BCRYPT_ROUNDS,
)
bearer_scheme = HTTPBearer(auto_error=False)
router = APIRouter(prefix="/sessions", tags=["sessions"])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash using the configured context."""
    return pwd_context.hash(password)


def get_current_user_id(
    access_token: Optional[str] = Query(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: NewtonDB = Depends(get_db),
) -> int:
    """
    Dependency that resolves the caller's user id from its session token.

    The token is read from the ``access_token`` query parameter, or from an
    ``Authorization: Bearer`` header when the parameter is absent.

    Raises:
        HTTPException: 401 if the token is missing or unknown.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="you need to be logged in to continue",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = access_token or (credentials.credentials if credentials else "")
    token = token.strip()
    if not token:
        raise unauthorized
    session = db.session_by_access_token(token)
    if session is None:
        raise unauthorized
    return session.user_id


@router.post("", response_model=schemas.Session)
def create_session(credentials: schemas.Credentials, db: NewtonDB = Depends(get_db)):
    """
    Log a user in and open a new session.

    Args:
        credentials (Credentials): Username and plain password.
        db (NewtonDB): Store handle.

    Raises:
        HTTPException: 401 if the username is unknown or the password wrong.

    Returns:
        Session: The session, carrying the access token to use from now on.
    """
    user = db.user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="incorrect 'username' and/or 'password'",
        )
    session = schemas.Session(user_id=user.id)
    db.create_session(session)
    return session
