"""Bookmark routes for the Newton API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from . import schemas
from .auth import get_current_user_id
from .core import get_settings
from .database import NewtonDB, get_db

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.post("", response_model=schemas.Bookmark, status_code=status.HTTP_201_CREATED)
def create_bookmark(
    bookmark_in: schemas.BookmarkIn,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Store a bookmark owned by the authenticated user."""
    bookmark = schemas.Bookmark(**bookmark_in.model_dump(), owner_id=current_user_id)
    bookmark.id = db.create_bookmark(bookmark)
    return bookmark


@router.get("", response_model=List[schemas.Bookmark])
def list_bookmarks(
    page: int = Query(0, ge=0),
    page_size: Optional[int] = Query(None, ge=1),
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Retrieve one page of the authenticated user's bookmarks.

    Args:
        page (int): Zero-based page number.
        page_size (int | None): Bookmarks per page; the configured
            ``DEFAULT_PAGE_SIZE`` when omitted.
        db (NewtonDB): Store handle.
        current_user_id (int): Authenticated user.

    Returns:
        list[Bookmark]: Bookmarks on the page, ordered by id.
    """
    if page_size is None:
        page_size = get_settings().DEFAULT_PAGE_SIZE
    return db.bookmarks(current_user_id, page_size=page_size, page=page)


@router.get("/{bookmark_id}", response_model=schemas.Bookmark)
def get_bookmark(
    bookmark_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    bookmark = db.bookmark(bookmark_id, current_user_id)
    if bookmark is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"bookmark {bookmark_id} not found",
        )
    return bookmark


@router.put("/{bookmark_id}", response_model=schemas.Bookmark)
def update_bookmark(
    bookmark_id: int,
    bookmark_in: schemas.BookmarkIn,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Overwrite url and title of one of the user's bookmarks."""
    bookmark = schemas.Bookmark(
        **bookmark_in.model_dump(), id=bookmark_id, owner_id=current_user_id
    )
    db.edit_bookmark(bookmark)
    return bookmark


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bookmark(
    bookmark_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    db.delete_bookmark(bookmark_id, current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
