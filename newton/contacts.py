"""Contact management routes for the Newton API."""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from . import schemas
from .auth import get_current_user_id
from .database import NewtonDB, get_db

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _not_found(contact_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"contact {contact_id} not found",
    )


def _require_owned(db: NewtonDB, contact_id: int, owner_id: int) -> None:
    if db.contact_owner(contact_id) != owner_id:
        raise _not_found(contact_id)


@router.post("", response_model=schemas.Contact, status_code=status.HTTP_201_CREATED)
def create_contact(
    contact_in: schemas.ContactIn,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Create a new contact owned by the current user.

    Args:
        contact_in (ContactIn): Contact with all of its sub-records.
        db (NewtonDB): Store handle.
        current_user_id (int): Authenticated user.

    Returns:
        Contact: The contact as stored.
    """
    contact = schemas.Contact.model_validate(
        {**contact_in.model_dump(), "owner_id": current_user_id}
    )
    contact_id = db.create_contact(contact)
    return db.contact(contact_id, current_user_id)


@router.get("", response_model=List[schemas.Contact])
def list_contacts(
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Retrieve every contact belonging to the current user."""
    return db.contacts(current_user_id)


@router.get("/{contact_id}", response_model=schemas.Contact)
def get_contact(
    contact_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Retrieve a single contact by ID for the current user.

    Raises:
        HTTPException: If the contact is not found or belongs to someone else.
    """
    contact = db.contact(contact_id, current_user_id)
    if contact is None:
        raise _not_found(contact_id)
    return contact


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(
    contact_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    db.delete_contact(contact_id, current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{contact_id}/photo")
def get_contact_photo(
    contact_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Return the raw photo bytes of a contact."""
    _require_owned(db, contact_id, current_user_id)
    photo = db.contact_photo(contact_id)
    if photo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"contact {contact_id} has no photo",
        )
    return Response(content=photo, media_type="application/octet-stream")


@router.put("/{contact_id}/photo", status_code=status.HTTP_204_NO_CONTENT)
def update_contact_photo(
    contact_id: int,
    file: UploadFile = File(...),
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Store or replace the photo of a contact.

    Args:
        contact_id (int): Contact identifier.
        file (UploadFile): Uploaded image; stored as is.
        db (NewtonDB): Store handle.
        current_user_id (int): Authenticated user.
    """
    _require_owned(db, contact_id, current_user_id)
    db.set_contact_photo(contact_id, file.file.read())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{contact_id}/photo", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact_photo(
    contact_id: int,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    _require_owned(db, contact_id, current_user_id)
    db.set_contact_photo(contact_id, None)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
