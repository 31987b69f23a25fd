"""Location reporting routes for the Newton API."""

from fastapi import APIRouter, Depends, status

from . import schemas
from .auth import get_current_user_id
from .database import NewtonDB, get_db

router = APIRouter(prefix="/locations", tags=["locations"])


@router.post("", response_model=schemas.LocationRecord, status_code=status.HTTP_201_CREATED)
def create_location_record(
    record_in: schemas.LocationRecord,
    db: NewtonDB = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Store a location fix for the current user; any ``owner_id`` sent is replaced."""
    record = record_in.model_copy(update={"owner_id": current_user_id})
    db.add_location_record(record)
    return record
