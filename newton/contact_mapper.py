"""Mapping of the Contact aggregate onto its relational tables.

A contact is one root row in ``contacts`` plus rows in the ``contacts_*``
child tables, each linked by ``contact_id``. Writes and deletes run inside
the caller's transaction, statement by statement in a fixed order; reads
issue one query per table and assemble the result without joins.
"""

import logging
from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from . import models, schemas
from .dialects import Dialect
from .errors import NotFoundError

logger = logging.getLogger(__name__)

#: Repeatable sub-records: contact attribute, table model, entity class.
COLLECTIONS = (
    ("emails", models.ContactEmail, schemas.Email),
    ("phones", models.ContactPhone, schemas.Phone),
    ("im_accounts", models.ContactIMAccount, schemas.IMAccount),
    ("relations", models.ContactRelation, schemas.Relation),
    ("postal_addresses", models.ContactPostalAddress, schemas.PostalAddress),
    ("events", models.ContactEvent, schemas.Event),
)


def create_contact(db: Session, contact: schemas.Contact) -> int:
    """
    Write a whole contact and return the id the store assigned to it.

    Any ``id`` already set on ``contact`` is ignored. The name row is written
    even when the contact has no name, so every contact owns exactly one.

    Args:
        db (Session): Session with an open transaction.
        contact (Contact): Aggregate to store; ``owner_id`` must be set.

    Returns:
        int: Identifier of the new contact.

    Raises:
        ValidationError: If a sub-record breaks the custom/label pairing.
    """
    # sub-records may have been changed after construction
    schemas.Contact.model_validate(contact.model_dump())

    root = models.Contact(
        nickname=contact.nickname,
        note=contact.note,
        owner_id=contact.owner_id,
    )
    db.add(root)
    db.flush()
    contact_id = root.id

    name = contact.name or schemas.StructuredName()
    db.execute(
        insert(models.ContactName).values(contact_id=contact_id, **name.model_dump())
    )

    for attr, model, _ in COLLECTIONS:
        rows = [
            dict(item.model_dump(), contact_id=contact_id)
            for item in getattr(contact, attr)
        ]
        if rows:
            db.execute(insert(model), rows)

    if contact.organization is not None:
        db.execute(
            insert(models.ContactOrganization).values(
                contact_id=contact_id, **contact.organization.model_dump()
            )
        )

    if contact.websites:
        db.execute(
            insert(models.ContactWebsite),
            [{"contact_id": contact_id, "address": address} for address in contact.websites],
        )

    logger.debug("contact written", extra={"contact_id": contact_id, "owner_id": contact.owner_id})
    return contact_id


def contact_exists(db: Session, contact_id: int) -> bool:
    stmt = select(models.Contact.id).where(models.Contact.id == contact_id)
    return db.execute(stmt).first() is not None


def _read_collection(db: Session, model, entity, contact_id: int) -> list:
    rows = db.execute(
        select(model).where(model.contact_id == contact_id).order_by(model.id)
    ).scalars()
    return [entity.model_validate(row, from_attributes=True) for row in rows]


def get_contact(db: Session, contact_id: int, owner_id: int) -> Optional[schemas.Contact]:
    """
    Read a contact owned by ``owner_id``.

    Returns ``None`` when the contact does not exist or belongs to another
    owner. A missing or entirely empty name row reads as ``name=None``, the
    same way a missing organization row reads as ``organization=None``.
    """
    root = db.execute(
        select(models.Contact).where(
            models.Contact.id == contact_id,
            models.Contact.owner_id == owner_id,
        )
    ).scalar_one_or_none()
    if root is None:
        return None

    contact = schemas.Contact(
        id=root.id,
        owner_id=root.owner_id,
        nickname=root.nickname,
        note=root.note,
    )

    name_row = db.get(models.ContactName, contact_id)
    if name_row is not None:
        name = schemas.StructuredName.model_validate(name_row, from_attributes=True)
        contact.name = None if name.is_empty() else name

    for attr, model, entity in COLLECTIONS:
        setattr(contact, attr, _read_collection(db, model, entity, contact_id))

    org_row = db.get(models.ContactOrganization, contact_id)
    if org_row is not None:
        contact.organization = schemas.Organization.model_validate(
            org_row, from_attributes=True
        )

    contact.websites = list(
        db.execute(
            select(models.ContactWebsite.address)
            .where(models.ContactWebsite.contact_id == contact_id)
            .order_by(models.ContactWebsite.id)
        ).scalars()
    )
    return contact


def list_contacts(db: Session, owner_id: int) -> list[schemas.Contact]:
    """Read every contact of ``owner_id``, ordered by id."""
    ids = db.execute(
        select(models.Contact.id)
        .where(models.Contact.owner_id == owner_id)
        .order_by(models.Contact.id)
    ).scalars().all()
    return [get_contact(db, contact_id, owner_id) for contact_id in ids]


def delete_contact(db: Session, contact_id: int, owner_id: int) -> None:
    """
    Remove a contact with every child row, photo included.

    Raises:
        NotFoundError: If no contact matches ``(contact_id, owner_id)``.
    """
    owned = db.execute(
        select(models.Contact.id).where(
            models.Contact.id == contact_id,
            models.Contact.owner_id == owner_id,
        )
    ).first()
    if owned is None:
        raise NotFoundError(f"contact {contact_id} not found")

    for model in models.CONTACT_CHILD_TABLES:
        db.execute(delete(model).where(model.contact_id == contact_id))
    db.execute(delete(models.Contact).where(models.Contact.id == contact_id))
    logger.debug("contact removed", extra={"contact_id": contact_id, "owner_id": owner_id})


def set_photo(db: Session, dialect: Dialect, contact_id: int, photo: Optional[bytes]) -> None:
    """Store or replace the photo of a contact; ``None`` removes it."""
    if not contact_exists(db, contact_id):
        raise NotFoundError(f"contact {contact_id} not found")
    if photo is None:
        db.execute(
            delete(models.ContactPhoto).where(models.ContactPhoto.contact_id == contact_id)
        )
        return
    db.execute(
        dialect.upsert(
            models.ContactPhoto.__table__,
            {"contact_id": contact_id, "photo": photo},
            "contact_id",
        )
    )


def get_photo(db: Session, contact_id: int) -> Optional[bytes]:
    return db.execute(
        select(models.ContactPhoto.photo).where(models.ContactPhoto.contact_id == contact_id)
    ).scalar_one_or_none()


def get_owner(db: Session, contact_id: int) -> Optional[int]:
    return db.execute(
        select(models.Contact.owner_id).where(models.Contact.id == contact_id)
    ).scalar_one_or_none()
