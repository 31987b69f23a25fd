from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import (
    EmailType,
    EventType,
    IMProtocol,
    IMType,
    PhoneType,
    PostalAddressType,
    RelationType,
)


def _check_custom_pairing(value, companion: Optional[str], field: str) -> None:
    """Require ``companion`` exactly when ``value`` is its enum's CUSTOM member."""
    is_custom = value is type(value).CUSTOM
    has_companion = companion is not None and companion.strip() != ""
    if is_custom and not has_companion:
        raise ValueError(f"'{field}' is required when the type is CUSTOM")
    if not is_custom and companion is not None:
        raise ValueError(f"'{field}' is only allowed when the type is CUSTOM")


class TypedRecord(BaseModel):
    """Shared ``type``/``label`` handling for contact sub-records."""

    model_config = ConfigDict(validate_assignment=True)

    label: Optional[str] = None

    @model_validator(mode="after")
    def check_label(self):
        _check_custom_pairing(self.type, self.label, "label")
        return self


class StructuredName(BaseModel):
    """A contact's name, broken into its parts."""

    display_name: Optional[str] = None
    prefix: Optional[str] = None
    given_name: Optional[str] = None
    middle_name: Optional[str] = None
    family_name: Optional[str] = None
    suffix: Optional[str] = None
    phonetic_given_name: Optional[str] = None
    phonetic_middle_name: Optional[str] = None
    phonetic_family_name: Optional[str] = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class Email(TypedRecord):
    address: Optional[str] = None
    type: EmailType


class Phone(TypedRecord):
    number: Optional[str] = None
    type: PhoneType


class IMAccount(TypedRecord):
    """An instant messaging handle.

    ``custom_protocol`` follows the same rule as ``label``: it names the
    protocol when, and only when, ``protocol`` is CUSTOM.
    """

    handle: Optional[str] = None
    type: IMType
    protocol: IMProtocol
    custom_protocol: Optional[str] = None

    @model_validator(mode="after")
    def check_protocol(self):
        _check_custom_pairing(self.protocol, self.custom_protocol, "custom_protocol")
        return self


class Organization(BaseModel):
    company: Optional[str] = None
    title: Optional[str] = None


class Relation(TypedRecord):
    name: Optional[str] = None
    type: RelationType


class PostalAddress(TypedRecord):
    street: Optional[str] = None
    po_box: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    post_code: Optional[str] = None
    country: Optional[str] = None
    type: PostalAddressType


class Event(TypedRecord):
    start_date: Optional[str] = None
    type: EventType


class ContactIn(BaseModel):
    """Contact payload as submitted by clients."""

    nickname: Optional[str] = None
    note: Optional[str] = None
    name: Optional[StructuredName] = None
    emails: List[Email] = Field(default_factory=list)
    phones: List[Phone] = Field(default_factory=list)
    im_accounts: List[IMAccount] = Field(default_factory=list)
    organization: Optional[Organization] = None
    relations: List[Relation] = Field(default_factory=list)
    postal_addresses: List[PostalAddress] = Field(default_factory=list)
    websites: List[str] = Field(default_factory=list)
    events: List[Event] = Field(default_factory=list)


class Contact(ContactIn):
    """A contact with all of its sub-records."""

    id: Optional[int] = None
    owner_id: Optional[int] = None


class BookmarkIn(BaseModel):
    """Schema for creating or editing a bookmark."""

    url: str
    title: str = ""


class Bookmark(BookmarkIn):
    id: Optional[int] = None
    owner_id: Optional[int] = None


class User(BaseModel):
    """Stored user. ``password`` always holds a hash."""

    id: Optional[int] = None
    username: str
    full_name: str
    password: str


class UserCreate(BaseModel):
    """Payload for creating a new user."""

    username: str = Field(min_length=1)
    full_name: str
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    """Payload for editing a user (all fields optional)."""

    username: Optional[str] = Field(default=None, min_length=1)
    full_name: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=1)


class UserOut(BaseModel):
    """Response schema for user data; never carries the password."""

    id: int
    username: str
    full_name: str

    model_config = ConfigDict(from_attributes=True)


class Credentials(BaseModel):
    username: str = Field(min_length=1)
    password: str


class Session(BaseModel):
    """An authenticated session."""

    id: Optional[int] = None
    access_token: Optional[str] = None
    user_id: int
    creation_date: Optional[datetime] = None


class LocationRecord(BaseModel):
    """A single location fix reported by a client."""

    timestamp: int
    latitude: float
    longitude: float
    owner_id: Optional[int] = None
