"""Relational schema for Newton.

These declarative models describe every table of both backing engines.
Column widths follow the client/server engine so the same definitions
produce valid DDL on SQLite and MariaDB alike.
"""

from datetime import timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.dialects.mysql import MEDIUMBLOB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

#: MariaDB table options; ignored by SQLite.
TABLE_OPTIONS = {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"}


class UTCDateTime(TypeDecorator):
    """DATETIME column holding UTC; values come back timezone-aware.

    Neither engine keeps an offset in DATETIME, so aware values are
    converted to UTC on the way in and naive ones are taken as UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def contact_fk(**kwargs) -> Column:
    """``contact_id`` column referencing ``contacts.id``."""
    return Column(Integer, ForeignKey("contacts.id"), nullable=False, **kwargs)


class DatabaseVersion(Base):
    """Singleton row tracking the schema version of the store."""

    __tablename__ = "database_version"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, default=0)


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    url = Column(String(2048), nullable=False)
    title = Column(String(1024), nullable=False, default="")
    owner_id = Column(Integer, nullable=False, index=True)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("uq_users_username", "username", unique=True),
        TABLE_OPTIONS,
    )

    id = Column(Integer, primary_key=True)
    username = Column(String(64), nullable=False)
    full_name = Column(String(128), nullable=False)
    password = Column(String(96), nullable=False)


class Session(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        Index("uq_sessions_access_token", "access_token", unique=True),
        TABLE_OPTIONS,
    )

    id = Column(Integer, primary_key=True)
    access_token = Column(String(64), nullable=False)
    user_id = Column(Integer, nullable=False)
    creation_date = Column(UTCDateTime(), nullable=False)


class Contact(Base):
    """Root row of the contact aggregate."""

    __tablename__ = "contacts"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    nickname = Column(String(128), nullable=True)
    note = Column(Text, nullable=True)
    owner_id = Column(Integer, nullable=False, index=True)


class ContactName(Base):
    __tablename__ = "contacts_name"
    __table_args__ = TABLE_OPTIONS

    contact_id = contact_fk(primary_key=True, autoincrement=False)
    display_name = Column(String(256))
    prefix = Column(String(64))
    given_name = Column(String(128))
    middle_name = Column(String(128))
    family_name = Column(String(128))
    suffix = Column(String(64))
    phonetic_given_name = Column(String(128))
    phonetic_middle_name = Column(String(128))
    phonetic_family_name = Column(String(128))


class ContactEmail(Base):
    __tablename__ = "contacts_emails"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    address = Column(String(320))
    type = Column(Integer)
    label = Column(String(64))


class ContactPhone(Base):
    __tablename__ = "contacts_phones"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    number = Column(String(128))
    type = Column(Integer)
    label = Column(String(64))


class ContactIMAccount(Base):
    __tablename__ = "contacts_im_accounts"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    handle = Column(String(128))
    type = Column(Integer)
    label = Column(String(64))
    protocol = Column(Integer)
    custom_protocol = Column(String(64))


class ContactOrganization(Base):
    __tablename__ = "contacts_organization"
    __table_args__ = TABLE_OPTIONS

    contact_id = contact_fk(primary_key=True, autoincrement=False)
    company = Column(String(128))
    title = Column(String(64))


class ContactRelation(Base):
    __tablename__ = "contacts_relations"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    name = Column(String(128))
    type = Column(Integer)
    label = Column(String(64))


class ContactPostalAddress(Base):
    __tablename__ = "contacts_postal_addresses"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    street = Column(String(256))
    po_box = Column(String(16))
    neighborhood = Column(String(128))
    city = Column(String(128))
    region = Column(String(128))
    post_code = Column(String(16))
    country = Column(String(96))
    type = Column(Integer)
    label = Column(String(64))


class ContactWebsite(Base):
    __tablename__ = "contacts_websites"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    address = Column(String(2048))


class ContactEvent(Base):
    __tablename__ = "contacts_events"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    contact_id = contact_fk(index=True)
    start_date = Column(String(48))
    type = Column(Integer)
    label = Column(String(64))


class ContactPhoto(Base):
    __tablename__ = "contacts_photo"
    __table_args__ = TABLE_OPTIONS

    contact_id = contact_fk(primary_key=True, autoincrement=False)
    photo = Column(
        LargeBinary().with_variant(MEDIUMBLOB(), "mysql", "mariadb"),
        nullable=False,
    )


class LocationRecord(Base):
    __tablename__ = "locations"
    __table_args__ = TABLE_OPTIONS

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)


#: Child tables of the contact aggregate, in the order they are written.
CONTACT_CHILD_TABLES = (
    ContactName,
    ContactEmail,
    ContactPhone,
    ContactIMAccount,
    ContactOrganization,
    ContactRelation,
    ContactPostalAddress,
    ContactWebsite,
    ContactEvent,
    ContactPhoto,
)
