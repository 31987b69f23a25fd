"""Runs against a real MariaDB server when NEWTON_TEST_MARIADB_URL is set."""

import os

import pytest
from sqlalchemy import inspect, text

from newton.database import open_database
from newton.enums import EmailType, PhoneType
from newton.schema import LATEST_VERSION
from newton.schemas import Bookmark, Contact, Email, Phone, StructuredName

MARIADB_URL = os.environ.get("NEWTON_TEST_MARIADB_URL")

pytestmark = pytest.mark.skipif(
    not MARIADB_URL, reason="NEWTON_TEST_MARIADB_URL is not set"
)


@pytest.fixture()
def mariadb():
    handle = open_database(MARIADB_URL)
    yield handle
    with handle.engine.begin() as conn:
        conn.execute(text("SET FOREIGN_KEY_CHECKS = 0"))
        for table in inspect(conn).get_table_names():
            conn.execute(text(f"DROP TABLE IF EXISTS `{table}`"))
        conn.execute(text("SET FOREIGN_KEY_CHECKS = 1"))
    handle.close()


def test_schema_is_current(mariadb):
    assert mariadb.schema_version() == LATEST_VERSION


def test_contact_round_trip(mariadb):
    contact = Contact(
        owner_id=1,
        nickname="Grace",
        name=StructuredName(given_name="Grace", family_name="Hopper"),
        emails=[Email(address="grace@example.com", type=EmailType.WORK)],
        phones=[Phone(number="555-0100", type=PhoneType.MOBILE)],
        websites=["https://example.com/grace"],
    )
    contact_id = mariadb.create_contact(contact)

    stored = mariadb.contact(contact_id, 1)
    assert stored.model_dump(exclude={"id"}) == contact.model_dump(exclude={"id"})
    assert mariadb.contact(contact_id, 2) is None

    mariadb.set_contact_photo(contact_id, b"one")
    mariadb.set_contact_photo(contact_id, b"two")
    assert mariadb.contact_photo(contact_id) == b"two"

    mariadb.delete_contact(contact_id, 1)
    assert not mariadb.contact_exists(contact_id)
    assert mariadb.contact_photo(contact_id) is None


def test_bookmark_paging(mariadb):
    for n in range(25):
        mariadb.create_bookmark(Bookmark(url=f"https://example.com/{n}", owner_id=1))

    assert len(mariadb.bookmarks(1, page_size=10, page=1)) == 10
    assert len(mariadb.bookmarks(1, page_size=10, page=2)) == 5
