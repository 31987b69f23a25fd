from fastapi import status
from sqlalchemy import text


NEW_CONTACT = {
    "nickname": "Johnny",
    "name": {"given_name": "John", "family_name": "Doe"},
    "emails": [
        {"address": "john@example.com", "type": 1},
        {"address": "john@club.example.com", "type": 0, "label": "club"},
    ],
    "phones": [{"number": "12345", "type": 2}],
    "im_accounts": [{"handle": "jdoe", "type": 0, "label": "old", "protocol": 7}],
    "organization": {"company": "Acme", "title": "Engineer"},
    "websites": ["https://john.example.com"],
    "events": [{"start_date": "1990-04-01", "type": 3}],
}


def test_create_and_list_contacts(client, make_user, login):
    make_user("ada")
    auth = {"access_token": login("ada")}

    create_resp = client.post("/1/contacts", params=auth, json=NEW_CONTACT)
    assert create_resp.status_code == status.HTTP_201_CREATED
    created = create_resp.json()
    assert created["id"] > 0
    assert created["name"]["given_name"] == "John"
    assert [e["address"] for e in created["emails"]] == [
        "john@example.com",
        "john@club.example.com",
    ]
    assert created["organization"] == {"company": "Acme", "title": "Engineer"}

    list_resp = client.get("/1/contacts", params=auth)
    assert list_resp.status_code == status.HTTP_200_OK
    assert len(list_resp.json()) == 1

    one = client.get(f"/1/contacts/{created['id']}", params=auth)
    assert one.json() == created


def test_custom_type_without_label_is_rejected(client, make_user, login):
    make_user("ada")
    auth = {"access_token": login("ada")}

    response = client.post(
        "/1/contacts",
        params=auth,
        json={"emails": [{"address": "a@example.com", "type": 0}]},
    )
    assert response.status_code == 422


def test_contacts_are_private(client, make_user, login):
    make_user("ada")
    make_user("bob")
    ada = {"access_token": login("ada")}
    bob = {"access_token": login("bob")}

    contact_id = client.post("/1/contacts", params=ada, json=NEW_CONTACT).json()["id"]

    assert client.get(f"/1/contacts/{contact_id}", params=bob).status_code == 404
    assert client.delete(f"/1/contacts/{contact_id}", params=bob).status_code == 404
    assert client.get(f"/1/contacts/{contact_id}/photo", params=bob).status_code == 404
    assert client.get("/1/contacts", params=bob).json() == []


def test_delete_contact(client, make_user, login):
    make_user("ada")
    auth = {"access_token": login("ada")}
    contact_id = client.post("/1/contacts", params=auth, json=NEW_CONTACT).json()["id"]

    first = client.delete(f"/1/contacts/{contact_id}", params=auth)
    second = client.delete(f"/1/contacts/{contact_id}", params=auth)

    assert first.status_code == status.HTTP_204_NO_CONTENT
    assert second.status_code == status.HTTP_404_NOT_FOUND
    assert client.get(f"/1/contacts/{contact_id}", params=auth).status_code == 404


def test_contact_photo(client, make_user, login):
    make_user("ada")
    auth = {"access_token": login("ada")}
    contact_id = client.post("/1/contacts", params=auth, json=NEW_CONTACT).json()["id"]

    assert client.get(f"/1/contacts/{contact_id}/photo", params=auth).status_code == 404

    upload = client.put(
        f"/1/contacts/{contact_id}/photo",
        params=auth,
        files={"file": ("john.png", b"\x89PNG\r\n\x1a\n", "image/png")},
    )
    assert upload.status_code == status.HTTP_204_NO_CONTENT

    photo = client.get(f"/1/contacts/{contact_id}/photo", params=auth)
    assert photo.status_code == status.HTTP_200_OK
    assert photo.content == b"\x89PNG\r\n\x1a\n"
    assert photo.headers["content-type"] == "application/octet-stream"

    removed = client.delete(f"/1/contacts/{contact_id}/photo", params=auth)
    assert removed.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/1/contacts/{contact_id}/photo", params=auth).status_code == 404
    assert client.get(f"/1/contacts/{contact_id}", params=auth).json()["nickname"] == "Johnny"


def test_storage_failure_is_a_generic_500(client, db, make_user, login):
    make_user("ada")
    auth = {"access_token": login("ada")}
    with db.engine.begin() as conn:
        conn.execute(text("DROP TABLE contacts_events"))

    response = client.post("/1/contacts", params=auth, json=NEW_CONTACT)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}
    assert client.get("/1/contacts", params=auth).json() == []


def test_report_location(client, make_user, login):
    user = make_user("ada")
    auth = {"access_token": login("ada")}

    response = client.post(
        "/1/locations",
        params=auth,
        json={"timestamp": 1467331200, "latitude": 52.52, "longitude": 13.405, "owner_id": 999},
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["owner_id"] == user.id
