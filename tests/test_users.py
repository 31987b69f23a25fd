from fastapi import status

from newton.auth import verify_password


def test_register_user(client, db):
    response = client.post(
        "/1/users",
        json={"username": "ada", "full_name": "Ada Lovelace", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["username"] == "ada"
    assert "password" not in data

    stored = db.user(data["id"])
    assert stored.password != "secret123"
    assert verify_password("secret123", stored.password)


def test_register_duplicate_username(client, make_user):
    make_user("ada")
    response = client.post(
        "/1/users",
        json={"username": "ada", "full_name": "Another Ada", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_register_requires_password(client):
    response = client.post("/1/users", json={"username": "ada", "full_name": "Ada"})
    assert response.status_code == 422


def test_user_can_read_only_itself(client, make_user, login):
    ada = make_user("ada")
    bob = make_user("bob")
    token = login("ada")

    own = client.get(f"/1/users/{ada.id}", params={"access_token": token})
    other = client.get(f"/1/users/{bob.id}", params={"access_token": token})

    assert own.status_code == status.HTTP_200_OK
    assert own.json() == {"id": ada.id, "username": "ada", "full_name": "Owner"}
    assert other.status_code == status.HTTP_404_NOT_FOUND


def test_edit_user(client, db, make_user, login):
    ada = make_user("ada")
    bob = make_user("bob")
    token = login("ada")

    response = client.put(
        f"/1/users/{ada.id}",
        params={"access_token": token},
        json={"full_name": "Ada King", "password": "newpass"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["full_name"] == "Ada King"

    assert verify_password("newpass", db.user(ada.id).password)
    assert db.user(bob.id).full_name == "Owner"
    assert client.post(
        "/1/sessions", json={"username": "ada", "password": "newpass"}
    ).status_code == status.HTTP_200_OK


def test_edit_other_user_is_not_found(client, make_user, login):
    make_user("ada")
    bob = make_user("bob")
    token = login("ada")

    response = client.put(
        f"/1/users/{bob.id}", params={"access_token": token}, json={"full_name": "Hacked"}
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_rename_to_taken_username(client, make_user, login):
    ada = make_user("ada")
    make_user("bob")
    token = login("ada")

    response = client.put(
        f"/1/users/{ada.id}", params={"access_token": token}, json={"username": "bob"}
    )
    assert response.status_code == status.HTTP_409_CONFLICT
