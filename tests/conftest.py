# tests/conftest.py
import os
import sys
import asyncio
import json
from urllib.parse import urlencode

import pytest

sys.path.append(os.path.abspath("."))

# Must be set before the settings are first read and cached.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from newton.auth import get_password_hash
from newton.database import get_db, open_database
from newton.schemas import User
from main import app


# DB (SQLite in-memory, fresh for every test)
SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture()
def db():
    handle = open_database(SQLALCHEMY_DATABASE_URL)
    try:
        yield handle
    finally:
        handle.close()


# One event loop for the WHOLE pytest session
@pytest.fixture(scope="session")
def session_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


# Simple ASGI response/client
class SimpleResponse:
    def __init__(
        self, status_code: int, body: bytes, headers: list[tuple[bytes, bytes]]
    ):
        self.status_code = status_code
        self.content = body
        self.headers = {k.decode(): v.decode() for k, v in headers}

    def json(self):
        return json.loads(self.content.decode())


class SimpleClient:
    """
    Important:
    - uses ONE shared session loop (passed from fixture)
    - does NOT call asyncio.run()
    - does NOT close the loop
    """

    def __init__(self, app, loop):
        self.app = app
        self.loop = loop

    def close(self):
        # do not close the loop here (session fixture closes it)
        pass

    def request(
        self,
        method: str,
        path: str,
        json_body=None,
        params=None,
        headers=None,
        files=None,
    ):
        headers = headers or {}
        body_bytes = b""

        path, _, query = path.partition("?")
        if params:
            extra = urlencode(params, doseq=True)
            query = f"{query}&{extra}" if query else extra

        if files:
            boundary = "TESTBOUNDARY"
            parts: list[bytes] = []
            for name, (filename, content, content_type) in files.items():
                disposition = f'form-data; name="{name}"; filename="{filename}"'
                part_headers = (
                    f"--{boundary}\r\n"
                    f"Content-Disposition: {disposition}\r\n"
                    f"Content-Type: {content_type or 'application/octet-stream'}\r\n\r\n"
                )
                parts.append(part_headers.encode() + content + b"\r\n")
            parts.append(f"--{boundary}--\r\n".encode())
            body_bytes = b"".join(parts)
            headers["content-type"] = f"multipart/form-data; boundary={boundary}"

        elif json_body is not None:
            body_bytes = json.dumps(json_body).encode()
            headers.setdefault("content-type", "application/json")

        raw_headers = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
        scope = {
            "type": "http",
            "method": method.upper(),
            "path": path,
            "headers": raw_headers,
            "query_string": query.encode(),
            "client": ("testclient", 5000),
        }

        async def receive():
            nonlocal body_bytes
            chunk, body_bytes = body_bytes, b""
            return {"type": "http.request", "body": chunk, "more_body": False}

        response_body = bytearray()
        response_status = 500
        response_headers: list[tuple[bytes, bytes]] = []

        async def send(message):
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = message.get("headers", [])
            elif message["type"] == "http.response.body":
                response_body.extend(message.get("body", b""))

        # ensure the loop is the current one
        asyncio.set_event_loop(self.loop)
        self.loop.run_until_complete(self.app(scope, receive, send))
        return SimpleResponse(response_status, bytes(response_body), response_headers)

    def get(self, path: str, params=None, headers=None):
        return self.request("GET", path, params=params, headers=headers)

    def post(self, path: str, json=None, params=None, headers=None, files=None):
        return self.request(
            "POST", path, json_body=json, params=params, headers=headers, files=files
        )

    def put(self, path: str, json=None, params=None, headers=None, files=None):
        return self.request(
            "PUT", path, json_body=json, params=params, headers=headers, files=files
        )

    def delete(self, path: str, params=None, headers=None):
        return self.request("DELETE", path, params=params, headers=headers)


# Client fixture: override DB dependency per test
@pytest.fixture()
def client(db, session_loop):
    app.dependency_overrides[get_db] = lambda: db

    c = SimpleClient(app, loop=session_loop)
    try:
        yield c
    finally:
        app.dependency_overrides.clear()
        c.close()


@pytest.fixture()
def make_user(db):
    def _make(username="owner", password="secret123", full_name="Owner"):
        user = User(
            username=username,
            full_name=full_name,
            password=get_password_hash(password),
        )
        user.id = db.create_user(user)
        return user

    return _make


@pytest.fixture()
def login(client):
    def _login(username, password="secret123"):
        response = client.post(
            "/1/sessions", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        return response.json()["access_token"]

    return _login
