import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_NAME", "blog_test")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from main import app


class FakeMediaStore:
    """Stands in for the Cloudinary-backed store"""

    def __init__(self):
        self.uploaded = []

    async def upload(self, file):
        data = await file.read()
        self.uploaded.append((file.filename, data))
        return f"https://media.example.com/uploads/{file.filename}"


@pytest.fixture
def db():
    return AsyncMongoMockClient()["blog_test"]


@pytest.fixture
def media():
    return FakeMediaStore()


@pytest.fixture
def client(db, media):
    original_db, original_media = app.state.db, app.state.media
    app.state.db = db
    app.state.media = media
    with TestClient(app) as test_client:
        yield test_client
    app.state.db, app.state.media = original_db, original_media


@pytest.fixture
def make_user(client):
    """Register, sign in and describe a user: {id, email, token, headers}"""
    counter = {"n": 0}

    def _make(full_name=None, email=None, password="secret123"):
        counter["n"] += 1
        full_name = full_name or f"User {counter['n']}"
        email = email or f"user{counter['n']}@example.com"

        response = client.post("/auth/sign-up", json={"fullName": full_name, "email": email, "password": password})
        assert response.status_code == 201, response.text

        response = client.post("/auth/sign-in", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        profile = client.get("/auth/current-user", headers=headers).json()
        return {"id": profile["id"], "email": email, "token": token, "headers": headers}

    return _make


@pytest.fixture
def make_post(client):
    def _make(user, content="hello", title="A title"):
        response = client.post("/posts", data={"title": title, "content": content}, headers=user["headers"])
        assert response.status_code == 201, response.text
        return response.json()["postId"]

    return _make
