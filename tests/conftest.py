"""
Shared fixtures: an application over in-memory SQLite and helpers to
register users and create posts through the API.
"""
from typing import Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app

ADMIN_EMAIL = "admin@blog.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY="test-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(settings):
    database = Database(settings.DATABASE_URL)
    yield database
    database.dispose()


@pytest.fixture
def db_session(database):
    """ORM session over a freshly created schema, for service-level tests"""
    database.create_all()
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        database.drop_all()


@pytest.fixture
def client(settings, database):
    app = create_app(settings=settings, database=database)
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, username: str, password: str = "secret123") -> Tuple[str, int]:
    """Register a user and return (token, user id)"""
    response = client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username}@x.com",
        "password": password,
        "full_name": username.title(),
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["user"]["id"]


def login(client: TestClient, email: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def create_post(client: TestClient, token: str, title: str = "Hello world",
                content: str = "Some content", status: str = "published") -> int:
    response = client.post(
        "/api/posts",
        data={"title": title, "content": content, "status": status},
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["postId"]


def add_comment(client: TestClient, token: str, post_id: int, content: str = "hello",
                parent_id: int = None) -> dict:
    payload = {"content": content, "post_id": post_id}
    if parent_id is not None:
        payload["parent_id"] = parent_id
    response = client.post("/api/comments", json=payload, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["comment"]


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def alice(client) -> Tuple[str, int]:
    return register(client, "alice")


@pytest.fixture
def bob(client) -> Tuple[str, int]:
    return register(client, "bob")
