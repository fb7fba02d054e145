"""
Shared fixtures.

Each test gets its own application built from TestingConfig, which points
DBStorage at an in-memory SQLite database on a single shared connection, so
tests never see each other's rows.
"""
from __future__ import annotations

from collections.abc import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from api import create_app
from models.db_storage import DBStorage
from models.user import User
from services.auth_service import AuthService

PASSWORD = "testpass123"


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    app = create_app("testing")
    yield app
    storage: DBStorage = app.extensions["storage"]
    storage.close()
    storage.drop_all()
    storage.engine.dispose()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture()
def storage(app: Flask) -> DBStorage:
    return app.extensions["storage"]


@pytest.fixture()
def auth_service(app: Flask) -> AuthService:
    return app.extensions["auth_service"]


@pytest.fixture()
def user(auth_service: AuthService) -> User:
    return auth_service.register("testuser", "testuser@example.com", PASSWORD)


@pytest.fixture()
def tokens(auth_service: AuthService, user: User) -> dict:
    return auth_service.login("testuser@example.com", PASSWORD)


@pytest.fixture()
def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['accessToken']}"}
