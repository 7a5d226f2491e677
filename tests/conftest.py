"""Shared pytest fixtures for segmentguard tests."""

import pytest
from fastapi.testclient import TestClient

from segmentguard.config import Settings
from segmentguard.main import create_app
from segmentguard.validation.cookies import CookieSigner

COOKIE_SECRET = "test-cookie-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(COOKIE_SECRET=COOKIE_SECRET, API_PREFIX="", DEBUG=True, LOG_LEVEL="warning")


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan (and pipeline verification) running."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signer() -> CookieSigner:
    return CookieSigner(COOKIE_SECRET)


@pytest.fixture
def signup_body() -> dict:
    """A body that satisfies every signup rule."""
    return {
        "name": "Jo",
        "email": "a@b.com",
        "password": "abcdefgh",
        "repeat_password": "abcdefgh",
        "age": 20,
    }
