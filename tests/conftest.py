"""
Global pytest configuration and fixtures for the tenantgate test suite.
"""

from typing import Any, Dict, Generator

import jwt
import pytest
from fastapi.testclient import TestClient

from tenantgate.core.database import get_db
from tenantgate.core.settings import settings
from tenantgate.domains.auth.context import SessionRegistry
from tenantgate.domains.auth.dependencies import get_session_registry
from tenantgate.main import app

# Import fixtures from fixture modules
from tests.fixtures.auth_fixtures import *  # noqa: F403, F401
from tests.fixtures.gateway_fixtures import *  # noqa: F403, F401

TEST_JWT_SECRET = "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def test_jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    """JWT secret for generating test tokens, installed into settings."""
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


def make_token(email: str, secret: str = TEST_JWT_SECRET) -> str:
    payload: Dict[str, Any] = {
        "sub": f"auth-{email}",
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_headers(test_jwt_secret: str):
    """Factory for Authorization headers of a given email."""

    def _headers(email: str = "alice@co.com") -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(email, test_jwt_secret)}"}

    return _headers


@pytest.fixture
def client(
    gateway, registry: SessionRegistry, test_jwt_secret: str
) -> Generator[TestClient, None, None]:
    """
    FastAPI test client wired to the in-memory gateway and a fresh registry.
    """
    app.dependency_overrides[get_db] = lambda: gateway
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
