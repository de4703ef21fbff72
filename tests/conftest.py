"""
Global pytest configuration and fixtures for the Resource Sharing API test suite.
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, Mock

import jwt
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before the application reads its settings
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"

from sharing_api.main import app  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.sharing_fixtures import *  # noqa: F403, F401, E402


@pytest.fixture
def mock_prisma() -> Mock:
    """
    Mock Prisma client for unit tests that don't need real database.
    """
    mock_db = Mock()
    # Make async methods return AsyncMock
    mock_db.principal.find_unique = AsyncMock()
    mock_db.principal.find_many = AsyncMock()
    mock_db.workitem.find_unique = AsyncMock()
    mock_db.projectmember.find_first = AsyncMock()
    mock_db.savedquery.find_unique = AsyncMock()
    mock_db.share.find_many = AsyncMock()
    mock_db.share.find_first = AsyncMock()
    mock_db.share.create = AsyncMock()
    mock_db.share.update = AsyncMock()
    mock_db.share.delete = AsyncMock()

    # Interactive transactions hand out a transaction-bound client
    transaction = MagicMock()
    transaction.__aenter__ = AsyncMock(return_value=mock_db)
    transaction.__aexit__ = AsyncMock(return_value=None)
    mock_db.tx = Mock(return_value=transaction)

    return mock_db


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def valid_jwt_payload() -> Dict[str, Any]:
    """Valid JWT payload for testing."""
    return {
        "sub": "manager",
        "email": "manager@example.com",
        "aud": "authenticated",
        "iss": "sharing-api",
    }


@pytest.fixture
def valid_jwt_token(test_jwt_secret: str, valid_jwt_payload: Dict[str, Any]) -> str:
    """Generate a valid JWT token for testing."""
    return jwt.encode(valid_jwt_payload, test_jwt_secret, algorithm="HS256")


@pytest.fixture
def invalid_jwt_token(test_jwt_secret: str) -> str:
    """Generate an invalid JWT token for testing."""
    return jwt.encode({"invalid": "payload"}, "wrong-secret", algorithm="HS256")


@pytest.fixture
def auth_headers(valid_jwt_token: str) -> Dict[str, str]:
    """Generate authentication headers with valid JWT token."""
    return {"Authorization": f"Bearer {valid_jwt_token}"}


@pytest.fixture
def test_client() -> TestClient:
    """FastAPI test client for API endpoint testing."""
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    """Alias for test_client to match existing test patterns."""
    return TestClient(app)
