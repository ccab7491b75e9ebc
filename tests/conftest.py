"""
Shared pytest fixtures and configuration for all tests.
"""

import os
import uuid
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
import strawberry

from brytashop.auth.context import AuthContext
from brytashop.config import settings

TEST_APP_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def app_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    """Give every test a session secret so tokens can be issued."""
    monkeypatch.setattr(settings, "app_secret", TEST_APP_SECRET)
    return TEST_APP_SECRET


@pytest.fixture
def mock_info():
    """Create a mock GraphQL info object with request and response context."""
    info = MagicMock(spec=strawberry.Info)
    info.context = {
        "request": MagicMock(cookies={}, headers={}),
        "response": MagicMock(),
    }
    return info


@pytest.fixture
def auth_context() -> AuthContext:
    """Create an authenticated shopper context."""
    return AuthContext(
        user_id=uuid.uuid4(),
        email="shopper@example.com",
        permissions=["USER"],
        token="test-token",
    )


@pytest.fixture
def admin_context() -> AuthContext:
    """Create an authenticated admin context."""
    return AuthContext(
        user_id=uuid.uuid4(),
        email="admin@example.com",
        permissions=["USER", "ADMIN"],
        token="admin-token",
    )


@pytest.fixture
def anonymous_auth_context() -> AuthContext:
    return AuthContext(user_id=None)


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
