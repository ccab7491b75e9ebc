"""Unit tests for session token issue and verification."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import jwt
import pytest

from brytashop.auth.errors import AuthenticationError
from brytashop.auth.session import SessionTokens, extract_token, get_session_tokens
from brytashop.config import settings


@pytest.fixture
def secret_key():
    return "test-secret-key-for-testing-only-0123456789"


@pytest.fixture
def tokens(secret_key):
    return SessionTokens(secret_key=secret_key, algorithm="HS256")


class TestSessionTokens:
    def test_issued_token_verifies_to_user_id(self, tokens):
        user_id = uuid4()

        assert tokens.verify_token(tokens.issue_token(user_id)) == user_id

    def test_token_signed_with_other_secret_rejected(self, tokens):
        other = SessionTokens(secret_key="another-secret-key-for-testing-0123456789")
        token = other.issue_token(uuid4())

        with pytest.raises(AuthenticationError, match="Invalid token"):
            tokens.verify_token(token)

    def test_expired_token_rejected(self, tokens, secret_key):
        past = datetime.now(UTC) - timedelta(days=2)
        token = jwt.encode(
            {
                "sub": str(uuid4()),
                "iss": "brytashop",
                "aud": "brytashop-api",
                "iat": past,
                "nbf": past,
                "exp": past + timedelta(hours=1),
            },
            secret_key,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError, match="Invalid token"):
            tokens.verify_token(token)

    def test_malformed_subject_rejected(self, tokens, secret_key):
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "not-a-uuid",
                "iss": "brytashop",
                "aud": "brytashop-api",
                "iat": now,
                "nbf": now,
                "exp": now + timedelta(hours=1),
            },
            secret_key,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError, match="Malformed 'sub'"):
            tokens.verify_token(token)

    def test_get_session_tokens_requires_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "app_secret", None)

        with pytest.raises(AuthenticationError, match="BRYTASHOP_APP_SECRET"):
            get_session_tokens()


class TestExtractToken:
    def test_cookie_preferred(self):
        request = MagicMock(
            cookies={"token": "cookie-token"},
            headers={"authorization": "Bearer header-token"},
        )

        assert extract_token(request) == "cookie-token"

    def test_bearer_header_fallback(self):
        request = MagicMock(cookies={}, headers={"authorization": "Bearer header-token"})

        assert extract_token(request) == "header-token"

    def test_no_token(self):
        request = MagicMock(cookies={}, headers={"authorization": "Basic abc"})

        assert extract_token(request) is None
