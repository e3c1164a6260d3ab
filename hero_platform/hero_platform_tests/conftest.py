"""
Shared fixtures for the auth service tests.

Every test gets its own in-memory SQLite database and freshly wired app.
"""
from datetime import datetime, timezone
import uuid

import pytest
from fastapi.testclient import TestClient

from hero_platform.hero_platform.auth_service.auth import PasswordHasher, TokenIssuer
from hero_platform.hero_platform.auth_service.config import Settings
from hero_platform.hero_platform.auth_service.main import create_app
from hero_platform.hero_platform.auth_service.models import Language, User
from hero_platform.hero_platform.auth_service.repository import UniqueViolation
from hero_platform.hero_platform.auth_service.service import AuthService

ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_ACCESS_SECRET=ACCESS_SECRET,
        JWT_REFRESH_SECRET=REFRESH_SECRET,
        PASSWORD_HASH_ROUNDS=1000,
        LOG_LEVEL="INFO",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def hasher(settings):
    return PasswordHasher.from_settings(settings)


@pytest.fixture
def issuer(settings):
    return TokenIssuer.from_settings(settings)


class InMemoryUserRepository:
    """Credential store double keyed by email and id."""

    def __init__(self):
        self.users = {}

    def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def find_by_id(self, user_id):
        return self.users.get(user_id)

    def create(self, **fields):
        if self.find_by_email(fields["email"]) is not None:
            raise UniqueViolation("email", fields["email"])
        fields.setdefault("language", Language.EN)
        user = User(
            id=str(uuid.uuid4()),
            token_version=0,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self.users[user.id] = user
        return user

    def delete(self, user_id):
        return self.users.pop(user_id, None) is not None

    def bump_token_version(self, user):
        user.token_version += 1
        return user.token_version


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def auth_service(user_repo, hasher, issuer):
    return AuthService(users=user_repo, hasher=hasher, issuer=issuer)


def unique_email():
    return f"user_{uuid.uuid4().hex[:8]}@example.com"
