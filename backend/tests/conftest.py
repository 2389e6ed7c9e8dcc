"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
a controllable clock, in-memory repositories, the session and usage services
wired the way the container wires them, and a user factory.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from api.dependencies import reset_container
from shared.config import Settings
from shared.locks import KeyedLock
from shared.models import UsageCounters, User
from modules.analytics.repository import InMemoryAnalyticsRepository
from modules.analytics.service import AnalyticsService
from modules.auth.passwords import PasswordHasher
from modules.auth.sessions import SessionManager
from modules.auth.tokens import TokenSigner
from modules.usage.service import UsageGate
from modules.users.repository import InMemoryUserRepository


# Test secrets (only for testing)
TEST_JWT_SECRET = "test-access-secret-for-testing-only"
TEST_JWT_REFRESH_SECRET = "test-refresh-secret-for-testing-only"
TEST_PASSWORD = "Password123"


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_service_container():
    """Reset the service container singleton before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an in-memory backend with fast hashing and the mock provider."""
    return Settings(
        _env_file=None,
        environment="test",
        database_backend="memory",
        jwt_secret=TEST_JWT_SECRET,
        jwt_refresh_secret=TEST_JWT_REFRESH_SECRET,
        bcrypt_rounds=4,
        openai_api_key="",
    )


@pytest.fixture
def clock() -> FakeClock:
    """Mid-month, mid-day UTC, so day and month boundaries are explicit in tests."""
    return FakeClock(datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def signer(clock: FakeClock) -> TokenSigner:
    return TokenSigner(
        secret=TEST_JWT_SECRET,
        refresh_secret=TEST_JWT_REFRESH_SECRET,
        clock=clock,
    )


@pytest.fixture
def sessions(users, signer, locks, clock) -> SessionManager:
    return SessionManager(users=users, signer=signer, locks=locks, clock=clock)


@pytest.fixture
def usage_gate(users, locks, clock) -> UsageGate:
    return UsageGate(users=users, locks=locks, clock=clock)


@pytest.fixture
def analytics_repository() -> InMemoryAnalyticsRepository:
    return InMemoryAnalyticsRepository()


@pytest.fixture
def analytics(analytics_repository) -> AnalyticsService:
    return AnalyticsService(analytics_repository)


@pytest.fixture
def make_user(users, hasher, clock) -> Callable[..., User]:
    """
    Factory that stores a user and returns the stored record.

    Usage counters default to zero with windows anchored at the current
    clock time; pass `daily_count` / `monthly_count` to start elsewhere.
    """
    counter = {"n": 0}
    password_hash = hasher.hash(TEST_PASSWORD)

    def _make(
        email: str | None = None,
        daily_count: int = 0,
        monthly_count: int | None = None,
        **fields,
    ) -> User:
        counter["n"] += 1
        usage = UsageCounters(
            daily_count=daily_count,
            monthly_count=daily_count if monthly_count is None else monthly_count,
            total_count=max(daily_count, monthly_count or 0),
            last_daily_reset_at=clock(),
            last_monthly_reset_at=clock(),
        )
        user = User(
            id=f"user-{counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            password_hash=password_hash,
            first_name="Test",
            last_name="User",
            usage=usage,
            created_at=clock(),
            updated_at=clock(),
            **fields,
        )
        return users.create(user)

    return _make


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD
