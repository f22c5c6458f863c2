"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any import of the settings module.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("RESET_SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("RESET_URL_BASE", "https://example.test/reset-password")
os.environ.setdefault("CAPTCHA_PROVIDER", "turnstile")
# Cloudflare's documented "always passes" test secret
os.environ.setdefault("CAPTCHA_SECRET_KEY", "1x0000000000000000000000000000000AA")
os.environ.setdefault("MAIL_DRIVER", "log")
os.environ.setdefault("LOG_FORMAT", "plain")

import pytest

from reset_guard.adapters.cache.in_memory import InMemoryKeyValueStore
from reset_guard.adapters.captcha.base import AbstractChallengeVerifier
from reset_guard.adapters.rate_limit.in_memory import InMemoryRateLimiter
from reset_guard.adapters.reset_links.base import AbstractResetLinkSender, ResetLinkStatus
from reset_guard.services.password_reset_guard import PasswordResetGuard


class FakeClock:
    """Deterministic clock shared by the limiter and the store."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class StubVerifier(AbstractChallengeVerifier):
    """Challenge verifier accepting a single known token."""

    def __init__(self, valid_token: str = "valid-token", error: Exception | None = None) -> None:
        self.valid_token = valid_token
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def verify(self, token: str, *, remote_ip: str | None = None) -> bool:
        self.calls.append((token, remote_ip))
        if self.error is not None:
            raise self.error
        return token == self.valid_token


class RecordingSender(AbstractResetLinkSender):
    """Reset-link sender that records the identities it was asked to serve."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent_to: list[str] = []

    async def send_reset_link(self, email: str) -> ResetLinkStatus:
        if self.error is not None:
            raise self.error
        self.sent_to.append(email)
        return ResetLinkStatus.SENT


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(clock=clock)


@pytest.fixture
def store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(max_entries=100, clock=clock)


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def guard(
    limiter: InMemoryRateLimiter,
    store: InMemoryKeyValueStore,
    verifier: StubVerifier,
    sender: RecordingSender,
) -> PasswordResetGuard:
    return PasswordResetGuard(limiter=limiter, store=store, verifier=verifier, sender=sender)
