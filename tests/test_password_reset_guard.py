"""Tests for the password reset guard service."""

import asyncio
import hashlib

import pytest

from reset_guard.adapters.reset_links.base import ResetLinkStatus
from reset_guard.core.errors import (
    ChallengeUnavailableError,
    ResetLinkDeliveryError,
    TooManyAttemptsError,
    ValidationAppError,
)
from reset_guard.services.password_reset_guard import (
    GuardPolicy,
    PasswordResetGuard,
    attempt_counter_key,
    is_valid_email,
    rate_limit_key,
)

EMAIL = "user@example.com"


def _request(guard: PasswordResetGuard, email=EMAIL, token="valid-token", remote_ip=None):
    return asyncio.run(guard.request_reset(email, token, remote_ip=remote_ip))


class TestKeys:
    def test_rate_limit_key(self) -> None:
        assert rate_limit_key(EMAIL) == "password-reset|user@example.com"

    def test_rate_limit_key_keeps_case(self) -> None:
        assert rate_limit_key("User@Example.com") != rate_limit_key(EMAIL)

    def test_attempt_counter_key_hashes_identity(self) -> None:
        digest = hashlib.sha1(EMAIL.encode()).hexdigest()
        assert attempt_counter_key(EMAIL) == f"password_reset_attempts:{digest}"
        assert EMAIL not in attempt_counter_key(EMAIL)

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("user@example.com", True),
            ("first.last+tag@sub.example.org", True),
            ("not-an-email", False),
            ("user@", False),
            ("@example.com", False),
        ],
    )
    def test_is_valid_email(self, value: str, expected: bool) -> None:
        assert is_valid_email(value) is expected


class TestRequestReset:
    def test_valid_request_sends_link_once(self, guard, sender) -> None:
        status = _request(guard)

        assert status is ResetLinkStatus.SENT
        assert sender.sent_to == [EMAIL]

    def test_second_request_within_window_is_throttled(self, guard, verifier, sender) -> None:
        _request(guard)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            _request(guard)

        assert exc_info.value.field_errors == {"email": ["Please wait before retrying."]}
        assert exc_info.value.retry_after == 60
        assert len(verifier.calls) == 1
        assert sender.sent_to == [EMAIL]

    def test_throttle_applies_regardless_of_captcha(self, guard, sender) -> None:
        with pytest.raises(ValidationAppError):
            _request(guard, token="wrong")

        with pytest.raises(TooManyAttemptsError):
            _request(guard, token="valid-token")

        assert sender.sent_to == []

    def test_throttle_precedes_field_validation(self, guard) -> None:
        with pytest.raises(ValidationAppError):
            _request(guard, email="not-an-email")

        with pytest.raises(TooManyAttemptsError):
            _request(guard, email="not-an-email")

    def test_request_allowed_after_window_elapses(self, guard, clock, sender) -> None:
        _request(guard)
        clock.advance(60)

        assert _request(guard) is ResetLinkStatus.SENT
        assert sender.sent_to == [EMAIL, EMAIL]

    def test_identities_are_throttled_independently(self, guard, sender) -> None:
        _request(guard)
        _request(guard, email="other@example.com")

        assert sender.sent_to == [EMAIL, "other@example.com"]

    @pytest.mark.parametrize("email", ["not-an-email", "", None])
    def test_invalid_email_fails_without_issuing(self, guard, verifier, sender, email) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            _request(guard, email=email)

        assert list(exc_info.value.field_errors) == ["email"]
        assert verifier.calls == []
        assert sender.sent_to == []

    def test_missing_email_message(self, guard) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            _request(guard, email=None)

        assert exc_info.value.message == "The email field is required."

    @pytest.mark.parametrize("token", ["", None])
    def test_absent_captcha_fails_under_captcha_field(self, guard, verifier, sender, token) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            _request(guard, token=token)

        assert exc_info.value.field_errors == {"captcha": ["The CAPTCHA field is required."]}
        assert verifier.calls == []
        assert sender.sent_to == []

    def test_rejected_captcha_fails_without_issuing(self, guard, sender) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            _request(guard, token="forged")

        assert "captcha" in exc_info.value.field_errors
        assert "cf_turnstile_response" not in exc_info.value.field_errors
        assert sender.sent_to == []

    def test_unreachable_captcha_is_distinct_from_rejection(self, guard, verifier, sender) -> None:
        verifier.error = ChallengeUnavailableError(code="captcha_unavailable", message="down")

        with pytest.raises(ChallengeUnavailableError):
            _request(guard)

        assert sender.sent_to == []

    def test_remote_ip_is_forwarded_to_verifier(self, guard, verifier) -> None:
        _request(guard, remote_ip="203.0.113.9")

        assert verifier.calls == [("valid-token", "203.0.113.9")]

    def test_delivery_failure_propagates(self, guard, sender) -> None:
        sender.error = ResetLinkDeliveryError(code="reset_link_delivery_failed", message="nope")

        with pytest.raises(ResetLinkDeliveryError):
            _request(guard)


class TestAttemptCounter:
    def test_counter_increments_on_every_call_including_failures(self, guard, store, clock) -> None:
        key = attempt_counter_key(EMAIL)

        with pytest.raises(ValidationAppError):
            _request(guard, token="forged")
        assert store.get(key) == 1

        clock.advance(61)
        _request(guard)
        assert store.get(key) == 2

    def test_throttled_calls_are_not_counted(self, guard, store) -> None:
        _request(guard)
        with pytest.raises(TooManyAttemptsError):
            _request(guard)

        assert store.get(attempt_counter_key(EMAIL)) == 1

    def test_counter_expiry_slides_to_thirty_minutes_after_last_call(self, guard, store, clock) -> None:
        key = attempt_counter_key(EMAIL)

        _request(guard)
        clock.advance(600)
        _request(guard)

        assert store.ttl(key) == pytest.approx(30 * 60)

        clock.advance(30 * 60 - 1)
        assert store.get(key) == 2

        clock.advance(1)
        assert store.get(key) is None

    def test_counter_does_not_block_by_default(self, guard, clock, sender) -> None:
        for _ in range(5):
            _request(guard)
            clock.advance(60)

        assert len(sender.sent_to) == 5

    def test_optional_ceiling_blocks_once_exceeded(self, limiter, store, verifier, sender, clock) -> None:
        guard = PasswordResetGuard(
            limiter=limiter,
            store=store,
            verifier=verifier,
            sender=sender,
            policy=GuardPolicy(attempt_ceiling=2),
        )

        _request(guard)
        clock.advance(60)
        _request(guard)
        clock.advance(60)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            _request(guard)

        assert exc_info.value.retry_after == 30 * 60
        assert len(sender.sent_to) == 2


def test_policy_from_settings() -> None:
    from reset_guard.core.config import settings

    policy = GuardPolicy.from_settings(settings.reset)

    assert policy.max_attempts == 1
    assert policy.decay_seconds == 60
    assert policy.attempt_ttl_seconds == 1800
    assert policy.attempt_ceiling is None
