"""Password reset abuse guard.

Gates reset-link issuance behind a short-window rate limit, a sliding-expiry
attempt counter and a CAPTCHA challenge before handing the request to the
reset-link sender. The cost of an attempt (limiter hit + counter increment)
is charged before the identity or the challenge is validated.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from pydantic import EmailStr, TypeAdapter, ValidationError

from reset_guard.adapters.cache.base import AbstractKeyValueStore
from reset_guard.adapters.captcha.base import AbstractChallengeVerifier
from reset_guard.adapters.rate_limit.base import AbstractRateLimiter
from reset_guard.adapters.reset_links.base import AbstractResetLinkSender, ResetLinkStatus
from reset_guard.core.config import ResetSettings
from reset_guard.core.errors import TooManyAttemptsError, ValidationAppError
from reset_guard.core.logging import hash_identity

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "password-reset|"
ATTEMPT_COUNTER_PREFIX = "password_reset_attempts:"

# Form field the challenge errors are reported under
CHALLENGE_FIELD = "captcha"

_email_adapter = TypeAdapter(EmailStr)


def rate_limit_key(identity: str) -> str:
    # Identity is used as submitted, so case variants of one address are throttled separately
    return f"{RATE_LIMIT_PREFIX}{identity}"


def attempt_counter_key(identity: str) -> str:
    return f"{ATTEMPT_COUNTER_PREFIX}{hashlib.sha1(identity.encode()).hexdigest()}"


def is_valid_email(value: str) -> bool:
    """Syntactic e-mail check (no DNS or deliverability lookups)."""
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


@dataclass(frozen=True)
class GuardPolicy:
    """Throttling knobs for the guard.

    Attributes:
        max_attempts: Requests per identity allowed through the limiter per window.
        decay_seconds: Limiter window length, opened by the first request.
        attempt_ttl_seconds: Sliding expiry of the attempt counter.
        attempt_ceiling: Optional cap on the attempt counter; None only records it.
    """

    max_attempts: int = 1
    decay_seconds: int = 60
    attempt_ttl_seconds: int = 30 * 60
    attempt_ceiling: int | None = None

    @classmethod
    def from_settings(cls, reset: ResetSettings) -> "GuardPolicy":
        return cls(
            max_attempts=reset.max_attempts,
            decay_seconds=reset.decay_seconds,
            attempt_ttl_seconds=reset.attempt_ttl_minutes * 60,
            attempt_ceiling=reset.attempt_ceiling,
        )


class PasswordResetGuard:
    """Validate a reset request and forward it to the reset-link sender.

    Attributes:
        limiter: Short-window limiter checked before anything else.
        store: Store holding the per-identity attempt counters.
        verifier: CAPTCHA verifier.
        sender: Collaborator that issues and delivers the reset link.
        policy: Throttling configuration.
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        store: AbstractKeyValueStore,
        verifier: AbstractChallengeVerifier,
        sender: AbstractResetLinkSender,
        policy: GuardPolicy | None = None,
    ) -> None:
        self.limiter = limiter
        self.store = store
        self.verifier = verifier
        self.sender = sender
        self.policy = policy or GuardPolicy()

    async def request_reset(
        self,
        email: str | None,
        challenge_response: str | None,
        *,
        remote_ip: str | None = None,
    ) -> ResetLinkStatus:
        """Run the guard for one reset request.

        Steps:
        1. Reject immediately when the identity's limiter window is exhausted
        2. Charge the attempt (limiter hit + counter increment with fresh TTL)
        3. Validate the e-mail syntax
        4. Verify the challenge token with the provider
        5. Delegate to the reset-link sender

        Args:
            email: Identity the link is requested for.
            challenge_response: Token produced by the CAPTCHA widget.
            remote_ip: Client IP, forwarded to the CAPTCHA provider.

        Returns:
            ResetLinkStatus reported by the sender.

        Raises:
            TooManyAttemptsError: If the identity is throttled.
            ValidationAppError: If the e-mail is invalid or the challenge is rejected.
            ChallengeUnavailableError: If the CAPTCHA provider cannot be reached.
            ResetLinkDeliveryError: If the link could not be delivered.
        """
        identity = email or ""
        identity_hash = hash_identity(identity)
        limiter_key = rate_limit_key(identity)

        if self.limiter.too_many_attempts(limiter_key, self.policy.max_attempts):
            retry_after = self.limiter.available_in(limiter_key)
            logger.warning(
                "password_reset.throttled",
                extra={"identity_hash": identity_hash, "retry_after_s": retry_after},
            )
            raise self._throttled(retry_after)

        self.limiter.hit(limiter_key, self.policy.decay_seconds)
        attempts = self._record_attempt(identity)

        logger.info(
            "password_reset.attempt",
            extra={"identity_hash": identity_hash, "attempts": attempts},
        )

        if self.policy.attempt_ceiling is not None and attempts > self.policy.attempt_ceiling:
            retry_after = int(self.store.ttl(attempt_counter_key(identity)) or self.policy.attempt_ttl_seconds)
            logger.warning(
                "password_reset.ceiling_reached",
                extra={"identity_hash": identity_hash, "attempts": attempts},
            )
            raise self._throttled(retry_after)

        self._validate_email(email)
        await self._validate_challenge(challenge_response, remote_ip)

        status = await self.sender.send_reset_link(identity)
        logger.info("password_reset.link_sent", extra={"identity_hash": identity_hash})
        return status

    def _record_attempt(self, identity: str) -> int:
        # Increment and TTL refresh happen in one store call
        return self.store.increment(
            attempt_counter_key(identity),
            ttl_seconds=self.policy.attempt_ttl_seconds,
        )

    @staticmethod
    def _throttled(retry_after: int) -> TooManyAttemptsError:
        return TooManyAttemptsError(
            code="too_many_attempts",
            message="Please wait before retrying.",
            details={
                "fields": {"email": ["Please wait before retrying."]},
                "retry_after": retry_after,
            },
        )

    @staticmethod
    def _validate_email(email: str | None) -> None:
        if not email:
            raise ValidationAppError.with_messages({"email": ["The email field is required."]})
        if not is_valid_email(email):
            raise ValidationAppError.with_messages(
                {"email": ["The email field must be a valid email address."]}
            )

    async def _validate_challenge(self, token: str | None, remote_ip: str | None) -> None:
        if not token:
            raise ValidationAppError.with_messages(
                {CHALLENGE_FIELD: ["The CAPTCHA field is required."]}
            )
        if not await self.verifier.verify(token, remote_ip=remote_ip):
            raise ValidationAppError.with_messages(
                {CHALLENGE_FIELD: ["The CAPTCHA verification failed. Please try again."]}
            )
