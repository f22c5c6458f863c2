"""Factory pattern for creating challenge verifier instances."""

from reset_guard.adapters.captcha.base import AbstractChallengeVerifier
from reset_guard.adapters.captcha.turnstile import TurnstileVerifier
from reset_guard.core.config import CaptchaSettings, settings
from reset_guard.core.errors import ValidationAppError


def create_challenge_verifier(captcha_settings: CaptchaSettings | None = None) -> AbstractChallengeVerifier:
    """Instantiate the challenge verifier for the configured provider.

    Args:
        captcha_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractChallengeVerifier: Configured verifier.

    Raises:
        ValidationAppError: If provider-specific requirements are not met.
    """
    cfg = captcha_settings or settings.captcha
    provider = cfg.provider.lower()

    if provider == "turnstile":
        if not cfg.secret_key:
            raise ValidationAppError(
                code="captcha_missing_secret",
                message="Turnstile provider requires CAPTCHA_SECRET_KEY environment variable",
            )
        return TurnstileVerifier(
            secret_key=cfg.secret_key,
            verify_url=cfg.verify_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ValidationAppError(
        code="captcha_unknown_provider",
        message=(
            f"Unknown CAPTCHA provider: '{provider}'. Supported providers: turnstile"
        ),
    )
