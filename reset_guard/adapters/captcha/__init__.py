"""Challenge (CAPTCHA) adapter layer - abstracts over verification providers."""

from reset_guard.adapters.captcha.base import AbstractChallengeVerifier
from reset_guard.adapters.captcha.factory import create_challenge_verifier
from reset_guard.adapters.captcha.turnstile import TurnstileVerifier

__all__ = [
    "AbstractChallengeVerifier",
    "TurnstileVerifier",
    "create_challenge_verifier",
]
