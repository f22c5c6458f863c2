"""Tests for the Turnstile challenge verifier and its factory."""

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from reset_guard.adapters.captcha.factory import create_challenge_verifier
from reset_guard.adapters.captcha.turnstile import DEFAULT_VERIFY_URL, TurnstileVerifier
from reset_guard.core.config import CaptchaSettings
from reset_guard.core.errors import ChallengeUnavailableError, ValidationAppError


def _verifier(handler) -> TurnstileVerifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TurnstileVerifier(secret_key="secret-abc", client=client)


def test_posts_secret_token_and_remote_ip() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"success": True})

    verifier = _verifier(handler)

    assert asyncio.run(verifier.verify("tok-1", remote_ip="198.51.100.7")) is True
    assert seen["url"] == DEFAULT_VERIFY_URL
    assert seen["form"] == {
        "secret": ["secret-abc"],
        "response": ["tok-1"],
        "remoteip": ["198.51.100.7"],
    }


def test_remote_ip_is_optional() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"success": True})

    asyncio.run(_verifier(handler).verify("tok-1"))

    assert "remoteip" not in seen["form"]


def test_rejected_token_returns_false() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error-codes": ["invalid-input-response"]})

    assert asyncio.run(_verifier(handler).verify("bad")) is False


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, text="upstream error"),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
        lambda request: httpx.Response(200, json=["unexpected"]),
    ],
    ids=["server-error", "invalid-json", "non-object"],
)
def test_bad_provider_responses_raise_unavailable(handler) -> None:
    with pytest.raises(ChallengeUnavailableError) as exc_info:
        asyncio.run(_verifier(handler).verify("tok"))

    assert exc_info.value.code == "captcha_unavailable"


def test_network_error_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ChallengeUnavailableError):
        asyncio.run(_verifier(handler).verify("tok"))


class TestFactory:
    def test_builds_turnstile_verifier(self) -> None:
        cfg = CaptchaSettings(provider="Turnstile", secret_key="s3cret", timeout_seconds=2.0)

        verifier = create_challenge_verifier(cfg)

        assert isinstance(verifier, TurnstileVerifier)
        assert verifier.secret_key == "s3cret"
        assert verifier.timeout_seconds == 2.0

    def test_missing_secret_is_rejected(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            create_challenge_verifier(CaptchaSettings(provider="turnstile", secret_key=None))

        assert exc_info.value.code == "captcha_missing_secret"

    def test_unknown_provider_is_rejected(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            create_challenge_verifier(CaptchaSettings(provider="recaptcha", secret_key="x"))

        assert exc_info.value.code == "captcha_unknown_provider"
