"""Cloudflare Turnstile challenge verifier."""

import logging

import httpx

from reset_guard.adapters.captcha.base import AbstractChallengeVerifier
from reset_guard.core.errors import ChallengeUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class TurnstileVerifier(AbstractChallengeVerifier):
    """Verify Turnstile tokens against the ``siteverify`` endpoint.

    Uses ``httpx.AsyncClient``. A client may be injected (tests use
    ``httpx.MockTransport``); otherwise one is opened per verification.
    """

    def __init__(
        self,
        secret_key: str,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            secret_key: Turnstile widget secret.
            verify_url: Verification endpoint.
            timeout_seconds: Timeout for the verification request.
            client: Optional shared async HTTP client.
        """
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def verify(self, token: str, *, remote_ip: str | None = None) -> bool:
        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.verify_url, data=form, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(self.verify_url, data=form)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "captcha.unavailable",
                extra={"provider": "turnstile", "error_type": type(exc).__name__},
            )
            raise ChallengeUnavailableError(
                code="captcha_unavailable",
                message="The CAPTCHA could not be verified right now. Please try again.",
                details={"provider": "turnstile"},
            ) from exc

        if not isinstance(payload, dict):
            raise ChallengeUnavailableError(
                code="captcha_unavailable",
                message="The CAPTCHA could not be verified right now. Please try again.",
                details={"provider": "turnstile"},
            )

        success = payload.get("success") is True
        if not success:
            logger.info(
                "captcha.rejected",
                extra={"provider": "turnstile", "error_codes": payload.get("error-codes", [])},
            )
        return success
