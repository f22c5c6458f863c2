"""Mailers for password reset links.

- ``LogMailer`` writes the link to the application log (local development).
- ``BrevoMailer`` sends a transactional e-mail through the Brevo HTTP API.
"""

from __future__ import annotations

import html
import logging

import httpx

from reset_guard.adapters.reset_links.base import AbstractMailer
from reset_guard.core.errors import ResetLinkDeliveryError
from reset_guard.core.logging import hash_identity

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Reset Password Notification"


def render_reset_email(reset_url: str, expires_minutes: int) -> str:
    """Render the HTML body of the reset e-mail."""

    url = html.escape(reset_url, quote=True)
    return (
        "<p>You are receiving this email because we received a password reset "
        "request for your account.</p>"
        f'<p><a href="{url}">Reset Password</a></p>'
        f"<p>This password reset link will expire in {expires_minutes} minutes.</p>"
        "<p>If you did not request a password reset, no further action is required.</p>"
    )


class LogMailer(AbstractMailer):
    """Write reset links to the log instead of sending them."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def send_reset_link_email(self, to_email: str, reset_url: str, expires_minutes: int) -> None:
        # The link is part of the message so it survives redaction. create_mailer refuses this driver in production.
        self._log.info(
            "mail.reset_link: %s",
            reset_url,
            extra={
                "identity_hash": hash_identity(to_email),
                "expires_minutes": expires_minutes,
            },
        )


class BrevoMailer(AbstractMailer):
    """Send reset e-mails with the Brevo transactional API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _build_payload(self, to_email: str, reset_url: str, expires_minutes: int) -> dict:
        return {
            "sender": {"name": self.from_name, "email": self.from_email},
            "to": [{"email": to_email}],
            "subject": RESET_SUBJECT,
            "htmlContent": render_reset_email(reset_url, expires_minutes),
        }

    async def send_reset_link_email(self, to_email: str, reset_url: str, expires_minutes: int) -> None:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "api-key": self.api_key,
        }
        payload = self._build_payload(to_email, reset_url, expires_minutes)

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            logger.error(
                "mail.delivery_failed",
                extra={
                    "provider": "brevo",
                    "identity_hash": hash_identity(to_email),
                    "error_type": type(exc).__name__,
                    "http_status": status,
                },
            )
            raise ResetLinkDeliveryError(
                code="reset_link_delivery_failed",
                message="We could not send the password reset link. Please try again later.",
                details={"provider": "brevo"},
            ) from exc

        logger.info(
            "mail.sent",
            extra={"provider": "brevo", "identity_hash": hash_identity(to_email)},
        )
