"""Reset-link sender backed by timestamp-signed tokens."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from itsdangerous import URLSafeTimedSerializer

from reset_guard.adapters.reset_links.base import AbstractMailer, AbstractResetLinkSender, ResetLinkStatus
from reset_guard.core.logging import hash_identity

logger = logging.getLogger(__name__)

TOKEN_SALT = "password-reset-salt"


class SignedResetLinkSender(AbstractResetLinkSender):
    """Issue ``itsdangerous`` signed tokens and mail the resulting link.

    Tokens embed the identity and their issue time, so they need no storage;
    whoever completes the reset verifies them with the same secret and salt
    and a ``max_age`` of ``token_ttl_minutes``.
    """

    def __init__(
        self,
        secret_key: str,
        mailer: AbstractMailer,
        url_base: str,
        token_ttl_minutes: int = 60,
    ) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self._mailer = mailer
        self.url_base = url_base
        self.token_ttl_minutes = token_ttl_minutes

    def issue_token(self, email: str) -> str:
        return self._serializer.dumps(email)

    def build_reset_url(self, email: str, token: str) -> str:
        separator = "&" if "?" in self.url_base else "?"
        return f"{self.url_base}{separator}{urlencode({'token': token, 'email': email})}"

    async def send_reset_link(self, email: str) -> ResetLinkStatus:
        token = self.issue_token(email)
        reset_url = self.build_reset_url(email, token)

        await self._mailer.send_reset_link_email(email, reset_url, self.token_ttl_minutes)

        logger.info(
            "reset_link.issued",
            extra={"identity_hash": hash_identity(email), "expires_minutes": self.token_ttl_minutes},
        )
        return ResetLinkStatus.SENT
