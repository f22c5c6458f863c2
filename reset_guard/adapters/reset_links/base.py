"""Interfaces for issuing and delivering password reset links."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class ResetLinkStatus(str, Enum):
    """Outcome of a reset-link request, carrying the user-facing message."""

    SENT = "We have emailed your password reset link."


class AbstractMailer(ABC):
    """Delivers a reset link to a mailbox."""

    @abstractmethod
    async def send_reset_link_email(self, to_email: str, reset_url: str, expires_minutes: int) -> None:
        """Send the reset e-mail.

        Raises:
            ResetLinkDeliveryError: If the message could not be handed off.
        """
        raise NotImplementedError


class AbstractResetLinkSender(ABC):
    """Creates a reset token for an identity and sends the link."""

    @abstractmethod
    async def send_reset_link(self, email: str) -> ResetLinkStatus:
        """Issue and deliver a reset link.

        Raises:
            ResetLinkDeliveryError: If the link could not be delivered.
        """
        raise NotImplementedError
