"""Token issuance and delivery of password reset links."""

from reset_guard.adapters.reset_links.base import AbstractMailer, AbstractResetLinkSender, ResetLinkStatus
from reset_guard.adapters.reset_links.factory import create_mailer, create_reset_link_sender
from reset_guard.adapters.reset_links.mailers import BrevoMailer, LogMailer
from reset_guard.adapters.reset_links.signed import SignedResetLinkSender

__all__ = [
    "AbstractMailer",
    "AbstractResetLinkSender",
    "BrevoMailer",
    "LogMailer",
    "ResetLinkStatus",
    "SignedResetLinkSender",
    "create_mailer",
    "create_reset_link_sender",
]
