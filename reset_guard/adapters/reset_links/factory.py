"""Factory for the reset-link sender and its mailer."""

from reset_guard.adapters.reset_links.base import AbstractMailer, AbstractResetLinkSender
from reset_guard.adapters.reset_links.mailers import BrevoMailer, LogMailer
from reset_guard.adapters.reset_links.signed import SignedResetLinkSender
from reset_guard.core.config import Settings, settings as global_settings
from reset_guard.core.errors import ValidationAppError


def create_mailer(cfg: Settings | None = None) -> AbstractMailer:
    """Build the mailer selected by ``MAIL_DRIVER``.

    Raises:
        ValidationAppError: If driver-specific requirements are not met.
    """
    cfg = cfg or global_settings
    mail = cfg.mail
    driver = mail.driver.lower()

    if driver == "log":
        # Log output carries live reset links
        if cfg.app_env.lower() == "production":
            raise ValidationAppError(
                code="mail_log_driver_in_production",
                message="The log mail driver cannot be used when APP_ENV=production",
            )
        return LogMailer()

    if driver == "brevo":
        if not mail.api_key:
            raise ValidationAppError(
                code="mail_missing_api_key",
                message="Brevo mail driver requires MAIL_API_KEY environment variable",
            )
        return BrevoMailer(
            api_key=mail.api_key,
            from_email=mail.from_email,
            from_name=mail.from_name,
            api_url=mail.api_url,
            timeout_seconds=mail.timeout_seconds,
        )

    raise ValidationAppError(
        code="mail_unknown_driver",
        message=f"Unknown mail driver: '{driver}'. Supported drivers: log, brevo",
    )


def create_reset_link_sender(cfg: Settings | None = None) -> AbstractResetLinkSender:
    """Build the signed-token reset-link sender from settings."""
    cfg = cfg or global_settings
    return SignedResetLinkSender(
        secret_key=cfg.reset.secret_key,
        mailer=create_mailer(cfg),
        url_base=cfg.reset.url_base,
        token_ttl_minutes=cfg.reset.token_ttl_minutes,
    )
