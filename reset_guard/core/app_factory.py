"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
password reset guard with its collaborators) so tests can build isolated
instances with in-memory fakes.
"""

from __future__ import annotations

from fastapi import FastAPI

from reset_guard.adapters.cache.in_memory import InMemoryKeyValueStore
from reset_guard.adapters.captcha.factory import create_challenge_verifier
from reset_guard.adapters.rate_limit.in_memory import InMemoryRateLimiter
from reset_guard.adapters.reset_links.factory import create_reset_link_sender
from reset_guard.api.routes import health_router, password_router
from reset_guard.core.config import settings
from reset_guard.core.exception_handlers import setup_exception_handlers
from reset_guard.core.logging import configure_logging
from reset_guard.core.middleware import request_id_middleware
from reset_guard.services.password_reset_guard import GuardPolicy, PasswordResetGuard


def build_password_reset_guard() -> PasswordResetGuard:
    """Wire the guard from settings with per-process in-memory state."""
    return PasswordResetGuard(
        limiter=InMemoryRateLimiter(max_keys=settings.reset.limiter_max_keys),
        store=InMemoryKeyValueStore(max_entries=settings.reset.store_max_entries),
        verifier=create_challenge_verifier(settings.captcha),
        sender=create_reset_link_sender(settings),
        policy=GuardPolicy.from_settings(settings.reset),
    )


def create_app(guard: PasswordResetGuard | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        guard: Optional pre-built guard; built from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title=settings.app.name,
        description=(
            "Issues password reset links behind a per-identity rate limit, "
            "a sliding attempt counter and a Cloudflare Turnstile challenge."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.state.password_reset_guard = guard or build_password_reset_guard()

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(password_router)
    app.include_router(health_router)

    return app
