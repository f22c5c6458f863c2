from __future__ import annotations

from reset_guard.api.routes.health import router as health_router
from reset_guard.api.routes.password import router as password_router

__all__ = ["health_router", "password_router"]
