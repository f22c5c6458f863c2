from __future__ import annotations

from fastapi import APIRouter

from reset_guard.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check for load balancers; touches no downstream provider."""

    return {"status": "ok", "service": settings.app.name, "env": settings.app_env}
