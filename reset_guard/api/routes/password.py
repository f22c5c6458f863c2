import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from reset_guard.schemas.password_reset import ForgotPasswordRequest, ForgotPasswordResponse
from reset_guard.services.password_reset_guard import PasswordResetGuard

router = APIRouter(tags=["Password Reset"])

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_password_reset_guard(request: Request) -> PasswordResetGuard:
    """Return the guard built for this application instance."""
    return request.app.state.password_reset_guard


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    # Numbers and booleans become text; uploads, lists and objects are dropped
    if isinstance(value, (int, float)):
        return str(value)
    return None


async def read_submission(request: Request) -> ForgotPasswordRequest:
    """Read the form or JSON body without rejecting it.

    Missing, malformed or oddly typed fields are passed on as text or None so
    the guard can charge the attempt before validating anything.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    raw: Any
    if content_type in _FORM_TYPES:
        raw = dict(await request.form())
    else:
        body = await request.body()
        try:
            raw = json.loads(body) if body else {}
        except ValueError:
            raw = {}

    if not isinstance(raw, dict):
        raw = {}

    return ForgotPasswordRequest.model_validate({k: _as_text(v) for k, v in raw.items()})


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": ForgotPasswordRequest.model_json_schema(by_alias=False)},
                "application/x-www-form-urlencoded": {"schema": ForgotPasswordRequest.model_json_schema()},
            },
        },
    },
)
async def forgot_password(
    request: Request,
    guard: Annotated[PasswordResetGuard, Depends(get_password_reset_guard)],
) -> ForgotPasswordResponse:
    """Send a password reset link.

    Accepts JSON or form-encoded bodies. Guard failures are raised as AppError
    subclasses and rendered by the global exception handlers (422 field
    errors, 429 throttled, 503 provider unavailable).
    """
    payload = await read_submission(request)
    remote_ip = request.client.host if request.client else None
    status = await guard.request_reset(
        payload.email,
        payload.cf_turnstile_response,
        remote_ip=remote_ip,
    )
    return ForgotPasswordResponse(status=status.value)
