"""Pydantic schemas for the forgot-password endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ForgotPasswordRequest(BaseModel):
    """Reset-link request as submitted by the forgot-password form.

    Fields stay loosely typed: presence and format are checked by the guard
    after the request has been charged against the rate limit.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = Field(
        default=None,
        description="Address of the account to reset.",
    )
    cf_turnstile_response: str | None = Field(
        default=None,
        alias="cf-turnstile-response",
        description="Token produced by the Turnstile widget.",
    )


class ForgotPasswordResponse(BaseModel):
    """Acknowledgement returned once the reset link has been handed off."""

    status: str = Field(..., description="User-facing confirmation message.")
