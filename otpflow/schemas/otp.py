"""Pydantic schemas for OTP verification and resend payloads."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Role(str, Enum):
    """Signup role; decides post-verification routing, not verification itself."""

    USER = "USER"
    VENDOR = "VENDOR"


class OTPVerify(BaseModel):
    """Payload used when submitting a received OTP code for validation."""

    email: EmailStr
    otp: str = Field(pattern=r"^[0-9]+$")
    role: Role = Role.USER


class OTPRequest(BaseModel):
    """Payload used to request a new OTP for a specific email."""

    email: EmailStr
    role: Role = Role.USER


class VerifyResponse(BaseModel):
    """Backend answer to a verification attempt.

    Only `message` and `token` drive classification; any extra fields the
    backend sends (user id, role, names) are kept so the whole response can be
    handed to the session store.
    """

    model_config = ConfigDict(extra="allow")

    message: str = ""
    token: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def null_message_as_empty(cls, v: object) -> object:
        """Treat a null message like a missing one."""
        return "" if v is None else v
