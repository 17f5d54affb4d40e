"""Schemas describing a verification session as seen by the UI layer."""

from enum import Enum

from pydantic import BaseModel, EmailStr

from otpflow.schemas.otp import Role


class SubmissionState(str, Enum):
    """Authoritative machine state of a session.

    A failed attempt returns to IDLE with `last_error` set. VENDOR_PENDING and
    REDIRECTING are terminal.
    """

    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    VENDOR_PENDING = "VENDOR_PENDING"
    REDIRECTING = "REDIRECTING"


class ResendState(str, Enum):
    """Resend sub-machine: cooldown countdown, expired, or a send in flight."""

    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    COOLDOWN_EXPIRED = "COOLDOWN_EXPIRED"
    RESENDING = "RESENDING"


class VerificationStatus(str, Enum):
    """Classification of a backend verification answer."""

    SUCCESS = "SUCCESS"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    FAILED = "FAILED"
    VERIFIED_WITHOUT_TOKEN = "VERIFIED_WITHOUT_TOKEN"


class SessionCreate(BaseModel):
    """Payload that enters the verification flow for an email awaiting its code."""

    email: EmailStr
    role: Role = Role.USER


class CodeEntry(BaseModel):
    """Raw keystroke content of the code field; normalized by the controller."""

    code: str


class VerificationView(BaseModel):
    """Snapshot of a session rendered by the client."""

    session_id: str
    email: EmailStr
    role: Role
    code: str
    submission_state: SubmissionState
    last_error: str | None = None
    resend_state: ResendState
    seconds_remaining: int = 0
    can_submit: bool
    can_resend: bool
    redirect_to: str | None = None
    navigate_to: str | None = None
