"""Interpretation of the backend's verification answer.

The backend historically answers with prose (`"Email verified successfully"`,
`"Vendor verified, awaiting admin approval"`), so the outcome is derived from
substrings of the message. When a structured status field is present it wins
over the prose.
"""

from otpflow.core.config import settings
from otpflow.schemas.otp import Role, VerifyResponse
from otpflow.schemas.verification import VerificationStatus

SUCCESS_MARKERS = ("verified", "success")
PENDING_MARKER = "awaiting"

_STRUCTURED = {
    "SUCCESS": VerificationStatus.SUCCESS,
    "PENDING_APPROVAL": VerificationStatus.PENDING_APPROVAL,
    "FAILED": VerificationStatus.FAILED,
}


def structured_status(response: VerifyResponse, field: str = settings.STRUCTURED_STATUS_FIELD) -> VerificationStatus | None:
    """Return the backend-declared status, or None when absent or unrecognized."""
    value = (response.model_extra or {}).get(field)
    if not isinstance(value, str):
        return None
    return _STRUCTURED.get(value.strip().upper())


def classify_response(
    response: VerifyResponse,
    role: Role,
    status_field: str = settings.STRUCTURED_STATUS_FIELD,
) -> VerificationStatus:
    """Decide what a verification answer means for a session of `role`."""
    declared = structured_status(response, status_field)
    if declared is not None:
        if declared is VerificationStatus.FAILED:
            return VerificationStatus.FAILED
        if declared is VerificationStatus.PENDING_APPROVAL and role is Role.VENDOR:
            return VerificationStatus.PENDING_APPROVAL
        return VerificationStatus.SUCCESS if response.token else VerificationStatus.VERIFIED_WITHOUT_TOKEN

    message = (response.message or "").lower()
    is_success = any(marker in message for marker in SUCCESS_MARKERS)

    if not is_success and not response.token:
        return VerificationStatus.FAILED

    # A vendor can be code-verified yet still wait for admin approval
    if role is Role.VENDOR and PENDING_MARKER in message:
        return VerificationStatus.PENDING_APPROVAL

    if response.token:
        return VerificationStatus.SUCCESS
    return VerificationStatus.VERIFIED_WITHOUT_TOKEN
