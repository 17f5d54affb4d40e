from otpflow.schemas.common import Message
from otpflow.schemas.otp import OTPRequest, OTPVerify, Role, VerifyResponse
from otpflow.schemas.verification import CodeEntry, SessionCreate, VerificationView

__all__ = [
    "CodeEntry",
    "Message",
    "OTPRequest",
    "OTPVerify",
    "Role",
    "SessionCreate",
    "VerificationView",
    "VerifyResponse",
]
