"""Error taxonomy shared by the verification controller and its collaborators."""


class OTPFlowError(Exception):
    """Base error carrying a human-readable message for display."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class VerificationFailure(OTPFlowError):
    """The backend rejected the submitted code."""


class LoginFailure(OTPFlowError):
    """The code was accepted but no authenticated session could be established."""


class ResendFailure(OTPFlowError):
    """The backend refused to send a fresh code."""


class TransportFailure(OTPFlowError):
    """A collaborator call failed before the backend produced an answer."""


def error_message(exc: BaseException, default: str) -> str:
    """Return the display message of `exc`, or `default` when it has none."""
    message = getattr(exc, "message", None) or str(exc)
    return message or default
