"""HTTP client for the auth backend's OTP endpoints."""

import httpx

from otpflow.core.config import Settings, settings
from otpflow.core.exceptions import ResendFailure, TransportFailure, VerificationFailure
from otpflow.core.logging_config import get_logger
from otpflow.schemas.otp import OTPRequest, OTPVerify, Role, VerifyResponse

logger = get_logger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Pull the human-readable reason out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return ""


class AuthAPIClient:
    """Verify and Resend collaborators backed by the auth backend's REST API."""

    def __init__(self, config: Settings = settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.AUTH_API_URL,
            timeout=self.config.HTTP_TIMEOUT_SECONDS,
            transport=self._transport,
        )

    async def verify_otp(self, email: str, code: str, role: Role) -> VerifyResponse:
        """Submit a code; a non-2xx answer raises `VerificationFailure` with the backend's reason."""

        payload = OTPVerify(email=email, otp=code, role=role)
        try:
            async with self._client() as client:
                resp = await client.post(self.config.VERIFY_OTP_PATH, json=payload.model_dump(mode="json"))
        except httpx.HTTPError as exc:
            logger.warning("Verify request did not complete", extra={"error": str(exc)})
            raise TransportFailure() from exc

        if resp.is_error:
            raise VerificationFailure(_error_detail(resp))

        try:
            return VerifyResponse.model_validate(resp.json())
        except ValueError as exc:
            logger.warning("Verify response was not a JSON object", extra={"status_code": resp.status_code})
            raise TransportFailure() from exc

    async def resend_otp(self, email: str, role: Role) -> None:
        """Ask the backend to mail a fresh code; a non-2xx answer raises `ResendFailure`."""

        payload = OTPRequest(email=email, role=role)
        try:
            async with self._client() as client:
                resp = await client.post(self.config.RESEND_OTP_PATH, json=payload.model_dump(mode="json"))
        except httpx.HTTPError as exc:
            logger.warning("Resend request did not complete", extra={"error": str(exc)})
            raise TransportFailure() from exc

        if resp.is_error:
            raise ResendFailure(_error_detail(resp))
