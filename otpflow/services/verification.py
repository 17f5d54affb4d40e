"""Verification state machine for the signup OTP screen.

UI events are thin triggers on `VerificationController`: `enter_code` on every
keystroke, `submit` for the verify button, `resend` for the resend link,
`back` / `return_to_login` for navigation. The countdown ticks itself through
the injected scheduler.
"""

import re
from typing import Awaitable, Callable

from otpflow.core.config import Settings, settings
from otpflow.core.exceptions import error_message
from otpflow.core.logging_config import get_logger
from otpflow.schemas.otp import Role, VerifyResponse
from otpflow.schemas.verification import ResendState, SubmissionState, VerificationStatus
from otpflow.services.classification import classify_response
from otpflow.services.timers import AsyncioScheduler, Scheduler, TimerHandle

logger = get_logger(__name__)

VerifyFn = Callable[[str, str, Role], Awaitable[VerifyResponse]]
ResendFn = Callable[[str, Role], Awaitable[None]]
LoginFn = Callable[[VerifyResponse], Awaitable[object]]
NavigateFn = Callable[[str], None]

DEFAULT_VERIFY_FAILED = "Verification failed"
DEFAULT_INVALID_OTP = "Invalid OTP. Please try again."
DEFAULT_RESEND_FAILED = "Failed to resend OTP."
LOGIN_FAILED = "Login failed. Please try logging in manually."
VERIFIED_WITHOUT_TOKEN = "Verification successful, but auto-login failed. Please log in manually."

_NON_DIGITS = re.compile(r"[^0-9]")


class VerificationController:
    """Owns one verification session from the moment the flow is entered until teardown.

    Collaborators:
    - `verify(email, code, role)` returns the backend's `VerifyResponse`
    - `resend(email, role)` asks the backend to mail a fresh code
    - `login(response)` establishes an authenticated session from a verify response
    - `navigate(path)` moves the client to another screen
    - `on_back()` optional override for the back link
    """

    def __init__(
        self,
        email: str,
        role: Role | str,
        *,
        verify: VerifyFn,
        resend: ResendFn,
        login: LoginFn,
        navigate: NavigateFn,
        scheduler: Scheduler | None = None,
        on_back: Callable[[], None] | None = None,
        config: Settings = settings,
    ):
        self.email = email
        self.role = Role(role)
        self.code = ""
        self.submission_state = SubmissionState.IDLE
        self.last_error: str | None = None
        # The first code has just been sent when the flow is entered
        self.resend_state = ResendState.COOLDOWN_ACTIVE
        self.seconds_remaining = config.RESEND_COOLDOWN_SECONDS
        self.redirect_to: str | None = None

        self._verify = verify
        self._resend = resend
        self._login = login
        self._navigate = navigate
        self._on_back = on_back
        self._scheduler = scheduler or AsyncioScheduler()
        self._config = config

        self._tick_handle: TimerHandle | None = None
        self._redirect_handle: TimerHandle | None = None
        self._started = False
        self._closed = False

    # -----------------------
    # Lifecycle
    # -----------------------
    def start(self) -> None:
        """Begin the resend countdown; called once when the screen is entered."""
        if self._started or self._closed:
            return
        self._started = True
        if self.seconds_remaining > 0:
            self._schedule_tick()
        else:
            self._expire_cooldown()

    def close(self) -> None:
        """Tear the session down: stop every timer and ignore late responses."""
        if self._closed:
            return
        self._closed = True
        self._stop_countdown()
        if self._redirect_handle is not None:
            self._redirect_handle.cancel()
            self._redirect_handle = None
        logger.debug("Verification session closed", extra={"role": self.role.value})

    async def __aenter__(self) -> "VerificationController":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # -----------------------
    # Derived state
    # -----------------------
    @property
    def is_terminal(self) -> bool:
        return self.submission_state in (SubmissionState.VENDOR_PENDING, SubmissionState.REDIRECTING)

    @property
    def can_submit(self) -> bool:
        return (
            not self._closed
            and self.submission_state is SubmissionState.IDLE
            and len(self.code) == self._config.OTP_LENGTH
        )

    @property
    def can_resend(self) -> bool:
        return (
            not self._closed
            and not self.is_terminal
            and self.resend_state is ResendState.COOLDOWN_EXPIRED
        )

    # -----------------------
    # Triggers
    # -----------------------
    def enter_code(self, raw: str) -> str:
        """Store keystroke content as at most OTP_LENGTH ASCII digits."""
        if self._closed or self.is_terminal:
            return self.code
        self.code = _NON_DIGITS.sub("", raw or "")[: self._config.OTP_LENGTH]
        return self.code

    async def submit(self, code: str | None = None) -> bool:
        """Verify the entered code. Returns False when the submit was rejected."""
        if code is not None:
            self.enter_code(code)
        if not self.can_submit:
            logger.debug(
                "Submit rejected",
                extra={"state": self.submission_state.value, "code_length": len(self.code)},
            )
            return False

        self.submission_state = SubmissionState.SUBMITTING
        self.last_error = None
        logger.info("Submitting OTP for verification", extra={"role": self.role.value})

        try:
            response = await self._verify(self.email, self.code, self.role)
        except Exception as exc:
            if self._closed:
                return True
            logger.warning("OTP verification call failed", extra={"role": self.role.value, "error": str(exc)})
            self._fail(error_message(exc, DEFAULT_INVALID_OTP))
            return True

        if self._closed:
            return True

        status = classify_response(response, self.role, self._config.STRUCTURED_STATUS_FIELD)
        logger.info("Verification answer classified", extra={"role": self.role.value, "status": status.value})

        if status is VerificationStatus.FAILED:
            self._fail(response.message or DEFAULT_VERIFY_FAILED)
        elif status is VerificationStatus.PENDING_APPROVAL:
            self.submission_state = SubmissionState.VENDOR_PENDING
            self._stop_countdown()
        elif status is VerificationStatus.SUCCESS:
            await self._complete_login(response)
        else:
            self._fail(VERIFIED_WITHOUT_TOKEN)
        return True

    async def resend(self) -> bool:
        """Request a fresh code. Ignored (returns False) unless the cooldown has expired."""
        if not self.can_resend:
            return False

        self.resend_state = ResendState.RESENDING
        self.last_error = None
        logger.info("Resending OTP", extra={"role": self.role.value})

        try:
            await self._resend(self.email, self.role)
        except Exception as exc:
            if self._closed:
                return True
            logger.warning("OTP resend failed", extra={"role": self.role.value, "error": str(exc)})
            self.last_error = error_message(exc, DEFAULT_RESEND_FAILED)
            self.resend_state = ResendState.COOLDOWN_EXPIRED
            return True

        if self._closed:
            return True
        self._restart_cooldown()
        return True

    def back(self) -> None:
        """Leave the flow through the caller's back handler or the signup screen."""
        if self._on_back is not None:
            self._on_back()
            return
        self._navigate(f"{self._config.SIGNUP_PATH}?role={self.role.value.lower()}")

    def return_to_login(self) -> bool:
        """From the pending-approval screen, go to the vendor login page."""
        if self.submission_state is not SubmissionState.VENDOR_PENDING:
            return False
        self._navigate(self._config.VENDOR_LOGIN_PATH)
        return True

    # -----------------------
    # Transitions
    # -----------------------
    def _fail(self, message: str) -> None:
        self.last_error = message
        self.submission_state = SubmissionState.IDLE

    async def _complete_login(self, response: VerifyResponse) -> None:
        try:
            await self._login(response)
        except Exception as exc:
            if self._closed:
                return
            # The code is consumed by now; only a manual login can recover
            logger.warning("Auto-login after verification failed", extra={"role": self.role.value, "error": str(exc)})
            self._fail(LOGIN_FAILED)
            return

        if self._closed:
            return

        if self.role is Role.VENDOR:
            self.redirect_to = self._config.VENDOR_DASHBOARD_PATH
        else:
            self.redirect_to = self._config.USER_DASHBOARD_PATH
        self.submission_state = SubmissionState.REDIRECTING
        self._stop_countdown()
        self._redirect_handle = self._scheduler.call_later(self._config.POST_LOGIN_DELAY_SECONDS, self._redirect)
        logger.info("Verified and logged in", extra={"role": self.role.value, "redirect_to": self.redirect_to})

    def _redirect(self) -> None:
        self._redirect_handle = None
        if self._closed or self.redirect_to is None:
            return
        self._navigate(self.redirect_to)

    def _restart_cooldown(self) -> None:
        self._stop_countdown()
        self.resend_state = ResendState.COOLDOWN_ACTIVE
        self.seconds_remaining = self._config.RESEND_COOLDOWN_SECONDS
        if self.is_terminal:
            return
        if self.seconds_remaining > 0:
            self._schedule_tick()
        else:
            self._expire_cooldown()

    def _schedule_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(self._config.COUNTDOWN_TICK_SECONDS, self._tick)

    def _tick(self) -> None:
        self._tick_handle = None
        if self._closed or self.resend_state is not ResendState.COOLDOWN_ACTIVE:
            return
        self.seconds_remaining -= 1
        if self.seconds_remaining <= 0:
            self._expire_cooldown()
        else:
            self._schedule_tick()

    def _expire_cooldown(self) -> None:
        self.seconds_remaining = 0
        self.resend_state = ResendState.COOLDOWN_EXPIRED

    def _stop_countdown(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
