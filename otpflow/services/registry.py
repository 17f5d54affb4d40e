"""In-process registry of verification sessions hosted by the HTTP surface."""

import secrets
from dataclasses import dataclass, field
from typing import Optional

from otpflow.core.config import Settings, settings
from otpflow.core.logging_config import get_logger
from otpflow.schemas.otp import Role
from otpflow.schemas.verification import VerificationView
from otpflow.services.auth_api import AuthAPIClient
from otpflow.services.navigation import RecordingNavigator
from otpflow.services.session_store import AuthSessionStore
from otpflow.services.timers import AsyncioScheduler, Scheduler, TimerHandle
from otpflow.services.verification import VerificationController

logger = get_logger(__name__)


@dataclass
class HostedSession:
    """A controller together with the navigator that records where it sent the client."""

    session_id: str
    controller: VerificationController
    navigator: RecordingNavigator = field(default_factory=RecordingNavigator)
    scheduler: Scheduler = field(default_factory=AsyncioScheduler)
    config: Settings = field(default_factory=lambda: settings)
    idle_handle: TimerHandle | None = None
    evict_handle: TimerHandle | None = None

    def cancel_timers(self) -> None:
        for handle in (self.idle_handle, self.evict_handle):
            if handle is not None:
                handle.cancel()
        self.idle_handle = None
        self.evict_handle = None

    def view(self) -> VerificationView:
        controller = self.controller
        return VerificationView(
            session_id=self.session_id,
            email=controller.email,
            role=controller.role,
            code=controller.code,
            submission_state=controller.submission_state,
            last_error=controller.last_error,
            resend_state=controller.resend_state,
            seconds_remaining=controller.seconds_remaining,
            can_submit=controller.can_submit,
            can_resend=controller.can_resend,
            redirect_to=controller.redirect_to,
            navigate_to=self.navigator.location,
        )


class SessionRegistry:
    """Create, look up, and tear down hosted sessions by id.

    A session is evicted once it has gone `SESSION_IDLE_TTL_SECONDS` without a
    request, or `SESSION_EVICT_GRACE_SECONDS` after it navigated out of the flow.
    """

    def __init__(self, scheduler: Scheduler | None = None, config: Settings = settings) -> None:
        self._sessions: dict[str, HostedSession] = {}
        self._scheduler = scheduler
        self._config = config

    def open(
        self,
        email: str,
        role: Role,
        *,
        auth_api: AuthAPIClient,
        session_store: AuthSessionStore,
        scheduler: Scheduler | None = None,
        config: Settings | None = None,
    ) -> HostedSession:
        """Enter the flow for `email`; must run inside the event loop that drives timers."""
        scheduler = scheduler or self._scheduler or AsyncioScheduler()
        if config is None:
            config = self._config
        session_id = secrets.token_urlsafe(16)
        navigator = RecordingNavigator(on_navigate=lambda path: self._schedule_eviction(session_id))
        controller = VerificationController(
            email,
            role,
            verify=auth_api.verify_otp,
            resend=auth_api.resend_otp,
            login=session_store.login,
            navigate=navigator,
            scheduler=scheduler,
            config=config,
        )
        hosted = HostedSession(
            session_id=session_id,
            controller=controller,
            navigator=navigator,
            scheduler=scheduler,
            config=config,
        )
        self._sessions[session_id] = hosted
        controller.start()
        self._arm_idle_timer(hosted)
        logger.info("Verification session opened", extra={"session_id": session_id, "role": controller.role.value})
        return hosted

    def get(self, session_id: str) -> HostedSession | None:
        """Look a session up; every lookup counts as activity."""
        hosted = self._sessions.get(session_id)
        if hosted is not None:
            self._arm_idle_timer(hosted)
        return hosted

    def close(self, session_id: str) -> bool:
        hosted = self._sessions.pop(session_id, None)
        if hosted is None:
            return False
        hosted.cancel_timers()
        hosted.controller.close()
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def _arm_idle_timer(self, hosted: HostedSession) -> None:
        if hosted.idle_handle is not None:
            hosted.idle_handle.cancel()
        hosted.idle_handle = hosted.scheduler.call_later(
            hosted.config.SESSION_IDLE_TTL_SECONDS, lambda: self._evict(hosted.session_id, "idle")
        )

    def _schedule_eviction(self, session_id: str) -> None:
        hosted = self._sessions.get(session_id)
        if hosted is None:
            return
        if hosted.evict_handle is not None:
            hosted.evict_handle.cancel()
        hosted.evict_handle = hosted.scheduler.call_later(
            hosted.config.SESSION_EVICT_GRACE_SECONDS, lambda: self._evict(session_id, "navigated")
        )

    def _evict(self, session_id: str, reason: str) -> None:
        if self.close(session_id):
            logger.info("Verification session evicted", extra={"session_id": session_id, "reason": reason})


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry
