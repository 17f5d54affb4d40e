"""HTTP triggers for hosted OTP verification sessions."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from otpflow.api import deps
from otpflow.core.config import Settings
from otpflow.schemas.verification import CodeEntry, ResendState, SessionCreate, VerificationView
from otpflow.services.auth_api import AuthAPIClient
from otpflow.services.registry import HostedSession, SessionRegistry
from otpflow.services.session_store import AuthSessionStore
from otpflow.services.timers import Scheduler

router = APIRouter(prefix="/verification", tags=["verification"])


def get_hosted_session(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_registry),
) -> HostedSession:
    """Resolve the path's session id or answer 404."""
    hosted = registry.get(session_id)
    if hosted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Verification session not found.")
    return hosted


@router.post("/sessions", response_model=VerificationView, status_code=status.HTTP_201_CREATED)
async def open_session(
    payload: SessionCreate,
    registry: SessionRegistry = Depends(deps.get_registry),
    auth_api: AuthAPIClient = Depends(deps.get_auth_api),
    session_store: AuthSessionStore = Depends(deps.get_session_store),
    scheduler: Scheduler = Depends(deps.get_scheduler),
    config: Settings = Depends(deps.get_config),
) -> VerificationView:
    """Enter the verification flow for an email that was just sent a code."""

    hosted = registry.open(
        payload.email,
        payload.role,
        auth_api=auth_api,
        session_store=session_store,
        scheduler=scheduler,
        config=config,
    )
    return hosted.view()


@router.get("/sessions/{session_id}", response_model=VerificationView)
async def read_session(hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """Current state of the session, including countdown and pending navigation."""
    return hosted.view()


@router.put("/sessions/{session_id}/code", response_model=VerificationView)
async def enter_code(payload: CodeEntry, hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """Replace the code field with the normalized keystroke content."""
    hosted.controller.enter_code(payload.code)
    return hosted.view()


@router.post("/sessions/{session_id}/submit", response_model=VerificationView)
async def submit_code(hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """Verify the entered code and report the resulting state."""

    if not await hosted.controller.submit():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Submission rejected: a complete code is required and no verification may be in progress.",
        )
    return hosted.view()


@router.post("/sessions/{session_id}/resend", response_model=VerificationView)
async def resend_code(hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """Request a fresh code once the cooldown has run out."""

    controller = hosted.controller
    if not await controller.resend():
        if controller.is_terminal:
            detail = "Resend is not available once verification has finished."
        elif controller.resend_state is ResendState.RESENDING:
            detail = "A new code is already being sent."
        else:
            detail = f"Resend is not available yet ({controller.seconds_remaining}s remaining)."
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return hosted.view()


@router.post("/sessions/{session_id}/back", response_model=VerificationView)
async def go_back(hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """Leave the flow towards the signup screen for the session's role."""
    hosted.controller.back()
    return hosted.view()


@router.post("/sessions/{session_id}/return-to-login", response_model=VerificationView)
async def return_to_login(hosted: HostedSession = Depends(get_hosted_session)) -> VerificationView:
    """From the pending-approval screen, head to the vendor login page."""

    if not hosted.controller.return_to_login():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Only sessions awaiting vendor approval can return to login.",
        )
    return hosted.view()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    hosted: HostedSession = Depends(get_hosted_session),
    registry: SessionRegistry = Depends(deps.get_registry),
) -> Response:
    """Tear the session down; in-flight answers arriving later are discarded."""
    registry.close(hosted.session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
