"""Application entrypoint for the OTP verification flow service.

This module wires together the FastAPI application with its lifespan hooks:
logging is configured on startup, and hosted verification sessions plus the
shared Redis client are released on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otpflow.api.routes import verification_router
from otpflow.core.config import settings
from otpflow.core.logging_config import setup_logging
from otpflow.schemas.common import Message
from otpflow.services.registry import get_session_registry
from otpflow.services.session_store import close_redis_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup; stop session timers and close Redis on shutdown."""

    setup_logging(settings.LOG_LEVEL, settings.JSON_LOGS)
    yield
    get_session_registry().close_all()
    await close_redis_client()


def create_application() -> FastAPI:
    """Assemble and configure the FastAPI application instance.

    - Injects the lifespan manager defined above.
    - Applies permissive CORS settings for the browser client.
    - Registers the verification router that exposes the OTP screen triggers.
    """

    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(verification_router)

    @application.get("/", response_model=Message)
    async def healthcheck() -> Message:
        """Lightweight health endpoint used by uptime monitors."""
        return Message(message="OTP verification flow is running!")

    return application


app = create_application()
