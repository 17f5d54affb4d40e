"""Dependency providers used by FastAPI endpoints.

These helpers expose the Redis client, the auth backend client, the session
store, and the session registry through FastAPI's dependency injection system
so route handlers remain thin triggers on the verification controller.
"""

from fastapi import Depends
from redis.asyncio import Redis

from otpflow.core.config import Settings, get_settings
from otpflow.services.auth_api import AuthAPIClient
from otpflow.services.registry import SessionRegistry, get_session_registry
from otpflow.services.session_store import AuthSessionStore, get_redis_client
from otpflow.services.timers import AsyncioScheduler, Scheduler


def get_config() -> Settings:
    return get_settings()


def get_redis() -> Redis:
    """Return a singleton Redis client used for the authenticated session store."""
    return get_redis_client()


def get_auth_api(config: Settings = Depends(get_config)) -> AuthAPIClient:
    """Verify/Resend collaborator talking to the auth backend."""
    return AuthAPIClient(config=config)


def get_session_store(
    redis: Redis = Depends(get_redis),
    config: Settings = Depends(get_config),
) -> AuthSessionStore:
    """Login collaborator persisting verify responses in Redis."""
    return AuthSessionStore(redis, config=config)


def get_scheduler() -> Scheduler:
    return AsyncioScheduler()


def get_registry() -> SessionRegistry:
    return get_session_registry()
