"""Authenticated session storage backed by Redis."""

from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from otpflow.core.config import Settings, settings
from otpflow.core.exceptions import LoginFailure
from otpflow.schemas.otp import VerifyResponse


_redis_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """Return a lazily initialized Redis client shared across the service."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    """Close the shared Redis client; invoked during application shutdown."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def session_subject(response: VerifyResponse) -> str:
    """Identify whose session a verify response opens: its email, else its token."""
    email = (response.model_extra or {}).get("email")
    return email if isinstance(email, str) and email else response.token or ""


class AuthSessionStore:
    """Login collaborator: persists the verify response as the authenticated session."""

    def __init__(self, redis_client: Redis, config: Settings = settings):
        self.redis = redis_client
        self.config = config

    def _key(self, subject: str) -> str:
        return f"{self.config.SESSION_KEY_PREFIX}:{subject}"

    async def login(self, response: VerifyResponse) -> str:
        """Store the full response with a TTL and return the session key."""
        if not response.token:
            raise LoginFailure("Verification response did not include a token.")

        key = self._key(session_subject(response))
        try:
            await self.redis.set(key, response.model_dump_json(), ex=self.config.SESSION_TTL_SECONDS)
        except RedisError as exc:
            raise LoginFailure(f"Could not store the session. ({exc})") from exc
        return key

    async def current(self, subject: str) -> VerifyResponse | None:
        """Return the stored session for `subject`, if any."""
        stored = await self.redis.get(self._key(subject))
        if stored is None:
            return None
        return VerifyResponse.model_validate_json(stored)

    async def clear(self, subject: str) -> None:
        """Drop the stored session (logout)."""
        await self.redis.delete(self._key(subject))
