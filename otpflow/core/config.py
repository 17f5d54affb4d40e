"""Flow configuration powered by pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized strongly-typed configuration loaded from `.env`."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "OTP Verification Flow"
    PROJECT_VERSION: str = "1.0.0"

    AUTH_API_URL: str = Field("http://localhost:8080", description="Base URL of the auth backend issuing OTP codes")
    VERIFY_OTP_PATH: str = "/api/auth/verify-otp"
    RESEND_OTP_PATH: str = "/api/auth/resend-otp"
    HTTP_TIMEOUT_SECONDS: float = 20

    REDIS_URL: str = Field("redis://localhost:6379/0", description="Redis URL for the authenticated session store")
    SESSION_KEY_PREFIX: str = "auth:session"
    SESSION_TTL_SECONDS: int = 86400

    OTP_LENGTH: int = 6

    # Resend cooldown and post-login pause; neither encodes a backend rule
    RESEND_COOLDOWN_SECONDS: int = 30
    COUNTDOWN_TICK_SECONDS: float = 1.0
    POST_LOGIN_DELAY_SECONDS: float = 0.5

    USER_DASHBOARD_PATH: str = "/user/dashboard"
    VENDOR_DASHBOARD_PATH: str = "/vendor/dashboard"
    VENDOR_LOGIN_PATH: str = "/login?role=vendor"
    SIGNUP_PATH: str = "/signup"

    # Hosted sessions are dropped after this long without a request, or shortly after leaving the flow
    SESSION_IDLE_TTL_SECONDS: float = 1800
    SESSION_EVICT_GRACE_SECONDS: float = 60

    # Key of an optional SUCCESS / PENDING_APPROVAL / FAILED field in verify responses
    STRUCTURED_STATUS_FIELD: str = "status"

    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True


@lru_cache
def get_settings() -> Settings:
    """Cache and return a singleton Settings instance to avoid re-parsing env."""
    return Settings()


settings = get_settings()
