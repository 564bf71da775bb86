"""Application session (cookie) settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SESSION_COOKIE_NAME: str = "grant_tracker_session"
    SESSION_COOKIE_SAMESITE: str = "lax"
    PERSISTENT_SESSION_TTL_SECONDS: int = 30 * 24 * 60 * 60  # 30 days
    EPHEMERAL_SESSION_TTL_SECONDS: int = 60 * 60  # 1 hour


__all__ = ["SessionSettings"]
