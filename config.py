"""
Configuration for Expenso.

Values come from environment variables prefixed with ``EXPENSO_`` or from a
``.env`` file in the working directory.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EXPENSO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite:///./expenso.db",
        description="SQLAlchemy database URL",
    )

    # Token signing
    jwt_secret: str = Field(default="change-me", description="HMAC key for JWTs")
    jwt_algorithm: str = Field(default="HS256")
    token_expire_days: int = Field(default=7, ge=1)

    # bcrypt cost factor, 4 is the lowest bcrypt accepts
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    log_level: str = Field(default="INFO")

    # Daily purge of expired auth tokens
    purge_tokens: bool = Field(default=True)
    purge_hour: int = Field(default=0, ge=0, le=23)

    api_base: str = Field(
        default="http://127.0.0.1:8000",
        description="Server address used by the API client",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
