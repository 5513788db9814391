"""Application settings loaded from the environment."""

from __future__ import annotations

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


class ConfigurationError(RuntimeError):
    """Raised when the process configuration cannot serve traffic."""


def parse_duration(value: Any) -> timedelta:
    """Parse ``30s``/``15m``/``1h``/``1d``/``2w`` or bare seconds into a timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        match = _DURATION_PATTERN.match(value)
        if match is not None:
            amount, unit = match.groups()
            return timedelta(**{_DURATION_UNITS[unit.lower()]: float(amount)})
    raise ValueError(f"Unrecognized duration: {value!r}")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "videotube"
    app_env: str = "local"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    database_url: str | None = None

    access_token_secret: str | None = None
    access_token_expiry: timedelta = timedelta(days=1)
    refresh_token_secret: str | None = None
    refresh_token_expiry: timedelta = timedelta(days=10)
    jwt_algorithm: str = "HS256"

    minio_endpoint: str = "localhost:9000"
    minio_access_key: str | None = None
    minio_secret_key: str | None = None
    minio_bucket: str = "videotube"
    minio_secure: bool = False
    media_public_base_url: str | None = None

    upload_tmp_dir: str = "./public/temp"
    upload_max_bytes: int = Field(default=200 * 1024 * 1024, gt=0)

    cors_origins: list[str] = Field(default_factory=list)
    allow_insecure_http_cookies: bool = False

    @field_validator("access_token_expiry", "refresh_token_expiry", mode="before")
    @classmethod
    def _parse_expiry(cls, value: Any) -> timedelta:
        parsed = parse_duration(value)
        if parsed <= timedelta(0):
            raise ValueError("Token expiry must be positive")
        return parsed

    @property
    def media_base_url(self) -> str:
        if self.media_public_base_url:
            return self.media_public_base_url.rstrip("/")
        scheme = "https" if self.minio_secure else "http"
        return f"{scheme}://{self.minio_endpoint}"

    def missing_runtime_settings(self) -> list[str]:
        required = {
            "DATABASE_URL": self.database_url,
            "ACCESS_TOKEN_SECRET": self.access_token_secret,
            "REFRESH_TOKEN_SECRET": self.refresh_token_secret,
            "MINIO_ACCESS_KEY": self.minio_access_key,
            "MINIO_SECRET_KEY": self.minio_secret_key,
        }
        return [name for name, value in required.items() if not (value or "").strip()]

    def require_runtime(self) -> None:
        """Raise ConfigurationError unless every value needed to serve traffic is set."""
        missing = self.missing_runtime_settings()
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(missing)
            )
        if self.access_token_secret == self.refresh_token_secret:
            raise ConfigurationError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ"
            )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
