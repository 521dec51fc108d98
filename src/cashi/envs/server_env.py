from __future__ import annotations

import os

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    """Typed server settings built from environment variables."""

    database_url: str = "redis://localhost:6379/0"

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_debug: bool = False
    api_workers: int = 1
    api_cors_origins: list[str] = ["*"]

    app_name: str = "Cashi Payment Server"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Database URL must be a redis:// URL")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        database_url=os.environ.get("CASHI_DATABASE_URL", "redis://localhost:6379/0"),
        api_host=os.environ.get("CASHI_API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("CASHI_API_PORT", "8080")),
        api_debug=os.environ.get("CASHI_API_DEBUG", "false").lower() == "true",
        api_workers=int(os.environ.get("CASHI_API_WORKERS", "1")),
        api_cors_origins=os.environ.get("CASHI_API_CORS_ORIGINS", "*").split(","),
        app_name=os.environ.get("CASHI_APP_NAME", "Cashi Payment Server"),
        app_version=os.environ.get("CASHI_APP_VERSION", "1.0.0"),
        log_level=os.environ.get("CASHI_LOG_LEVEL", "INFO"),
    )
