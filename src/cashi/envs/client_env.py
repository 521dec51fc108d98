from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from ..infrastructure.http.http_client import DEFAULT_TIMEOUT_SECONDS


class Settings(BaseModel):
    api_base_url: str
    database_url: str
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "WARNING"

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("API base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("API base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("API base URL must include a host")
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v


def get_settings() -> Settings:
    return Settings(
        api_base_url=os.environ.get("CASHI_API_BASE_URL", "http://localhost:8080"),
        database_url=os.environ.get("CASHI_DATABASE_URL", "redis://localhost:6379/0"),
        request_timeout=float(
            os.environ.get("CASHI_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))
        ),
        log_level=os.environ.get("CASHI_LOG_LEVEL", "WARNING").upper(),
    )
