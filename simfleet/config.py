"""Global configuration — loaded from environment variables and .env."""

from __future__ import annotations

import math

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVER_COUNT = 100
DEFAULT_ES_SERVER = "http://localhost:9200"
DEFAULT_ES_INDEX = "server-metrics"
DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_REQUEST_TIMEOUT = 10.0


class SimfleetSettings(BaseSettings):
    server_count: int = DEFAULT_SERVER_COUNT
    es_server: str = DEFAULT_ES_SERVER
    es_username: str = ""
    es_password: str = ""
    es_index: str = DEFAULT_ES_INDEX

    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    seed: int | None = None  # None = seeded from OS entropy
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("server_count", mode="before")
    @classmethod
    def _fallback_server_count(cls, value):
        # Unparseable or non-positive counts mean "not configured".
        try:
            count = int(value)
        except (TypeError, ValueError):
            return DEFAULT_SERVER_COUNT
        return count if count > 0 else DEFAULT_SERVER_COUNT

    @field_validator("es_server", "es_index", mode="before")
    @classmethod
    def _fallback_blank(cls, value, info):
        if value is None or not str(value).strip():
            return DEFAULT_ES_SERVER if info.field_name == "es_server" else DEFAULT_ES_INDEX
        return str(value).strip()

    @field_validator("interval_seconds", mode="before")
    @classmethod
    def _fallback_interval(cls, value):
        # Zero is allowed: back-to-back cycles.
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return DEFAULT_INTERVAL_SECONDS
        return seconds if seconds >= 0 and math.isfinite(seconds) else DEFAULT_INTERVAL_SECONDS

    @field_validator("request_timeout", mode="before")
    @classmethod
    def _fallback_timeout(cls, value):
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return DEFAULT_REQUEST_TIMEOUT
        return seconds if seconds > 0 and math.isfinite(seconds) else DEFAULT_REQUEST_TIMEOUT

    @field_validator("seed", mode="before")
    @classmethod
    def _fallback_seed(cls, value):
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def masked(self) -> dict[str, object]:
        """Settings as a dict with the sink password hidden."""
        data = self.model_dump()
        if data.get("es_password"):
            data["es_password"] = "********"
        return data


settings = SimfleetSettings()
