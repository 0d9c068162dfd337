"""Configuration helpers for the spaced-study runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_TIMEZONE = "UTC"
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    study_timezone: str

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.study_timezone)

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Spaced Study")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        study_timezone = os.getenv("STUDY_TIMEZONE", DEFAULT_TIMEZONE)

        if log_level not in _LOG_LEVELS:
            raise RuntimeError(f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}.")

        try:
            ZoneInfo(study_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise RuntimeError(f"STUDY_TIMEZONE {study_timezone!r} is not a known time zone.") from exc

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            study_timezone=study_timezone,
        )
