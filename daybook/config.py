from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzlocal import get_localzone

from .day_boundary import DEFAULT_DAY_START_HOUR

DEFAULT_DB_PATH = "daybook.db"


@dataclass(frozen=True, slots=True)
class Config:
    db_path: Path
    timezone: tzinfo
    day_start_hour: int
    log_level: str


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _timezone_from_env(name: str) -> tzinfo:
    tz_name = _optional_env(name)
    if tz_name is None:
        return get_localzone()
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone in {name}: {tz_name}") from exc


def _hour_from_env(name: str, default: int) -> int:
    raw = _optional_env(name)
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc

    if not 0 <= parsed <= 23:
        raise ValueError(f"Environment variable {name} must be between 0 and 23")
    return parsed


def load_config() -> Config:
    return Config(
        db_path=Path(_optional_env("DAYBOOK_DB_PATH") or DEFAULT_DB_PATH),
        timezone=_timezone_from_env("DAYBOOK_TIMEZONE"),
        day_start_hour=_hour_from_env("DAYBOOK_DAY_START_HOUR", DEFAULT_DAY_START_HOUR),
        log_level=(_optional_env("DAYBOOK_LOG_LEVEL") or "INFO").upper(),
    )
