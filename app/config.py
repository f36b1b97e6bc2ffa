"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_TEMPLATE_MAX_BYTES = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int, *, minimum: int = 1) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return max(minimum, int(raw_value))
    except ValueError:
        return default


def _get_float_env(name: str, default: float, *, minimum: float = 0.1) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return max(minimum, float(raw_value))
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ReportSettings:
    """
    Runtime settings for report generation.
    """

    template_upload_path: str = "uploads/templates"
    temp_files_path: str = "temp"
    libreoffice_binary: str = "soffice"
    converter_timeout_seconds: float = 120.0
    batch_max_size: int = 5
    template_max_bytes: int = DEFAULT_TEMPLATE_MAX_BYTES
    date_display_format: str = "%m/%d/%Y"


@dataclass(frozen=True)
class TempSweepSettings:
    """
    Schedule for removing conversion work directories left by crashed runs.
    """

    interval_minutes: int = 30
    max_age_minutes: int = 60


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report generation settings.
    """

    return ReportSettings(
        template_upload_path=_get_str_env("TEMPLATE_UPLOAD_PATH", "uploads/templates"),
        temp_files_path=_get_str_env("TEMP_FILES_PATH", "temp"),
        libreoffice_binary=_get_str_env("LIBREOFFICE_BINARY", "soffice"),
        converter_timeout_seconds=_get_float_env("CONVERTER_TIMEOUT_SECONDS", 120.0),
        batch_max_size=_get_int_env("REPORT_BATCH_MAX_SIZE", 5),
        template_max_bytes=_get_int_env("TEMPLATE_MAX_BYTES", DEFAULT_TEMPLATE_MAX_BYTES),
        date_display_format=_get_str_env("REPORT_DATE_DISPLAY_FORMAT", "%m/%d/%Y"),
    )


@lru_cache(maxsize=1)
def get_temp_sweep_settings() -> TempSweepSettings:
    """
    Return cached temp sweep settings.
    """

    return TempSweepSettings(
        interval_minutes=_get_int_env("TEMP_SWEEP_INTERVAL_MINUTES", 30),
        max_age_minutes=_get_int_env("TEMP_MAX_AGE_MINUTES", 60),
    )
