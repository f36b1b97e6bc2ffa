"""
tests/test_config_and_scheduler.py

Settings parsing and the temp sweep job.

Coverage:
- get_report_settings defaults and overrides
- invalid numeric values fall back to defaults
- run_temp_sweep removes only stale work directories
- build_scheduler registers the sweep job
"""

from __future__ import annotations

import os
import time

import pytest

from app.config import get_report_settings, get_temp_sweep_settings
from app.scheduler.jobs import build_scheduler, run_temp_sweep

_SETTINGS_ENV = (
    "TEMPLATE_UPLOAD_PATH",
    "TEMP_FILES_PATH",
    "LIBREOFFICE_BINARY",
    "CONVERTER_TIMEOUT_SECONDS",
    "REPORT_BATCH_MAX_SIZE",
    "TEMPLATE_MAX_BYTES",
    "REPORT_DATE_DISPLAY_FORMAT",
    "TEMP_SWEEP_INTERVAL_MINUTES",
    "TEMP_MAX_AGE_MINUTES",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_report_settings.cache_clear()
    get_temp_sweep_settings.cache_clear()
    yield
    get_report_settings.cache_clear()
    get_temp_sweep_settings.cache_clear()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_report_settings_defaults() -> None:
    settings = get_report_settings()

    assert settings.batch_max_size == 5
    assert settings.template_max_bytes == 10 * 1024 * 1024
    assert settings.libreoffice_binary == "soffice"
    assert settings.date_display_format == "%m/%d/%Y"


def test_report_settings_overrides(monkeypatch) -> None:
    monkeypatch.setenv("REPORT_BATCH_MAX_SIZE", "3")
    monkeypatch.setenv("CONVERTER_TIMEOUT_SECONDS", "45.5")
    monkeypatch.setenv("LIBREOFFICE_BINARY", "  /opt/libreoffice/program/soffice ")

    settings = get_report_settings()

    assert settings.batch_max_size == 3
    assert settings.converter_timeout_seconds == 45.5
    assert settings.libreoffice_binary == "/opt/libreoffice/program/soffice"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("REPORT_BATCH_MAX_SIZE", "many")
    monkeypatch.setenv("TEMP_SWEEP_INTERVAL_MINUTES", "0")

    assert get_report_settings().batch_max_size == 5
    assert get_temp_sweep_settings().interval_minutes == 1


# ---------------------------------------------------------------------------
# Temp sweep
# ---------------------------------------------------------------------------


def test_run_temp_sweep_removes_only_stale_work_dirs(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TEMP_FILES_PATH", str(tmp_path))
    monkeypatch.setenv("TEMP_MAX_AGE_MINUTES", "10")
    stale = tmp_path / "report-stale"
    fresh = tmp_path / "report-fresh"
    unrelated = tmp_path / "uploads"
    for directory in (stale, fresh, unrelated):
        directory.mkdir()
    an_hour_ago = time.time() - 3600
    os.utime(stale, (an_hour_ago, an_hour_ago))
    os.utime(unrelated, (an_hour_ago, an_hour_ago))

    assert run_temp_sweep() == 1
    assert not stale.exists()
    assert fresh.exists()
    assert unrelated.exists()


def test_build_scheduler_registers_sweep_job(monkeypatch) -> None:
    monkeypatch.setenv("TEMP_SWEEP_INTERVAL_MINUTES", "15")

    scheduler = build_scheduler()

    [job] = scheduler.get_jobs()
    assert job.id == "temp_sweep"
    assert job.trigger.interval.total_seconds() == 15 * 60
