"""
app/scheduler/jobs.py

APScheduler-based maintenance scheduler.

Conversions clean up their own work directories on every normal exit path.
A hard crash (SIGKILL, OOM) can still leave ``report-*`` directories under
the temp root; the sweep job removes any older than ``TEMP_MAX_AGE_MINUTES``.

Schedule
--------
  temp_sweep: every ``TEMP_SWEEP_INTERVAL_MINUTES`` (default 30)

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_report_settings, get_temp_sweep_settings
from conversion.libreoffice import sweep_stale_work_dirs

logger = logging.getLogger(__name__)


def run_temp_sweep() -> int:
    """
    Remove stale conversion work directories under the configured temp root.
    """
    temp_root = get_report_settings().temp_files_path
    max_age_minutes = get_temp_sweep_settings().max_age_minutes
    removed = sweep_stale_work_dirs(temp_root, max_age_seconds=max_age_minutes * 60)
    if removed:
        logger.info("Scheduler: temp_sweep removed %d stale directories from %s", removed, temp_root)
    else:
        logger.debug("Scheduler: temp_sweep found nothing to remove in %s", temp_root)
    return removed


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_temp_sweep,
        trigger="interval",
        minutes=get_temp_sweep_settings().interval_minutes,
        id="temp_sweep",
        name="Stale conversion directory sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    return scheduler
