"""
app/logging_utils.py

Structured logging helpers for the report pipeline.

Each pipeline step emits one JSON line whose ``event`` key names the step,
so a single report run can be followed by grepping its report type.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Fields whose value is None are left out.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **{key: value for key, value in fields.items() if value is not None}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True), exc_info=exc_info)


def elapsed_ms(started: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading, to one decimal."""
    return round((time.perf_counter() - started) * 1000, 1)
