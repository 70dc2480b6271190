"""
Structured logging helpers for analysis requests.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_PREVIEW_CHARS = 120


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON. Fields set to None are dropped.
    """

    payload = {"event": event, **{key: value for key, value in fields.items() if value is not None}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def preview(text: str | None, limit: int = _PREVIEW_CHARS) -> str:
    """
    Single-line preview of model output for log fields.
    """

    if not text:
        return ""
    flattened = " ".join(text.split())
    return flattened if len(flattened) <= limit else flattened[:limit] + "..."
