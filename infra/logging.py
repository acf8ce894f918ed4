"""Structured event logging for onboarding routing and submissions."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Mapping

LOGGER = logging.getLogger("onboarding")

_SECRET_ENV_VARS: tuple[str, ...] = ("ONBOARDING_API_TOKEN",)


def _redact(text: str) -> str:
    for name in _SECRET_ENV_VARS:
        secret = os.getenv(name)
        if secret:
            text = text.replace(secret, "[redacted]")
    return text


def _dump_payload(event: str, track: str | None, payload: Mapping[str, Any]) -> str:
    stem = "_".join(part for part in ("onboarding", track, event) if part)
    target = Path(tempfile.gettempdir()) / f"{stem}_{int(time.time() * 1000)}.json"
    target.write_text(_redact(json.dumps(payload, ensure_ascii=False, indent=2, default=str)))
    return str(target)


def log_event(
    level: str,
    *,
    event: str,
    track: str | None = None,
    step: str | None = None,
    destination: str | None = None,
    attempts: int | None = None,
    duration: float | None = None,
    payload: Mapping[str, Any] | None = None,
) -> str:
    """Emit one JSON log line on the ``onboarding`` logger.

    Args:
        level: Logging level name (``"info"``, ``"warning"``...).
        event: Machine-readable event name such as ``"poll_timeout"``.
        track: Onboarding track the event belongs to.
        step: Step name involved, if any.
        destination: Route chosen by a routing decision, if any.
        attempts: Attempts made by a polling or retry loop.
        duration: Elapsed time in seconds.
        payload: Extra data written to a temp file when ``ONBOARDING_DEBUG``
            is set. Never part of the log line itself.

    Returns:
        Path of the payload dump, or an empty string when nothing was written.
    """

    fields = {
        "level": level.lower(),
        "event": event,
        "track": track,
        "step": step,
        "destination": destination,
        "attempts": attempts,
        "duration": duration,
    }
    line = {key: _redact(str(value)) for key, value in fields.items() if value is not None}
    LOGGER.log(getattr(logging, level.upper(), logging.INFO), json.dumps(line))

    if payload and os.getenv("ONBOARDING_DEBUG"):
        return _dump_payload(event, track, payload)
    return ""


__all__ = ["log_event"]
