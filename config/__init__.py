"""Central configuration for the onboarding orchestration layer.

Values are read from the environment (optionally populated from a ``.env``
file) once at import time. ``load_settings`` re-reads the environment and is
what the application and the tests use to build an :class:`OnboardingSettings`
instance; the module-level constants mirror the defaults for callers that only
need a single value.

Timing values are expressed in milliseconds to match the wizard's delay
vocabulary (auto-advance after 500 ms, completion redirect after 1000 ms,
status polling every 100 ms for at most 20 attempts).
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping

try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass


logger = logging.getLogger(__name__)


_TRUTHY_ENV_VALUES: tuple[str, ...] = ("1", "true", "yes", "on")

DEFAULT_API_BASE_URL = "http://localhost:8000/api"
DEFAULT_API_TIMEOUT = 10.0
DEFAULT_API_MAX_TRIES = 3
DEFAULT_AUTO_ADVANCE_DELAY_MS = 500
DEFAULT_COMPLETION_REDIRECT_DELAY_MS = 1000
DEFAULT_STATUS_POLL_INTERVAL_MS = 100
DEFAULT_STATUS_POLL_MAX_ATTEMPTS = 20


def _is_truthy_flag(value: str | None) -> bool:
    """Return ``True`` when ``value`` matches a truthy environment token."""

    if value is None:
        return False
    return value.strip().lower() in _TRUTHY_ENV_VALUES


def _read_int(env: Mapping[str, str], name: str, default: int, *, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%s below minimum %s; using %s", name, value, minimum, default)
        return default
    return value


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%s; using %s", name, value, default)
        return default
    return value


@dataclass(frozen=True, slots=True)
class OnboardingSettings:
    """Resolved runtime settings for API access and wizard timing."""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str | None = None
    api_timeout: float = DEFAULT_API_TIMEOUT
    api_max_tries: int = DEFAULT_API_MAX_TRIES
    auto_advance_delay_ms: int = DEFAULT_AUTO_ADVANCE_DELAY_MS
    completion_redirect_delay_ms: int = DEFAULT_COMPLETION_REDIRECT_DELAY_MS
    status_poll_interval_ms: int = DEFAULT_STATUS_POLL_INTERVAL_MS
    status_poll_max_attempts: int = DEFAULT_STATUS_POLL_MAX_ATTEMPTS
    debug: bool = False


def load_settings(env: Mapping[str, str] | None = None) -> OnboardingSettings:
    """Build :class:`OnboardingSettings` from ``env`` (defaults to ``os.environ``).

    Invalid values never raise; they are logged and replaced by the default.
    """

    source: Mapping[str, str] = os.environ if env is None else env
    base_url = (source.get("ONBOARDING_API_BASE_URL") or DEFAULT_API_BASE_URL).strip().rstrip("/")
    token = (source.get("ONBOARDING_API_TOKEN") or "").strip() or None
    return OnboardingSettings(
        api_base_url=base_url or DEFAULT_API_BASE_URL,
        api_token=token,
        api_timeout=_read_float(source, "ONBOARDING_API_TIMEOUT", DEFAULT_API_TIMEOUT),
        api_max_tries=_read_int(source, "ONBOARDING_API_MAX_TRIES", DEFAULT_API_MAX_TRIES, minimum=1),
        auto_advance_delay_ms=_read_int(source, "AUTO_ADVANCE_DELAY_MS", DEFAULT_AUTO_ADVANCE_DELAY_MS),
        completion_redirect_delay_ms=_read_int(
            source, "COMPLETION_REDIRECT_DELAY_MS", DEFAULT_COMPLETION_REDIRECT_DELAY_MS
        ),
        status_poll_interval_ms=_read_int(source, "STATUS_POLL_INTERVAL_MS", DEFAULT_STATUS_POLL_INTERVAL_MS),
        status_poll_max_attempts=_read_int(
            source, "STATUS_POLL_MAX_ATTEMPTS", DEFAULT_STATUS_POLL_MAX_ATTEMPTS, minimum=1
        ),
        debug=_is_truthy_flag(source.get("ONBOARDING_DEBUG")),
    )


SETTINGS = load_settings()

API_BASE_URL = SETTINGS.api_base_url
AUTO_ADVANCE_DELAY_MS = SETTINGS.auto_advance_delay_ms
COMPLETION_REDIRECT_DELAY_MS = SETTINGS.completion_redirect_delay_ms
STATUS_POLL_INTERVAL_MS = SETTINGS.status_poll_interval_ms
STATUS_POLL_MAX_ATTEMPTS = SETTINGS.status_poll_max_attempts
ONBOARDING_DEBUG = SETTINGS.debug


__all__ = [
    "API_BASE_URL",
    "AUTO_ADVANCE_DELAY_MS",
    "COMPLETION_REDIRECT_DELAY_MS",
    "ONBOARDING_DEBUG",
    "OnboardingSettings",
    "SETTINGS",
    "STATUS_POLL_INTERVAL_MS",
    "STATUS_POLL_MAX_ATTEMPTS",
    "load_settings",
]
