"""Exponential backoff for calls to the onboarding backend."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, ParamSpec, TypeVar

import backoff
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout

T = TypeVar("T")
P = ParamSpec("P")

_LOGGER = logging.getLogger(__name__)

# HTTP error statuses are answered, not retried; only transport failures are.
TRANSIENT_REQUEST_EXCEPTIONS: tuple[type[Exception], ...] = (
    RequestsConnectionError,
    Timeout,
)


def _never_give_up(_: Exception) -> bool:
    return False


def retry_with_backoff(
    *,
    max_tries: int = 3,
    exceptions: Iterable[type[Exception]] = TRANSIENT_REQUEST_EXCEPTIONS,
    giveup: Callable[[Exception], bool] | None = None,
    max_time: float | None = None,
    jitter: Any = backoff.full_jitter,
    logger: logging.Logger | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Return a decorator retrying ``exceptions`` with ``backoff.expo``.

    The last exception is re-raised once ``max_tries`` attempts (or
    ``max_time`` seconds) are exhausted.
    """

    return backoff.on_exception(
        backoff.expo,
        tuple(exceptions),
        max_tries=max_tries,
        max_time=max_time,
        jitter=jitter,
        giveup=giveup or _never_give_up,
        logger=logger or _LOGGER,
    )


__all__ = ["TRANSIENT_REQUEST_EXCEPTIONS", "retry_with_backoff"]
