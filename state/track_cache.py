"""Cache of the per-track restaurants lists that back routing decisions.

Payloads are filled either by a background :meth:`TrackStatusCache.prefetch`
right after login or by a direct :meth:`TrackStatusCache.fetch`. Readers only
ever see the normalized ``restaurants`` list, or ``None`` while it has not
been loaded.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from core.adapters import extract_restaurants, project_track_status
from core.errors import StatusQueryFailure
from core.tracks import Track, TrackStatus
from infra.logging import log_event

logger = logging.getLogger(__name__)

RestaurantList = list[Mapping[str, Any]]


class StatusSource(Protocol):
    """Anything able to answer a track status query."""

    def get_status(self, track: Track | str) -> Any: ...


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of both tracks' restaurants lists."""

    regular: RestaurantList | None = None
    simulation: RestaurantList | None = None

    def for_track(self, track: Track | str) -> RestaurantList | None:
        return self.regular if Track(track) is Track.REGULAR else self.simulation

    def is_loaded(self, track: Track | str) -> bool:
        return self.for_track(track) is not None

    @property
    def missing_tracks(self) -> tuple[Track, ...]:
        return tuple(track for track in Track if not self.is_loaded(track))


class TrackStatusCache:
    """Thread-safe cache of track payloads with cache-first reads."""

    def __init__(self, source: StatusSource, *, max_workers: int = 2) -> None:
        self._source = source
        self._lock = threading.RLock()
        self._payloads: dict[Track, RestaurantList] = {}
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    def peek(self, track: Track | str) -> RestaurantList | None:
        with self._lock:
            payload = self._payloads.get(Track(track))
            return list(payload) if payload is not None else None

    def store(self, track: Track | str, payload: object) -> RestaurantList | None:
        """Normalize and cache ``payload``; return the cached list."""

        restaurants = extract_restaurants(payload)
        if restaurants is None:
            return None
        with self._lock:
            self._payloads[Track(track)] = restaurants
        return list(restaurants)

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(regular=self.peek(Track.REGULAR), simulation=self.peek(Track.SIMULATION))

    def fetch(self, track: Track | str, *, raise_errors: bool = False) -> RestaurantList | None:
        """Query the backend once for ``track`` and cache the answer.

        Failures are logged as :class:`StatusQueryFailure` and reported as an
        absent list unless ``raise_errors`` is set.
        """

        resolved = Track(track)
        try:
            result = self._source.get_status(resolved)
            if not getattr(result, "success", False):
                raise StatusQueryFailure(resolved.value, getattr(result, "error", None))
            return self.store(resolved, result.data)
        except Exception as exc:
            failure = exc if isinstance(exc, StatusQueryFailure) else StatusQueryFailure(resolved.value, str(exc))
            log_event("warning", event="status_query_failed", track=resolved.value)
            logger.warning("Status query for %s failed: %s", resolved.value, failure)
            if raise_errors:
                if failure is exc:
                    raise
                raise failure from exc
            return None

    def get_status(self, track: Track | str, force_refresh: bool = False) -> TrackStatus:
        """Return the routing projection for ``track``, fetching on a miss."""

        payload = None if force_refresh else self.peek(track)
        if payload is None:
            payload = self.fetch(track)
        return project_track_status(payload)

    def prefetch(self) -> list[Future[RestaurantList | None]]:
        """Start fetching both tracks concurrently without waiting."""

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="track-status"
                )
            executor = self._executor
        return [executor.submit(self.fetch, track) for track in Track]

    def clear(self) -> None:
        with self._lock:
            self._payloads.clear()

    def close(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["StatusSnapshot", "StatusSource", "TrackStatusCache"]
