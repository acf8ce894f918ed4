"""Bounded waiting for track status and the routing decision built on it.

Status for both tracks is fetched in the background right after login, so
the first routing decision may run before the data arrives. :func:`poll_until`
waits a bounded amount of time for it; anything still missing afterwards is
fetched directly exactly once, and failures degrade to "no entity" so a
destination is always produced.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar

from config import OnboardingSettings, SETTINGS
from core.adapters import project_track_status, read_simulation_flag
from core.destinations import Destination, DestinationKind, derive_simulation_flag, resolve_destination
from core.errors import ApiError
from core.tracks import Track, TrackStatus
from infra.logging import log_event
from state.onboarding_store import OnboardingStore
from state.track_cache import StatusSnapshot, TrackStatusCache
from wizard.step_registry import REGULAR_STEPS
from wizard.step_status import is_onboarding_complete

logger = logging.getLogger(__name__)

T = TypeVar("T")


def poll_until(
    predicate: Callable[[T], bool],
    snapshot: T,
    refresh: Callable[[], T],
    *,
    interval_ms: int = 100,
    max_attempts: int = 20,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Wait until ``predicate(snapshot)`` holds, for at most ``max_attempts`` waits.

    The initial ``snapshot`` is checked first. Each attempt then waits
    ``interval_ms``, refreshes the snapshot and checks it again; the loop
    returns as soon as a check passes. When no check passes the last snapshot
    is returned after exactly ``max_attempts * interval_ms``. Never raises for
    a failing predicate or refresh; both count as "not yet".
    """

    def _check(candidate: T) -> bool:
        try:
            return bool(predicate(candidate))
        except Exception:
            logger.exception("Status predicate failed")
            return False

    if _check(snapshot):
        return snapshot
    for _ in range(max_attempts):
        sleep(interval_ms / 1000)
        try:
            snapshot = refresh()
        except Exception:
            logger.exception("Status refresh failed during polling")
            continue
        if _check(snapshot):
            return snapshot
    return snapshot


def both_tracks_loaded(snapshot: StatusSnapshot) -> bool:
    return not snapshot.missing_tracks


@dataclass(frozen=True)
class ResolvedStatus:
    """Both track projections together with the destination they produced."""

    regular: TrackStatus
    simulation: TrackStatus
    destination: Destination
    fallback_tracks: tuple[Track, ...] = ()
    simulation_flag: bool | None = None


@dataclass(frozen=True)
class ActivationOutcome:
    """Result of switching the account into simulation mode.

    ``activated`` is only set when the backend confirmed the switch with
    ``restaurant_simulation: true``.
    """

    activated: bool
    refreshed: bool
    error: str | None = None


class SimulationActivator(Protocol):
    def activate_simulation(self) -> Any: ...


class StatusResolver:
    """Resolve the post-login destination from the cached track status.

    ``regular_loader`` hydrates ``regular_store`` from the backend before the
    first incomplete regular step is chosen; it receives the regular track's
    status so the restaurant id is known.
    """

    def __init__(
        self,
        cache: TrackStatusCache,
        *,
        regular_store: OnboardingStore | None = None,
        regular_loader: Callable[[TrackStatus], object] | None = None,
        client: SimulationActivator | None = None,
        settings: OnboardingSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache = cache
        self.regular_store = regular_store
        self.regular_loader = regular_loader
        self.client = client
        self.settings = settings or SETTINGS
        self._sleep = sleep
        self._clock = clock

    def _first_incomplete_slug(self, regular: TrackStatus) -> str | None:
        if self.regular_loader is not None:
            try:
                self.regular_loader(regular)
            except Exception:
                logger.exception("Loading regular step records before routing failed")
        state = self.regular_store.get() if self.regular_store is not None else {}
        step = is_onboarding_complete(state, REGULAR_STEPS).first_incomplete
        return step.route_slug if step is not None else None

    def resolve_status(self) -> ResolvedStatus:
        """Poll, fall back once per missing track and run the routing decision."""

        started = self._clock()
        attempts = 0

        def _refresh() -> StatusSnapshot:
            nonlocal attempts
            attempts += 1
            return self.cache.snapshot()

        snapshot = poll_until(
            both_tracks_loaded,
            self.cache.snapshot(),
            _refresh,
            interval_ms=self.settings.status_poll_interval_ms,
            max_attempts=self.settings.status_poll_max_attempts,
            sleep=self._sleep,
        )
        payloads = {track: snapshot.for_track(track) for track in Track}
        fallback = snapshot.missing_tracks
        if fallback:
            log_event(
                "info",
                event="poll_timeout",
                attempts=attempts,
                duration=round(self._clock() - started, 3),
                payload={"missing": [track.value for track in fallback]},
            )
        for track in fallback:
            try:
                payloads[track] = self.cache.fetch(track)
            except Exception:
                logger.exception("Fallback status fetch for %s failed", track.value)
                payloads[track] = None
            log_event(
                "info",
                event="status_fallback_fetch",
                track=track.value,
                payload={"loaded": payloads[track] is not None},
            )

        regular = project_track_status(payloads[Track.REGULAR])
        simulation = project_track_status(payloads[Track.SIMULATION])
        destination = resolve_destination(regular, simulation)
        if destination.kind is DestinationKind.REGULAR_ONBOARDING:
            destination = resolve_destination(regular, simulation, self._first_incomplete_slug(regular))
        log_event(
            "info",
            event="destination_resolved",
            destination=destination.path,
            attempts=attempts,
            duration=round(self._clock() - started, 3),
        )
        return ResolvedStatus(
            regular=regular,
            simulation=simulation,
            destination=destination,
            fallback_tracks=fallback,
            simulation_flag=derive_simulation_flag(regular, simulation),
        )

    def resolve_login(self) -> ResolvedStatus:
        """Like :meth:`resolve_status` but never raises."""

        try:
            return self.resolve_status()
        except Exception:
            logger.exception("Destination resolution failed; using the getting started screen")
            absent = TrackStatus.absent()
            return ResolvedStatus(
                regular=absent,
                simulation=absent,
                destination=resolve_destination(absent, absent),
            )

    def resolve(self) -> Destination:
        """Return where the user should be routed; never raises."""

        return self.resolve_login().destination

    def activate_simulation_mode(self) -> ActivationOutcome:
        """Turn on simulation mode and refresh both tracks.

        A refresh failure after a successful activation is only a warning.
        """

        if self.client is None:
            raise RuntimeError("StatusResolver needs a client to activate simulation mode")
        try:
            result = self.client.activate_simulation()
        except ApiError as exc:
            log_event("warning", event="simulation_activation_failed")
            return ActivationOutcome(activated=False, refreshed=False, error=str(exc))
        if not getattr(result, "success", False):
            error = getattr(result, "error", None) or "Could not activate simulation mode."
            log_event("warning", event="simulation_activation_failed")
            return ActivationOutcome(activated=False, refreshed=False, error=error)
        if not read_simulation_flag(getattr(result, "data", None)):
            log_event("warning", event="simulation_activation_unconfirmed")
            return ActivationOutcome(
                activated=False,
                refreshed=False,
                error="Simulation mode is not available for this account.",
            )
        refreshed = True
        for track in Track:
            try:
                self.cache.fetch(track, raise_errors=True)
            except Exception as exc:
                refreshed = False
                logger.warning("Simulation activated but %s status refresh failed: %s", track.value, exc)
        log_event("info", event="simulation_activated", payload={"refreshed": refreshed})
        return ActivationOutcome(activated=True, refreshed=refreshed)


__all__ = [
    "ActivationOutcome",
    "ResolvedStatus",
    "StatusResolver",
    "both_tracks_loaded",
    "poll_until",
]
