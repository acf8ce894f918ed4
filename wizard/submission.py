"""Step submission and hydration, the only writers of onboarding state."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol

from core.adapters import normalize_step_records
from core.errors import ApiError, SubmissionFailure
from core.tracks import TrackStatus
from infra.logging import log_event
from state.onboarding_store import OnboardingStore, StepRecord
from state.track_cache import TrackStatusCache

logger = logging.getLogger(__name__)


class StepApi(Protocol):
    def submit_step(
        self,
        track: str,
        step_name: str,
        payload: Mapping[str, Any],
        *,
        entity_id: int | str | None = None,
    ) -> Any: ...

    def load_steps(self, track: str, *, entity_id: int | str | None = None) -> Any: ...


class StepSubmitter:
    """Persist step payloads for one track and mirror the result in its store."""

    def __init__(self, store: OnboardingStore, client: StepApi) -> None:
        self.store = store
        self.client = client
        self._loaded = False

    @property
    def track(self) -> str:
        return self.store.track

    def submit(self, step_name: str, payload: Mapping[str, Any]) -> StepRecord:
        """Send ``payload`` for ``step_name`` and mark the step completed.

        Raises:
            SubmissionFailure: The backend rejected the payload or could not
                be reached. The store is left untouched.
        """

        try:
            result = self.client.submit_step(
                self.track,
                step_name,
                payload,
                entity_id=self.store.entity_id,
            )
        except ApiError as exc:
            log_event("warning", event="submission_failed", track=self.track, step=step_name)
            raise SubmissionFailure(step_name, str(exc)) from exc
        if not getattr(result, "success", False):
            log_event("warning", event="submission_failed", track=self.track, step=step_name)
            raise SubmissionFailure(step_name, getattr(result, "error", None))

        entity_id = getattr(result, "entity_id", None)
        if entity_id is not None:
            self.store.set_entity_id(entity_id)
        record = StepRecord(step_name=step_name, completed=True, data=dict(payload))
        self.store.set_record(record)
        log_event("info", event="step_submitted", track=self.track, step=step_name)
        return record

    def load(self, force_refresh: bool = False) -> bool:
        """Hydrate the store from the backend; return ``True`` when it loaded.

        Load failures are logged and leave the store as it is.
        """

        if self._loaded and not force_refresh:
            return True
        try:
            result = self.client.load_steps(self.track, entity_id=self.store.entity_id)
        except ApiError as exc:
            logger.warning("Loading %s step records failed: %s", self.track, exc)
            return False
        if not getattr(result, "success", False):
            logger.warning("Loading %s step records failed: %s", self.track, getattr(result, "error", None))
            return False
        records = normalize_step_records(result.data)
        if isinstance(result.data, Mapping) and self.store.entity_id is None:
            for key in ("restaurant_id", "simulation_restaurant_id"):
                if result.data.get(key) is not None:
                    self.store.set_entity_id(result.data[key])
                    break
        self.store.hydrate(records)
        self._loaded = True
        logger.debug("Hydrated %s %s step records", len(records), self.track)
        return True

    def load_for_status(self, status: TrackStatus) -> bool:
        """Refresh the store for the restaurant named by ``status``.

        Does nothing when the track has no restaurant.
        """

        if not status.has_entity:
            return False
        if self.store.entity_id is None and status.entity_id is not None:
            self.store.set_entity_id(status.entity_id)
        return self.load(force_refresh=True)


def reset_session(stores: Iterable[OnboardingStore], cache: TrackStatusCache | None = None) -> None:
    """Forget every track's records and cached status (logout).

    The cache's background fetch pool is shut down as well; the next
    prefetch starts a new one.
    """

    for store in stores:
        store.reset()
    if cache is not None:
        cache.clear()
        cache.close()
    log_event("info", event="session_reset")


__all__ = ["StepApi", "StepSubmitter", "reset_session"]
