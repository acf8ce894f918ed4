"""Injected per-track container for onboarding step records.

The store keeps its data inside a caller-supplied ``MutableMapping`` so the
Streamlit shell can back it with ``st.session_state`` while tests use a plain
dictionary. There is no module-level instance; every consumer receives the
store it should read from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, MutableMapping

from constants.keys import StateKeys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    """Remote-backed completion record for one wizard step."""

    step_name: str
    completed: bool = False
    data: Any = None


OnboardingState = Mapping[str, StepRecord]
StoreListener = Callable[[OnboardingState], None]


@dataclass
class _StoreSlot:
    records: dict[str, StepRecord] = field(default_factory=dict)
    entity_id: int | str | None = None


class OnboardingStore:
    """Observable ``stepName -> StepRecord`` mapping for one track.

    Writes are last-write-wins: concurrent submissions for the same step are
    not merged, the record written last replaces the previous one.
    """

    def __init__(self, track: str, *, storage: MutableMapping[str, object] | None = None) -> None:
        self.track = track
        self._storage: MutableMapping[str, object] = storage if storage is not None else {}
        self._key = StateKeys.onboarding_state(track)
        self._listeners: list[StoreListener] = []

    def _slot(self) -> _StoreSlot:
        slot = self._storage.get(self._key)
        if not isinstance(slot, _StoreSlot):
            slot = _StoreSlot()
            self._storage[self._key] = slot
        return slot

    def get(self) -> dict[str, StepRecord]:
        """Return a shallow copy of the current state."""

        return dict(self._slot().records)

    def get_record(self, step_name: str) -> StepRecord | None:
        return self._slot().records.get(step_name)

    def set(self, state: Mapping[str, StepRecord]) -> None:
        """Replace the whole state and notify subscribers."""

        self._slot().records = dict(state)
        self._notify()

    def set_record(self, record: StepRecord) -> None:
        self._slot().records[record.step_name] = record
        self._notify()

    def hydrate(self, records: Mapping[str, StepRecord]) -> None:
        """Merge ``records`` loaded from the backend into the state."""

        if not records:
            return
        self._slot().records.update(records)
        self._notify()

    def reset_step(self, step_name: str) -> None:
        """Mark ``step_name`` as not completed, keeping its data."""

        slot = self._slot()
        existing = slot.records.get(step_name)
        if existing is None:
            slot.records[step_name] = StepRecord(step_name=step_name, completed=False)
        elif existing.completed is False:
            return
        else:
            slot.records[step_name] = replace(existing, completed=False)
        self._notify()

    def reset(self) -> None:
        """Drop every record and the entity id (logout)."""

        self._storage[self._key] = _StoreSlot()
        self._notify()

    @property
    def entity_id(self) -> int | str | None:
        return self._slot().entity_id

    def set_entity_id(self, entity_id: int | str | None) -> None:
        self._slot().entity_id = entity_id

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        snapshot = self.get()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Onboarding store listener failed for track '%s'", self.track)


__all__ = ["OnboardingState", "OnboardingStore", "StepRecord", "StoreListener"]
