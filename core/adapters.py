"""Normalization boundary between backend payloads and the onboarding core.

The backend answers the same questions with several payload shapes (nested
``data`` envelopes, list or mapping step collections, snake/camel case field
names). Everything is folded here into :class:`core.tracks.TrackStatus` and
:class:`state.onboarding_store.StepRecord` so the navigation state machine
never has to branch on response shapes.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.tracks import TrackStatus
from state.onboarding_store import StepRecord

logger = logging.getLogger(__name__)

BASIC_INFORMATION = "Basic Information"

_IGNORED_STEP_KEYS: frozenset[str] = frozenset({"restaurant_id", "simulation_restaurant_id"})
_STEP_NAME_KEYS: tuple[str, ...] = ("step", "step_name", "stepName")
_STEP_FLAG_KEYS: tuple[str, ...] = ("status", "completed")


class RestaurantSummary(BaseModel):
    """One entry of a track's ``restaurants`` list, whatever its field names."""

    model_config = ConfigDict(extra="ignore")

    restaurant_id: int | str | None = Field(
        default=None,
        validation_alias=AliasChoices("restaurant_id", "id", "restaurantId"),
    )
    name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("restaurant_name", "name", "restaurantName"),
    )
    onboarding_complete: Any = Field(
        default=None,
        validation_alias=AliasChoices(
            "onboarding_complete",
            "simulation_onboarding_complete",
            "onboardingComplete",
            "simulationOnboardingComplete",
        ),
    )

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @property
    def is_complete(self) -> bool:
        return self.onboarding_complete is True


def extract_restaurants(payload: object) -> list[Mapping[str, Any]] | None:
    """Return the ``restaurants`` list from ``payload`` or ``None`` when absent.

    ``None`` means the field is missing (not loaded yet); an empty list means
    the backend answered and the track has no restaurant.
    """

    if payload is None:
        return None
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, Mapping)]
    if not isinstance(payload, Mapping):
        return None
    restaurants = payload.get("restaurants")
    if isinstance(restaurants, list):
        return [item for item in restaurants if isinstance(item, Mapping)]
    nested = payload.get("data")
    if isinstance(nested, Mapping):
        return extract_restaurants(nested)
    return None


def _parse_restaurants(raw_items: Iterable[Mapping[str, Any]]) -> list[RestaurantSummary]:
    summaries: list[RestaurantSummary] = []
    for item in raw_items:
        try:
            summaries.append(RestaurantSummary.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed restaurant entry: %s", exc.errors()[:1])
    return summaries


def project_track_status(payload: object) -> TrackStatus:
    """Project a status payload onto :class:`TrackStatus`.

    A completed restaurant is preferred as the routing entity; otherwise the
    first restaurant is used.
    """

    raw_items = extract_restaurants(payload)
    if not raw_items:
        return TrackStatus.absent()
    summaries = _parse_restaurants(raw_items)
    if not summaries:
        # Entries exist but none could be parsed: the track still owns an entity.
        return TrackStatus(has_entity=True)
    completed = [summary for summary in summaries if summary.is_complete]
    chosen = completed[0] if completed else summaries[0]
    return TrackStatus(
        has_entity=True,
        entity_id=chosen.restaurant_id,
        entity_name=chosen.name,
        onboarding_complete=bool(completed),
    )


def _first_present(item: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


def _record_from_item(step_name: object, item: Mapping[str, Any]) -> StepRecord | None:
    if not isinstance(step_name, str) or not step_name.strip():
        return None
    flag = _first_present(item, _STEP_FLAG_KEYS)
    return StepRecord(step_name=step_name.strip(), completed=flag is True, data=item.get("data"))


def normalize_step_records(payload: object) -> dict[str, StepRecord]:
    """Fold a step-records payload into ``stepName -> StepRecord``.

    Accepted shapes:

    * ``[{"step": name, "status": bool, "data": ...}, ...]``
    * the same list wrapped once more: ``[[...]]``
    * ``{name: {"status": bool, "data": ...}, "restaurant_id": ...}``

    Completion is only recorded for the literal ``True`` flag.
    """

    records: dict[str, StepRecord] = {}
    if isinstance(payload, list):
        items: list[Any] = payload
        if items and isinstance(items[0], list):
            items = items[0]
        for item in items:
            if not isinstance(item, Mapping):
                continue
            record = _record_from_item(_first_present(item, _STEP_NAME_KEYS), item)
            if record is not None:
                records[record.step_name] = record
    elif isinstance(payload, Mapping):
        for step_name, item in payload.items():
            if step_name in _IGNORED_STEP_KEYS or not isinstance(item, Mapping):
                continue
            record = _record_from_item(step_name, item)
            if record is not None:
                records[record.step_name] = record
    return records


def _lookup(data: object, *path: str | int) -> object:
    current = data
    for part in path:
        if isinstance(part, int):
            if not isinstance(current, list) or len(current) <= part:
                return None
            current = current[part]
        else:
            if not isinstance(current, Mapping):
                return None
            current = current.get(part)
    return current


def extract_entity_id(response_data: object) -> int | str | None:
    """Return the restaurant id carried by a submission response, if any."""

    candidates = (
        ("restaurant_id",),
        (BASIC_INFORMATION, "data", "restaurant_id"),
        (BASIC_INFORMATION, "data", "restaurant", "restaurant_id"),
        (BASIC_INFORMATION, "data", "locations", 0, "restaurant_id"),
    )
    for path in candidates:
        value = _lookup(response_data, *path)
        if value not in (None, ""):
            return value  # type: ignore[return-value]
    if isinstance(response_data, list):
        for item in response_data:
            value = _lookup(item, "data", "restaurant_id")
            if value not in (None, ""):
                return value  # type: ignore[return-value]
    return None


def read_simulation_flag(payload: object) -> bool:
    """Return ``True`` only when ``payload`` carries ``restaurant_simulation: true``."""

    if not isinstance(payload, Mapping):
        return False
    if payload.get("restaurant_simulation") is True:
        return True
    nested = payload.get("data")
    return read_simulation_flag(nested) if isinstance(nested, Mapping) else False


__all__ = [
    "RestaurantSummary",
    "extract_entity_id",
    "extract_restaurants",
    "normalize_step_records",
    "project_track_status",
    "read_simulation_flag",
]
