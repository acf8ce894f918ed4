"""Track identifiers and the routing projection of a track's remote status."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Track(StrEnum):
    """The two independent onboarding pipelines."""

    REGULAR = "regular"
    SIMULATION = "simulation"


class TrackStatus(BaseModel):
    """Minimal projection of a track's restaurants list used for routing.

    Attributes:
        has_entity: ``True`` when the track owns at least one restaurant.
        entity_id: Identifier of the restaurant used for routing, if any.
        entity_name: Display name of that restaurant, if known.
        onboarding_complete: ``True`` when the backend reports the track's
            onboarding as finished (strict boolean).
    """

    model_config = ConfigDict(frozen=True)

    has_entity: bool = False
    entity_id: int | str | None = None
    entity_name: str | None = None
    onboarding_complete: bool = False

    @classmethod
    def absent(cls) -> "TrackStatus":
        """Status used when a track has no data or its query failed."""

        return cls()
