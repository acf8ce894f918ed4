"""Registry for wizard steps, per-track order and route slugs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

from core.tracks import Track


@dataclass(frozen=True)
class StepDefinition:
    """Immutable descriptor of one wizard step.

    ``record_key`` is the name under which the backend stores the step's
    record when it differs from the displayed ``title``.
    """

    index: int
    title: str
    route_slug: str
    required: bool = True
    record_key: str | None = None

    @property
    def step_name(self) -> str:
        return self.record_key or self.title


REGULAR_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(index=0, title="Basic Information", route_slug="basic-information"),
    StepDefinition(index=1, title="Labour Information", route_slug="labor-information"),
    StepDefinition(index=2, title="Food Cost Details", route_slug="food-cost-details"),
    StepDefinition(index=3, title="Sales Channels", route_slug="sales-channels"),
    StepDefinition(index=4, title="Expense", route_slug="expense"),
    StepDefinition(
        index=5,
        title="Third-Party Delivery",
        route_slug="third-party-delivery",
        required=False,
        record_key="Third-Party Info",
    ),
)

SIMULATION_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(index=0, title="Basic Information", route_slug="basic-information"),
    StepDefinition(
        index=1,
        title="Sales Channels & Operating Days",
        route_slug="sales-channels-operating-days",
        record_key="Sales Channels",
    ),
    StepDefinition(
        index=2,
        title="Labor Information",
        route_slug="labor-information",
        record_key="Labour Information",
    ),
    StepDefinition(index=3, title="Expenses", route_slug="expenses"),
)

_TRACK_STEPS: Final[dict[Track, tuple[StepDefinition, ...]]] = {
    Track.REGULAR: REGULAR_STEPS,
    Track.SIMULATION: SIMULATION_STEPS,
}


def steps_for_track(track: Track | str) -> tuple[StepDefinition, ...]:
    """Return the ordered step list of ``track``."""

    return _TRACK_STEPS[Track(track)]


def validate_steps(steps: Sequence[StepDefinition]) -> None:
    """Raise ``ValueError`` unless ``steps`` is a well-formed registry.

    Indices must be ``0..n-1`` in order and slugs and step names unique.
    """

    if not steps:
        raise ValueError("A wizard needs at least one step")
    for position, step in enumerate(steps):
        if step.index != position:
            raise ValueError(f"Step '{step.title}' has index {step.index}, expected {position}")
    slugs = [step.route_slug for step in steps]
    if len(set(slugs)) != len(slugs):
        raise ValueError("Duplicate route slug in step registry")
    names = [step.step_name for step in steps]
    if len(set(names)) != len(names):
        raise ValueError("Duplicate step name in step registry")


for _steps in _TRACK_STEPS.values():
    validate_steps(_steps)


__all__ = [
    "REGULAR_STEPS",
    "SIMULATION_STEPS",
    "StepDefinition",
    "steps_for_track",
    "validate_steps",
]
