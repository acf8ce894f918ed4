"""Routing decision that merges the regular and simulation track status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from constants import routes
from core.tracks import TrackStatus


class DestinationKind(StrEnum):
    REGULAR_DASHBOARD = "regular_dashboard"
    SIMULATION_DASHBOARD = "simulation_dashboard"
    REGULAR_ONBOARDING = "regular_onboarding"
    SIMULATION_ONBOARDING = "simulation_onboarding"
    GETTING_STARTED = "getting_started"


@dataclass(frozen=True)
class Destination:
    """Where a signed-in user should land.

    ``step`` is only set for :attr:`DestinationKind.REGULAR_ONBOARDING` and
    holds the route slug of the first incomplete regular step.
    """

    kind: DestinationKind
    step: str | None = None

    @property
    def path(self) -> str:
        if self.kind is DestinationKind.REGULAR_DASHBOARD:
            return routes.REGULAR_DASHBOARD
        if self.kind is DestinationKind.SIMULATION_DASHBOARD:
            return routes.SIMULATION_DASHBOARD
        if self.kind is DestinationKind.REGULAR_ONBOARDING:
            return routes.join_route(routes.REGULAR_PREFIX, self.step or routes.FIRST_REGULAR_SLUG)
        if self.kind is DestinationKind.SIMULATION_ONBOARDING:
            return routes.join_route(routes.SIMULATION_PREFIX, routes.FIRST_SIMULATION_SLUG)
        return routes.GETTING_STARTED


def _simulation_qualifies(simulation: TrackStatus) -> bool:
    return (
        simulation.has_entity
        and simulation.entity_name is not None
        and simulation.onboarding_complete is True
    )


def resolve_destination(
    regular: TrackStatus,
    simulation: TrackStatus,
    first_incomplete: str | None = None,
) -> Destination:
    """Pick one destination from both tracks' status; first matching rule wins.

    1. A complete, named simulation restaurant plus any regular restaurant
       lands on the regular dashboard.
    2. A complete, named simulation restaurant alone lands on the simulation
       dashboard.
    3. An incomplete simulation restaurant resumes simulation onboarding.
    4. A complete regular restaurant lands on the regular dashboard.
    5. An incomplete regular restaurant resumes regular onboarding at
       ``first_incomplete``.
    6. Otherwise the user is sent to the getting started screen.
    """

    if _simulation_qualifies(simulation):
        if regular.has_entity:
            return Destination(DestinationKind.REGULAR_DASHBOARD)
        return Destination(DestinationKind.SIMULATION_DASHBOARD)
    if simulation.has_entity:
        return Destination(DestinationKind.SIMULATION_ONBOARDING)
    if regular.has_entity and regular.onboarding_complete is True:
        return Destination(DestinationKind.REGULAR_DASHBOARD)
    if regular.has_entity:
        return Destination(DestinationKind.REGULAR_ONBOARDING, step=first_incomplete)
    return Destination(DestinationKind.GETTING_STARTED)


def is_simulation_mode(
    simulation_flag: bool | None,
    has_simulation_entities: bool,
    on_simulation_route: bool,
) -> bool:
    """Return whether the header should show the simulation badge.

    Only the literal ``True`` flag enables the badge; an explicit ``False``
    wins even inside the simulation route namespace.
    """

    if simulation_flag is not True:
        return False
    return bool(has_simulation_entities or on_simulation_route)


def derive_simulation_flag(
    regular: TrackStatus,
    simulation: TrackStatus,
    activated: bool = False,
) -> bool | None:
    """Return the account's simulation flag as far as it is known.

    The flag is on for simulation-only accounts and after a confirmed
    activation. ``None`` means nothing indicates simulation mode.
    """

    if activated:
        return True
    if simulation.has_entity and not regular.has_entity:
        return True
    return None


__all__ = [
    "Destination",
    "DestinationKind",
    "derive_simulation_flag",
    "is_simulation_mode",
    "resolve_destination",
]
