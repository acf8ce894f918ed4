"""Bidirectional mapping between step indices and route paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Sequence

from constants.routes import join_route, split_route
from state.onboarding_store import StepRecord
from wizard.navigation.gate import can_navigate_to_tab
from wizard.step_registry import StepDefinition
from wizard.step_status import is_onboarding_complete

ResolutionReason = Literal["ok", "complete", "unknown_slug", "locked"]


@dataclass(frozen=True)
class RouteResolution:
    """Result of resolving an inbound path.

    Exactly one of ``index`` and ``redirect`` is set.
    """

    index: int | None
    redirect: str | None
    reason: ResolutionReason
    blocking_step: str | None = None
    requested_index: int | None = None


class UrlSynchronizer:
    """Slug tables and inbound path resolution for one track."""

    def __init__(self, steps: Sequence[StepDefinition], *, prefix: str, dashboard_path: str) -> None:
        self._steps = tuple(steps)
        self.prefix = prefix
        self.dashboard_path = dashboard_path
        self._slug_to_index: dict[str, int] = {step.route_slug: step.index for step in self._steps}
        self._index_to_slug: dict[int, str] = {step.index: step.route_slug for step in self._steps}

    def slug_to_index(self, slug: str | None) -> int | None:
        if not slug:
            return None
        return self._slug_to_index.get(slug.strip().lower())

    def index_to_slug(self, index: int) -> str:
        try:
            return self._index_to_slug[index]
        except KeyError:
            raise IndexError(f"No step with index {index}") from None

    def path_for(self, index: int) -> str:
        return join_route(self.prefix, self.index_to_slug(index))

    @property
    def first_step_path(self) -> str:
        return self.path_for(0)

    def owns(self, path: str) -> bool:
        """Return ``True`` when ``path`` is inside this track's namespace."""

        namespace, _ = split_route(path)
        return namespace == self.prefix

    def resolve(self, path: str, state: Mapping[str, StepRecord]) -> RouteResolution:
        """Resolve ``path`` against the registry and the navigation gate.

        A completed track always redirects to the dashboard. Unknown slugs and
        locked steps redirect to the first step.
        """

        if is_onboarding_complete(state, self._steps).is_complete:
            return RouteResolution(index=None, redirect=self.dashboard_path, reason="complete")
        namespace, slug = split_route(path)
        index = self.slug_to_index(slug) if namespace == self.prefix else None
        if index is None:
            return RouteResolution(index=None, redirect=self.first_step_path, reason="unknown_slug")
        decision = can_navigate_to_tab(state, self._steps, index)
        if not decision.allowed:
            return RouteResolution(
                index=None,
                redirect=self.first_step_path,
                reason="locked",
                blocking_step=decision.blocking_step,
                requested_index=index,
            )
        return RouteResolution(index=index, redirect=None, reason="ok")


__all__ = ["RouteResolution", "UrlSynchronizer"]
