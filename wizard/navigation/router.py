from __future__ import annotations

import logging
from typing import Mapping, Sequence

from config import OnboardingSettings, SETTINGS
from constants import routes
from core.errors import GateViolation
from core.tracks import Track
from infra.logging import log_event
from state.onboarding_store import OnboardingStore, StepRecord
from utils.scheduling import ScheduledTask, Scheduler
from wizard.navigation.auto_advance import AutoAdvanceController
from wizard.navigation.gate import can_navigate_to_tab
from wizard.navigation.url_sync import RouteResolution, UrlSynchronizer
from wizard.navigation_types import GateDecision, NavigationContext, Notice, Router, StepStatus
from wizard.step_registry import StepDefinition, steps_for_track
from wizard.step_status import CompletionSummary, is_onboarding_complete, is_step_completed

logger = logging.getLogger(__name__)

_TRACK_ROUTES: dict[Track, tuple[str, str]] = {
    Track.REGULAR: (routes.REGULAR_PREFIX, routes.REGULAR_DASHBOARD),
    Track.SIMULATION: (routes.SIMULATION_PREFIX, routes.SIMULATION_DASHBOARD),
}


class NavigationController:
    """Manage wizard navigation state for one track outside the UI layer.

    The controller subscribes to the track's :class:`OnboardingStore` and
    re-runs the gate and auto-advance rules synchronously on every change.
    It owns every timer it schedules; :meth:`teardown` cancels them and drops
    the store subscription.
    """

    def __init__(
        self,
        *,
        track: Track | str,
        steps: Sequence[StepDefinition],
        store: OnboardingStore,
        router: Router,
        scheduler: Scheduler,
        prefix: str,
        dashboard_path: str,
        advance_delay_ms: int = 500,
        completion_delay_ms: int = 1000,
    ) -> None:
        self.track = Track(track)
        self._steps: tuple[StepDefinition, ...] = tuple(steps)
        self._store = store
        self._router = router
        self.context = NavigationContext()
        self._sync = UrlSynchronizer(self._steps, prefix=prefix, dashboard_path=dashboard_path)
        self._auto = AutoAdvanceController(
            steps=self._steps,
            scheduler=scheduler,
            on_advance=self._auto_advance_to,
            on_complete=self._redirect_to_dashboard,
            advance_delay_ms=advance_delay_ms,
            completion_delay_ms=completion_delay_ms,
            track=self.track.value,
        )
        self._notice: Notice | None = None
        self._torn_down = False
        self._mounted = False
        self._unsubscribe = store.subscribe(self._on_state_change)

    @classmethod
    def for_track(
        cls,
        track: Track | str,
        *,
        store: OnboardingStore,
        router: Router,
        scheduler: Scheduler,
        settings: OnboardingSettings | None = None,
    ) -> "NavigationController":
        """Build a controller with the registry, routes and delays of ``track``."""

        resolved = Track(track)
        prefix, dashboard_path = _TRACK_ROUTES[resolved]
        config = settings or SETTINGS
        return cls(
            track=resolved,
            steps=steps_for_track(resolved),
            store=store,
            router=router,
            scheduler=scheduler,
            prefix=prefix,
            dashboard_path=dashboard_path,
            advance_delay_ms=config.auto_advance_delay_ms,
            completion_delay_ms=config.completion_redirect_delay_ms,
        )

    @property
    def steps(self) -> tuple[StepDefinition, ...]:
        return self._steps

    @property
    def url_sync(self) -> UrlSynchronizer:
        return self._sync

    @property
    def active_step_index(self) -> int:
        return self.context.active_step_index

    @property
    def active_step(self) -> StepDefinition:
        return self._steps[self.context.active_step_index]

    @property
    def notice(self) -> Notice | None:
        return self._notice

    @property
    def pending_task(self) -> ScheduledTask | None:
        return self._auto.pending_task

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def dismiss_notice(self) -> None:
        self._notice = None

    def store_state(self) -> Mapping[str, StepRecord]:
        return self._store.get()

    def is_onboarding_complete(self) -> CompletionSummary:
        return is_onboarding_complete(self.store_state(), self._steps)

    def step_statuses(self) -> list[StepStatus]:
        state = self.store_state()
        return [
            StepStatus(
                step=step,
                completed=is_step_completed(state, step.step_name),
                accessible=can_navigate_to_tab(state, self._steps, step.index).allowed,
            )
            for step in self._steps
        ]

    def mount(self) -> RouteResolution | None:
        """Synchronise with the router's current path."""

        return self.handle_route_change(self._router.current_path)

    def handle_route_change(self, path: str) -> RouteResolution | None:
        """Apply an inbound route change; redirect when the path is not usable."""

        if self._torn_down:
            logger.debug("Ignoring route change to '%s' on torn down %s controller", path, self.track)
            return None
        resolution = self._sync.resolve(path, self.store_state())
        if resolution.redirect is not None:
            self._auto.cancel()
            if resolution.reason == "locked":
                self._show_violation(GateViolation(resolution.requested_index or 0, resolution.blocking_step))
            if resolution.reason == "complete":
                log_event(
                    "info",
                    event="route_complete_redirect",
                    track=self.track.value,
                    destination=resolution.redirect,
                )
            self._router.navigate(resolution.redirect, replace=True)
            return resolution
        assert resolution.index is not None
        self._activate(resolution.index)
        self._evaluate()
        return resolution

    def handle_tab_click(self, target_index: int) -> GateDecision:
        """Switch to ``target_index`` when the gate allows it."""

        if self._torn_down:
            return GateDecision(allowed=False)
        decision = can_navigate_to_tab(self.store_state(), self._steps, target_index)
        if not decision.allowed:
            self._show_violation(GateViolation(target_index, decision.blocking_step))
            return decision
        self.dismiss_notice()
        self._go_to(target_index)
        return decision

    def navigate_to_next_step(self, skip_completion_check: bool = False) -> bool:
        """Move one step forward; return ``True`` when the step changed."""

        if self._torn_down:
            return False
        target = self.context.active_step_index + 1
        if target >= len(self._steps):
            return False
        if not skip_completion_check:
            decision = can_navigate_to_tab(self.store_state(), self._steps, target)
            if not decision.allowed:
                self._show_violation(GateViolation(target, decision.blocking_step))
                return False
        self.dismiss_notice()
        self._go_to(target)
        return True

    def navigate_to_previous_step(self) -> bool:
        """Move one step back, resetting the left step's completion flag."""

        if self._torn_down:
            return False
        index = self.context.active_step_index
        if index <= 0:
            return False
        # Going back forces the user to re-submit the step they leave.
        self._store.reset_step(self._steps[index].step_name)
        self.dismiss_notice()
        self._go_to(index - 1)
        return True

    def teardown(self) -> None:
        """Cancel pending timers and stop listening to the store."""

        if self._torn_down:
            return
        self._torn_down = True
        self._auto.cancel()
        self._unsubscribe()
        logger.debug("Navigation controller for %s torn down", self.track)

    def _show_violation(self, violation: GateViolation) -> None:
        self._notice = Notice(message=str(violation), blocking_step=violation.blocking_step)
        log_event(
            "info",
            event="gate_violation",
            track=self.track.value,
            step=violation.blocking_step,
        )

    def _activate(self, index: int) -> None:
        changed = not self._mounted or index != self.context.active_step_index
        self._mounted = True
        if changed:
            self._auto.cancel()
        self.context.active_step_index = index

    def _go_to(self, index: int) -> None:
        self._activate(index)
        self._router.navigate(self._sync.path_for(index))
        self._evaluate()

    def _evaluate(self) -> None:
        if self._mounted and not self._torn_down:
            self._auto.evaluate(self.store_state(), self.context)

    def _on_state_change(self, _state: Mapping[str, StepRecord]) -> None:
        self._evaluate()

    def _auto_advance_to(self, target: int) -> None:
        if self._torn_down:
            return
        logger.info("Auto-advancing %s wizard to step %s", self.track, target)
        self._go_to(target)

    def _redirect_to_dashboard(self) -> None:
        if self._torn_down:
            return
        log_event(
            "info",
            event="completion_redirect",
            track=self.track.value,
            destination=self._sync.dashboard_path,
        )
        self._router.navigate(self._sync.dashboard_path, replace=True)


__all__ = ["NavigationController"]
