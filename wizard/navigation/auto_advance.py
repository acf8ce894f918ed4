"""Automatic progression once the active step has been completed."""

from __future__ import annotations

import logging
from typing import Callable, Literal, Mapping, Sequence

from infra.logging import log_event
from state.onboarding_store import StepRecord
from utils.scheduling import ScheduledTask, Scheduler
from wizard.navigation_types import NavigationContext
from wizard.step_registry import StepDefinition
from wizard.step_status import is_onboarding_complete, is_step_completed

logger = logging.getLogger(__name__)

PendingKind = Literal["advance", "complete"]


class AutoAdvanceController:
    """Schedule the next-step navigation or the completion redirect.

    At most one timer is pending at any time. Each evaluation either keeps the
    pending timer (same target as before), replaces it, or cancels it when the
    condition that scheduled it no longer holds.
    """

    def __init__(
        self,
        *,
        steps: Sequence[StepDefinition],
        scheduler: Scheduler,
        on_advance: Callable[[int], None],
        on_complete: Callable[[], None],
        advance_delay_ms: int = 500,
        completion_delay_ms: int = 1000,
        track: str | None = None,
    ) -> None:
        self._steps = tuple(steps)
        self._scheduler = scheduler
        self._on_advance = on_advance
        self._on_complete = on_complete
        self._advance_delay_ms = advance_delay_ms
        self._completion_delay_ms = completion_delay_ms
        self._track = track
        self._pending: ScheduledTask | None = None
        self._pending_kind: PendingKind | None = None
        self._pending_target: int | None = None

    @property
    def pending_task(self) -> ScheduledTask | None:
        if self._pending is not None and not self._pending.pending:
            self._clear_pending()
        return self._pending

    @property
    def pending_kind(self) -> PendingKind | None:
        return self._pending_kind if self.pending_task is not None else None

    @property
    def pending_target(self) -> int | None:
        return self._pending_target if self.pending_task is not None else None

    def evaluate(self, state: Mapping[str, StepRecord], context: NavigationContext) -> None:
        """Re-run the auto-advance rules for ``state`` and ``context``."""

        if is_onboarding_complete(state, self._steps).is_complete:
            if self.pending_kind == "complete":
                return
            self.cancel()
            self._schedule("complete", None, self._completion_delay_ms, self._fire_complete)
            log_event("info", event="completion_redirect_scheduled", track=self._track)
            return

        index = context.active_step_index
        target = index + 1
        current = self._steps[index] if 0 <= index < len(self._steps) else None
        should_advance = (
            current is not None
            and target < len(self._steps)
            and is_step_completed(state, current.step_name)
        )

        if should_advance and context.last_auto_advance_target != target:
            self.cancel()
            context.last_auto_advance_target = target
            self._schedule("advance", target, self._advance_delay_ms, lambda: self._fire_advance(target))
            logger.debug("Auto-advance to step %s scheduled (track=%s)", target, self._track)
            return

        if should_advance and self.pending_kind == "advance" and self.pending_target == target:
            return

        if self.cancel():
            logger.debug("Cancelled stale auto-advance timer (track=%s)", self._track)

    def cancel(self) -> bool:
        """Cancel the pending timer; return ``True`` if one was pending."""

        task = self._pending
        self._clear_pending()
        return task.cancel() if task is not None else False

    def _schedule(
        self,
        kind: PendingKind,
        target: int | None,
        delay_ms: int,
        callback: Callable[[], None],
    ) -> None:
        label = f"{self._track or 'wizard'}:{kind}" + (f":{target}" if target is not None else "")
        self._pending = self._scheduler.call_later(delay_ms, callback, label=label)
        self._pending_kind = kind
        self._pending_target = target

    def _clear_pending(self) -> None:
        self._pending = None
        self._pending_kind = None
        self._pending_target = None

    def _fire_advance(self, target: int) -> None:
        self._clear_pending()
        self._on_advance(target)

    def _fire_complete(self) -> None:
        self._clear_pending()
        self._on_complete()


__all__ = ["AutoAdvanceController"]
