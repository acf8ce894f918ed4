"""Cancellable single-shot timers for a single-threaded UI loop.

Callbacks never run on their own: the owner of a :class:`DeferredScheduler`
calls :meth:`DeferredScheduler.run_due` (the Streamlit shell does so on every
rerun) and only tasks whose due time has passed are fired. Every scheduled task
returns a :class:`ScheduledTask` handle that its owner must cancel when the
task is superseded or the owner is torn down.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ScheduledTask:
    """Handle for a single pending callback."""

    task_id: int
    due_at: float
    callback: Callable[[], None] = field(repr=False)
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """Cancel the task; return ``True`` if it was still pending."""

        if not self.pending:
            return False
        self.cancelled = True
        return True


class Scheduler(Protocol):
    """Anything able to run a callback once after ``delay_ms``."""

    def call_later(self, delay_ms: int, callback: Callable[[], None], *, label: str = "") -> ScheduledTask: ...


class DeferredScheduler:
    """Timer queue driven explicitly through :meth:`run_due`."""

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._tasks: list[ScheduledTask] = []
        self._ids = itertools.count(1)

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay_ms: int, callback: Callable[[], None], *, label: str = "") -> ScheduledTask:
        if delay_ms < 0:
            msg = "delay_ms must be >= 0"
            raise ValueError(msg)
        task = ScheduledTask(
            task_id=next(self._ids),
            due_at=self._clock() + delay_ms / 1000.0,
            callback=callback,
            label=label,
        )
        self._tasks.append(task)
        return task

    def pending(self) -> list[ScheduledTask]:
        self._tasks = [task for task in self._tasks if task.pending]
        return list(self._tasks)

    def next_due(self) -> float | None:
        pending = self.pending()
        if not pending:
            return None
        return min(task.due_at for task in pending)

    def run_due(self, now: float | None = None) -> int:
        """Fire every pending task due at ``now``; return how many fired.

        Tasks run in due order. A callback may schedule or cancel other tasks;
        newly scheduled tasks that are already due run in the same pass.
        """

        fired = 0
        while True:
            current = self._clock() if now is None else now
            due = [task for task in self.pending() if task.due_at <= current]
            if not due:
                return fired
            task = min(due, key=lambda item: (item.due_at, item.task_id))
            task.fired = True
            fired += 1
            try:
                task.callback()
            except Exception:
                logger.exception("Scheduled task '%s' failed", task.label or task.task_id)

    def cancel_all(self) -> int:
        cancelled = sum(1 for task in self._tasks if task.cancel())
        self._tasks = []
        return cancelled


__all__ = ["DeferredScheduler", "ScheduledTask", "Scheduler"]
