"""Helpers for computing wizard step completion status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from state.onboarding_store import StepRecord
from wizard.step_registry import StepDefinition


def is_step_completed(state: Mapping[str, StepRecord], step_name: str) -> bool:
    """Return ``True`` only when the record's flag is the literal ``True``.

    Truthy non-boolean values (``1``, ``"true"``) count as incomplete.
    """

    record = state.get(step_name)
    if record is None:
        return False
    return getattr(record, "completed", None) is True


@dataclass(frozen=True)
class CompletionSummary:
    """Completion of the required steps of one track."""

    is_complete: bool
    first_incomplete: StepDefinition | None
    completed_steps: tuple[str, ...]
    total_steps: int

    @property
    def completed_count(self) -> int:
        return len(self.completed_steps)


def is_onboarding_complete(
    state: Mapping[str, StepRecord],
    steps: Sequence[StepDefinition],
) -> CompletionSummary:
    """Evaluate every required step of ``steps`` against ``state``."""

    required = [step for step in steps if step.required]
    completed = tuple(step.step_name for step in required if is_step_completed(state, step.step_name))
    first_incomplete = next(
        (step for step in required if not is_step_completed(state, step.step_name)),
        None,
    )
    return CompletionSummary(
        is_complete=first_incomplete is None,
        first_incomplete=first_incomplete,
        completed_steps=completed,
        total_steps=len(required),
    )


@dataclass(frozen=True)
class CompletionProgress:
    """Progress figures shown next to the step tabs."""

    completed: int
    total: int
    percentage: int


def completion_progress(
    state: Mapping[str, StepRecord],
    steps: Sequence[StepDefinition],
) -> CompletionProgress:
    """Return completed/total counts over all steps, optional ones included."""

    total = len(steps)
    completed = sum(1 for step in steps if is_step_completed(state, step.step_name))
    percentage = round(completed / total * 100) if total else 0
    return CompletionProgress(completed=completed, total=total, percentage=percentage)


__all__ = [
    "CompletionProgress",
    "CompletionSummary",
    "completion_progress",
    "is_onboarding_complete",
    "is_step_completed",
]
