"""Access check deciding whether a step index is currently reachable."""

from __future__ import annotations

from typing import Mapping, Sequence

from state.onboarding_store import StepRecord
from wizard.navigation_types import GateDecision
from wizard.step_registry import StepDefinition
from wizard.step_status import is_step_completed


def can_navigate_to_tab(
    state: Mapping[str, StepRecord],
    steps: Sequence[StepDefinition],
    target_index: int,
) -> GateDecision:
    """Return whether ``target_index`` may be shown.

    Step 0 is always reachable. Any other step requires every required step
    before it to be completed; the first one that is not is reported as the
    blocking step. Indices outside the registry are never reachable.
    """

    if target_index == 0:
        return GateDecision(allowed=True)
    if target_index < 0 or target_index >= len(steps):
        return GateDecision(allowed=False)
    for step in steps[:target_index]:
        if step.required and not is_step_completed(state, step.step_name):
            return GateDecision(allowed=False, blocking_step=step.title)
    return GateDecision(allowed=True)


__all__ = ["can_navigate_to_tab"]
