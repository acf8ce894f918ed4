from __future__ import annotations

import pytest

from state.onboarding_store import StepRecord
from wizard.navigation.gate import can_navigate_to_tab
from wizard.step_registry import REGULAR_STEPS, SIMULATION_STEPS, StepDefinition


def _state(*names: str) -> dict[str, StepRecord]:
    return {name: StepRecord(step_name=name, completed=True) for name in names}


@pytest.mark.parametrize("steps", [REGULAR_STEPS, SIMULATION_STEPS])
@pytest.mark.parametrize(
    "state",
    [{}, _state("Basic Information"), {"Basic Information": StepRecord("Basic Information", completed=False)}],
)
def test_first_step_is_always_reachable(steps, state) -> None:
    assert can_navigate_to_tab(state, steps, 0).allowed is True


def test_gate_names_first_incomplete_required_step() -> None:
    state = _state("Basic Information", "Food Cost Details")

    decision = can_navigate_to_tab(state, REGULAR_STEPS, 4)

    assert decision.allowed is False
    assert decision.blocking_step == "Labour Information"


def test_gate_allows_when_every_previous_required_step_is_complete() -> None:
    state = _state("Basic Information", "Labour Information", "Food Cost Details")

    assert can_navigate_to_tab(state, REGULAR_STEPS, 3).allowed is True
    assert can_navigate_to_tab(state, REGULAR_STEPS, 4).blocking_step == "Sales Channels"


def test_gate_ignores_optional_steps_before_target() -> None:
    steps = (
        StepDefinition(index=0, title="Intro", route_slug="intro"),
        StepDefinition(index=1, title="Extras", route_slug="extras", required=False),
        StepDefinition(index=2, title="Finish", route_slug="finish"),
    )

    assert can_navigate_to_tab(_state("Intro"), steps, 2).allowed is True


def test_gate_reports_blocking_step_by_title() -> None:
    decision = can_navigate_to_tab(_state("Basic Information"), SIMULATION_STEPS, 3)

    assert decision.allowed is False
    assert decision.blocking_step == "Sales Channels & Operating Days"


@pytest.mark.parametrize("target", [-1, 6, 42])
def test_out_of_range_targets_are_refused(target: int) -> None:
    decision = can_navigate_to_tab(_state(*[step.step_name for step in REGULAR_STEPS]), REGULAR_STEPS, target)

    assert decision.allowed is False
    assert decision.blocking_step is None
