from __future__ import annotations

from state.onboarding_store import StepRecord
from wizard.navigation.auto_advance import AutoAdvanceController
from wizard.navigation_types import NavigationContext
from wizard.step_registry import REGULAR_STEPS

REQUIRED_REGULAR = ("Basic Information", "Labour Information", "Food Cost Details", "Sales Channels", "Expense")


def _state(*names: str) -> dict[str, StepRecord]:
    return {name: StepRecord(step_name=name, completed=True) for name in names}


def _controller(scheduler):
    events: list[object] = []
    controller = AutoAdvanceController(
        steps=REGULAR_STEPS,
        scheduler=scheduler,
        on_advance=lambda target: events.append(target),
        on_complete=lambda: events.append("dashboard"),
        track="regular",
    )
    return controller, events


def test_completed_step_advances_after_delay(scheduler, clock) -> None:
    controller, events = _controller(scheduler)
    context = NavigationContext(active_step_index=0)

    controller.evaluate(_state("Basic Information"), context)

    assert context.last_auto_advance_target == 1
    assert controller.pending_kind == "advance"
    clock.advance_ms(499)
    scheduler.run_due()
    assert events == []
    clock.advance_ms(1)
    scheduler.run_due()
    assert events == [1]
    assert controller.pending_task is None


def test_repeated_evaluation_keeps_single_timer(scheduler, clock) -> None:
    controller, events = _controller(scheduler)
    context = NavigationContext(active_step_index=0)
    state = _state("Basic Information")

    controller.evaluate(state, context)
    first = controller.pending_task
    clock.advance_ms(300)
    controller.evaluate(state, context)
    controller.evaluate(state, context)

    assert controller.pending_task is first
    assert len(scheduler.pending()) == 1
    clock.advance_ms(200)
    scheduler.run_due()
    assert events == [1]


def test_step_reset_before_firing_cancels_timer(scheduler, clock) -> None:
    controller, events = _controller(scheduler)
    context = NavigationContext(active_step_index=0)

    controller.evaluate(_state("Basic Information"), context)
    task = controller.pending_task
    controller.evaluate({}, context)

    assert task is not None and task.cancelled
    clock.advance_ms(1000)
    scheduler.run_due()
    assert events == []


def test_recorded_target_is_not_rescheduled(scheduler) -> None:
    controller, _ = _controller(scheduler)
    context = NavigationContext(active_step_index=1, last_auto_advance_target=2)

    controller.evaluate(_state("Basic Information", "Labour Information"), context)

    assert controller.pending_task is None
    assert scheduler.pending() == []


def test_completion_replaces_advance_with_redirect(scheduler, clock) -> None:
    controller, events = _controller(scheduler)
    context = NavigationContext(active_step_index=3)

    controller.evaluate(_state(*REQUIRED_REGULAR[:4]), context)
    advance = controller.pending_task
    controller.evaluate(_state(*REQUIRED_REGULAR), context)

    assert advance is not None and advance.cancelled
    assert controller.pending_kind == "complete"
    clock.advance_ms(999)
    scheduler.run_due()
    assert events == []
    clock.advance_ms(1)
    scheduler.run_due()
    assert events == ["dashboard"]


def test_completion_redirect_is_scheduled_once(scheduler, clock) -> None:
    controller, events = _controller(scheduler)
    context = NavigationContext(active_step_index=4)
    state = _state(*REQUIRED_REGULAR)

    controller.evaluate(state, context)
    clock.advance_ms(600)
    controller.evaluate(state, context)
    clock.advance_ms(400)
    scheduler.run_due()

    assert events == ["dashboard"]


def test_no_advance_past_last_step(scheduler) -> None:
    controller, _ = _controller(scheduler)
    context = NavigationContext(active_step_index=5)

    controller.evaluate(_state("Basic Information", "Third-Party Info"), context)

    assert controller.pending_task is None


def test_cancel_reports_pending_timer(scheduler) -> None:
    controller, _ = _controller(scheduler)
    controller.evaluate(_state("Basic Information"), NavigationContext())

    assert controller.cancel() is True
    assert controller.cancel() is False
