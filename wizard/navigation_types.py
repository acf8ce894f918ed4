from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from wizard.step_registry import StepDefinition


class Router(Protocol):
    """Router collaborator: the wizard only reads and pushes path strings."""

    @property
    def current_path(self) -> str: ...

    def navigate(self, path: str, *, replace: bool = False) -> None: ...


@dataclass
class NavigationContext:
    """Ephemeral per-mount navigation state."""

    active_step_index: int = 0
    last_auto_advance_target: int | None = None


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a navigation gate check."""

    allowed: bool
    blocking_step: str | None = None


@dataclass(frozen=True)
class StepStatus:
    """Per-step view exposed to the tab bar."""

    step: StepDefinition
    completed: bool
    accessible: bool


@dataclass(frozen=True)
class Notice:
    """Transient, dismissible message shown above the wizard."""

    message: str
    blocking_step: str | None = None
    level: str = "warning"
