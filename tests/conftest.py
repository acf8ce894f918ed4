from pathlib import Path
import sys
from dataclasses import dataclass, field
from typing import Callable

import streamlit as st

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from state.onboarding_store import OnboardingStore, StepRecord  # noqa: E402
from utils.scheduling import DeferredScheduler  # noqa: E402


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 0.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance_ms(self, delta_ms: float) -> float:
        self.value += delta_ms / 1000.0
        return self.value


@dataclass
class FakeRouter:
    """In-memory router recording every navigation."""

    current_path: str = "/"
    calls: list[tuple[str, bool]] = field(default_factory=list)

    def navigate(self, path: str, *, replace: bool = False) -> None:
        self.calls.append((path, replace))
        self.current_path = path

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> DeferredScheduler:
    return DeferredScheduler(clock=clock)


@pytest.fixture
def router() -> FakeRouter:
    return FakeRouter()


@pytest.fixture
def make_store() -> Callable[..., OnboardingStore]:
    def _make(track: str = "regular", completed: tuple[str, ...] = ()) -> OnboardingStore:
        store = OnboardingStore(track, storage={})
        if completed:
            store.set({name: StepRecord(step_name=name, completed=True) for name in completed})
        return store

    return _make

