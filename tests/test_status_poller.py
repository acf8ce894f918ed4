from __future__ import annotations

from collections import Counter
from typing import Any

import pytest

from config import OnboardingSettings
from core.destinations import DestinationKind
from core.errors import ApiError
from core.status_poller import StatusResolver, poll_until
from core.tracks import Track
from integrations.onboarding_api import ApiResult
from state.onboarding_store import OnboardingStore, StepRecord
from state.track_cache import TrackStatusCache


class FakeSleep:
    def __init__(self) -> None:
        self.elapsed_ms = 0.0
        self.calls = 0

    def __call__(self, seconds: float) -> None:
        self.calls += 1
        self.elapsed_ms += seconds * 1000


class FakeSource:
    """Status endpoint double answering from a per-track table."""

    def __init__(self, responses: dict[Track, Any] | None = None) -> None:
        self.responses = responses or {}
        self.calls: Counter[Track] = Counter()
        self.activation: Any = ApiResult(success=True, data={"restaurant_simulation": True})

    def get_status(self, track: Track | str) -> Any:
        track = Track(track)
        self.calls[track] += 1
        response = self.responses.get(track, ApiResult(success=True, data={"restaurants": []}))
        if isinstance(response, Exception):
            raise response
        return response

    def activate_simulation(self) -> Any:
        if isinstance(self.activation, Exception):
            raise self.activation
        return self.activation


def _restaurants(*items: dict[str, Any]) -> ApiResult:
    return ApiResult(success=True, data={"restaurants": list(items)})


def test_poll_returns_as_soon_as_the_check_passes() -> None:
    sleep = FakeSleep()
    checks: list[int] = []
    counter = {"value": 0}

    def _refresh() -> int:
        counter["value"] += 1
        return counter["value"]

    def _predicate(snapshot: int) -> bool:
        checks.append(snapshot)
        return snapshot >= 5

    result = poll_until(_predicate, 0, _refresh, interval_ms=100, max_attempts=20, sleep=sleep)

    assert result == 5
    assert sleep.elapsed_ms == pytest.approx(500)
    assert counter["value"] == 5
    assert checks[-1] == 5


def test_poll_gives_up_after_max_attempts() -> None:
    sleep = FakeSleep()
    refreshes = {"count": 0}

    def _refresh() -> str:
        refreshes["count"] += 1
        return "still-empty"

    result = poll_until(lambda _: False, "initial", _refresh, sleep=sleep)

    assert result == "still-empty"
    assert sleep.elapsed_ms == pytest.approx(2000)
    assert refreshes["count"] == 20


def test_poll_skips_waiting_when_initial_snapshot_passes() -> None:
    sleep = FakeSleep()

    assert poll_until(lambda value: value == "ready", "ready", lambda: "other", sleep=sleep) == "ready"
    assert sleep.calls == 0


def test_poll_survives_failing_refresh_and_predicate() -> None:
    sleep = FakeSleep()

    def _refresh() -> int:
        raise RuntimeError("boom")

    def _predicate(_: int) -> bool:
        raise ValueError("bad snapshot")

    assert poll_until(_predicate, 7, _refresh, interval_ms=10, max_attempts=3, sleep=sleep) == 7
    assert sleep.elapsed_ms == pytest.approx(30)


def _resolver(source: FakeSource, sleep: FakeSleep, store: OnboardingStore | None = None) -> StatusResolver:
    return StatusResolver(
        TrackStatusCache(source),
        regular_store=store,
        client=source,
        settings=OnboardingSettings(),
        sleep=sleep,
    )


def test_cached_status_resolves_without_waiting_or_fetching() -> None:
    source = FakeSource()
    sleep = FakeSleep()
    resolver = _resolver(source, sleep)
    resolver.cache.store(Track.REGULAR, {"restaurants": [{"id": 1, "onboarding_complete": True}]})
    resolver.cache.store(Track.SIMULATION, [])

    destination = resolver.resolve()

    assert destination.kind is DestinationKind.REGULAR_DASHBOARD
    assert sleep.calls == 0
    assert sum(source.calls.values()) == 0


def test_missing_status_falls_back_to_one_fetch_per_track() -> None:
    source = FakeSource(
        {
            Track.REGULAR: _restaurants(),
            Track.SIMULATION: _restaurants(
                {"restaurant_id": 9, "restaurant_name": "X", "simulation_onboarding_complete": True}
            ),
        }
    )
    sleep = FakeSleep()

    resolved = _resolver(source, sleep).resolve_status()

    assert sleep.elapsed_ms == pytest.approx(2000)
    assert source.calls == Counter({Track.REGULAR: 1, Track.SIMULATION: 1})
    assert resolved.fallback_tracks == (Track.REGULAR, Track.SIMULATION)
    assert resolved.destination.kind is DestinationKind.SIMULATION_DASHBOARD


def test_status_arriving_during_polling_stops_the_wait() -> None:
    source = FakeSource()
    resolver: StatusResolver

    class ArrivingSleep(FakeSleep):
        def __call__(self, seconds: float) -> None:
            super().__call__(seconds)
            if self.calls == 3:
                resolver.cache.store(Track.REGULAR, [{"id": 4, "onboarding_complete": False}])
                resolver.cache.store(Track.SIMULATION, [])

    sleep = ArrivingSleep()
    resolver = _resolver(source, sleep)

    destination = resolver.resolve()

    assert sleep.elapsed_ms == pytest.approx(300)
    assert sum(source.calls.values()) == 0
    assert destination.kind is DestinationKind.REGULAR_ONBOARDING
    assert destination.path == "/onboarding/basic-information"


def test_regular_onboarding_resumes_at_first_incomplete_stored_step() -> None:
    source = FakeSource({Track.REGULAR: _restaurants({"id": 4})})
    store = OnboardingStore("regular", storage={})
    store.set(
        {
            "Basic Information": StepRecord("Basic Information", completed=True),
            "Labour Information": StepRecord("Labour Information", completed=True),
        }
    )

    destination = _resolver(source, FakeSleep(), store).resolve()

    assert destination.path == "/onboarding/food-cost-details"


@pytest.mark.parametrize(
    "failure",
    [RuntimeError("network down"), ApiError("unreachable"), ApiResult(success=False, error="HTTP 500")],
)
def test_fallback_failures_route_to_getting_started(failure: Any) -> None:
    source = FakeSource({Track.REGULAR: failure, Track.SIMULATION: failure})

    destination = _resolver(source, FakeSleep()).resolve()

    assert destination.kind is DestinationKind.GETTING_STARTED
    assert source.calls == Counter({Track.REGULAR: 1, Track.SIMULATION: 1})


def test_activate_simulation_refreshes_both_tracks() -> None:
    source = FakeSource({Track.SIMULATION: _restaurants({"id": 2, "name": "Sim"})})
    resolver = _resolver(source, FakeSleep())

    outcome = resolver.activate_simulation_mode()

    assert outcome.activated is True
    assert outcome.refreshed is True
    assert resolver.cache.peek(Track.SIMULATION) == [{"id": 2, "name": "Sim"}]


def test_activate_simulation_refresh_failure_is_a_warning() -> None:
    source = FakeSource({Track.REGULAR: RuntimeError("timeout")})

    outcome = _resolver(source, FakeSleep()).activate_simulation_mode()

    assert outcome.activated is True
    assert outcome.refreshed is False
    assert outcome.error is None


@pytest.mark.parametrize(
    "activation",
    [ApiResult(success=False, error="Not allowed"), ApiError("unreachable")],
)
def test_activate_simulation_failure_is_reported(activation: Any) -> None:
    source = FakeSource()
    source.activation = activation

    outcome = _resolver(source, FakeSleep()).activate_simulation_mode()

    assert outcome.activated is False
    assert outcome.error in {"Not allowed", "unreachable"}
    assert sum(source.calls.values()) == 0


def test_activation_without_simulation_confirmation_is_not_activated() -> None:
    source = FakeSource()
    source.activation = ApiResult(success=True, data={"restaurant_simulation": False})

    outcome = _resolver(source, FakeSleep()).activate_simulation_mode()

    assert outcome.activated is False
    assert outcome.refreshed is False
    assert outcome.error == "Simulation mode is not available for this account."
    assert sum(source.calls.values()) == 0


def test_simulation_only_account_resolves_with_simulation_flag() -> None:
    source = FakeSource({Track.SIMULATION: _restaurants({"restaurant_id": 5, "restaurant_name": "Sim"})})

    resolved = _resolver(source, FakeSleep()).resolve_login()

    assert resolved.destination.kind is DestinationKind.SIMULATION_ONBOARDING
    assert resolved.simulation_flag is True


def test_regular_account_resolves_without_simulation_flag() -> None:
    source = FakeSource({Track.REGULAR: _restaurants({"id": 1, "onboarding_complete": True})})

    assert _resolver(source, FakeSleep()).resolve_login().simulation_flag is None


def test_resolve_login_never_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    resolver = _resolver(FakeSource(), FakeSleep())

    def _broken() -> None:
        raise RuntimeError("cache corrupted")

    monkeypatch.setattr(resolver, "resolve_status", _broken)

    resolved = resolver.resolve_login()

    assert resolved.destination.kind is DestinationKind.GETTING_STARTED
    assert resolved.simulation_flag is None
