# app.py — Restaurant onboarding (Streamlit entrypoint)
from __future__ import annotations

import logging
from pathlib import Path
import sys
import time
from typing import Any, Final

import streamlit as st

APP_ROOT = Path(__file__).resolve().parent
for candidate in (APP_ROOT, APP_ROOT.parent):
    candidate_str = str(candidate)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)

from config import SETTINGS  # noqa: E402
from constants import routes  # noqa: E402
from constants.keys import StateKeys  # noqa: E402
from core.destinations import is_simulation_mode  # noqa: E402
from core.errors import SubmissionFailure  # noqa: E402
from core.status_poller import StatusResolver  # noqa: E402
from core.tracks import Track  # noqa: E402
from integrations.onboarding_api import OnboardingApiClient  # noqa: E402
from state.onboarding_store import OnboardingStore  # noqa: E402
from state.track_cache import TrackStatusCache  # noqa: E402
from utils.scheduling import DeferredScheduler  # noqa: E402
from wizard.navigation import NavigationController, WizardSessionKeys  # noqa: E402
from wizard.navigation.ui import (  # noqa: E402
    QueryParamRouter,
    inject_navigation_style,
    render_header,
    render_notice,
    render_step_tabs,
)
from wizard.step_status import completion_progress  # noqa: E402
from wizard.submission import StepSubmitter, reset_session  # noqa: E402

APP_VERSION = "0.1.0"
RUNTIME_KEY: Final[str] = "runtime.services"
# Upper bound for one wait between reruns while a timer is pending.
MAX_TIMER_WAIT_SECONDS: Final[float] = 0.25

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Restaurant onboarding", page_icon="🍽️", layout="wide")


class Runtime:
    """Per-session service graph; built once and kept in session state."""

    def __init__(self) -> None:
        self.client = OnboardingApiClient(settings=SETTINGS)
        self.cache = TrackStatusCache(self.client)
        self.scheduler = DeferredScheduler()
        self.stores = {track: OnboardingStore(track.value, storage=st.session_state) for track in Track}
        self.submitters = {track: StepSubmitter(self.stores[track], self.client) for track in Track}
        self.resolver = StatusResolver(
            self.cache,
            regular_store=self.stores[Track.REGULAR],
            regular_loader=self.submitters[Track.REGULAR].load_for_status,
            client=self.client,
            settings=SETTINGS,
        )


def get_runtime() -> Runtime:
    runtime = st.session_state.get(RUNTIME_KEY)
    if not isinstance(runtime, Runtime):
        runtime = Runtime()
        st.session_state[RUNTIME_KEY] = runtime
    return runtime


def _track_for_path(path: str) -> Track | None:
    if path in (routes.REGULAR_DASHBOARD, routes.SIMULATION_DASHBOARD):
        return None
    namespace, _ = routes.split_route(path)
    if namespace == routes.REGULAR_PREFIX:
        return Track.REGULAR
    if namespace == routes.SIMULATION_PREFIX:
        return Track.SIMULATION
    return None


def teardown_controllers(keep: Track | None = None) -> None:
    """Tear down every wizard controller except the one for ``keep``."""

    for track in Track:
        if track is keep:
            continue
        keys = WizardSessionKeys(track.value)
        controller = st.session_state.pop(keys.navigation_controller, None)
        if isinstance(controller, NavigationController):
            controller.teardown()


def route_to_destination(runtime: Runtime, router: QueryParamRouter) -> None:
    with st.spinner("Checking your onboarding status…"):
        resolved = runtime.resolver.resolve_login()
    if resolved.simulation_flag is not None:
        st.session_state[StateKeys.SIMULATION_FLAG] = resolved.simulation_flag
    st.session_state[StateKeys.DESTINATION] = resolved.destination.kind.value
    router.navigate(resolved.destination.path, replace=True)


def logout(runtime: Runtime, router: QueryParamRouter) -> None:
    teardown_controllers()
    runtime.scheduler.cancel_all()
    reset_session(runtime.stores.values(), runtime.cache)
    for key in (
        StateKeys.AUTH_TOKEN,
        StateKeys.AUTH_USER,
        StateKeys.SIMULATION_FLAG,
        StateKeys.DESTINATION,
        StateKeys.ROUTE_HISTORY,
    ):
        st.session_state.pop(key, None)
    runtime.client.set_token(None)
    router.navigate(routes.LOGIN, replace=True)
    # Submitters remember that they loaded; the next sign-in starts from a fresh graph.
    st.session_state.pop(RUNTIME_KEY, None)


def render_login(runtime: Runtime, router: QueryParamRouter) -> None:
    st.subheader("Sign in")
    with st.form("login"):
        email = st.text_input("Email")
        token = st.text_input("Access token", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")
    if not submitted:
        return
    if not email.strip() or not token.strip():
        st.error("Please enter your email and access token.")
        return
    st.session_state[StateKeys.AUTH_USER] = email.strip()
    st.session_state[StateKeys.AUTH_TOKEN] = token.strip()
    runtime.client.set_token(token.strip())
    runtime.cache.prefetch()
    route_to_destination(runtime, router)


def render_getting_started(runtime: Runtime, router: QueryParamRouter) -> None:
    st.subheader("Let's get started")
    st.write("Set up your restaurant, or explore the product with a simulated restaurant first.")
    left, right = st.columns(2)
    with left:
        if st.button("Set up my restaurant", type="primary"):
            router.navigate(routes.join_route(routes.REGULAR_PREFIX, routes.FIRST_REGULAR_SLUG))
    with right:
        if st.button("Try a simulation"):
            outcome = runtime.resolver.activate_simulation_mode()
            if not outcome.activated:
                st.error(outcome.error or "Could not activate simulation mode.")
                return
            if not outcome.refreshed:
                st.warning("Simulation mode is on, but your restaurants could not be refreshed yet.")
            # Only a confirmed ``restaurant_simulation: true`` gets this far.
            st.session_state[StateKeys.SIMULATION_FLAG] = True
            router.navigate(routes.join_route(routes.SIMULATION_PREFIX, routes.FIRST_SIMULATION_SLUG))


def render_dashboard(runtime: Runtime, track: Track) -> None:
    title = "Simulation dashboard" if track is Track.SIMULATION else "Dashboard"
    st.subheader(title)
    status = runtime.cache.get_status(track)
    if status.entity_name:
        st.write(f"Restaurant: **{status.entity_name}**")
    st.info("Onboarding is complete.")


def _mount_controller(runtime: Runtime, router: QueryParamRouter, track: Track) -> NavigationController:
    keys = WizardSessionKeys(track.value)
    controller = st.session_state.get(keys.navigation_controller)
    if isinstance(controller, NavigationController) and not controller.torn_down:
        return controller
    runtime.submitters[track].load()
    controller = NavigationController.for_track(
        track,
        store=runtime.stores[track],
        router=router,
        scheduler=runtime.scheduler,
        settings=SETTINGS,
    )
    st.session_state[keys.navigation_controller] = controller
    return controller


def render_wizard(runtime: Runtime, router: QueryParamRouter, track: Track, path: str) -> None:
    keys = WizardSessionKeys(track.value)
    controller = _mount_controller(runtime, router, track)
    controller.handle_route_change(path)
    if router.current_path != path:
        st.rerun()

    render_notice(controller, keys)
    render_step_tabs(controller, keys)

    step = controller.active_step
    record = runtime.stores[track].get_record(step.step_name)
    existing: dict[str, Any] = record.data if record is not None and isinstance(record.data, dict) else {}
    st.subheader(step.title)
    with st.form(keys.form(step.route_slug)):
        notes = st.text_area("Details", value=str(existing.get("notes", "")))
        submitted = st.form_submit_button("Save and continue", type="primary")
    if submitted:
        try:
            runtime.submitters[track].submit(step.step_name, {"notes": notes})
        except SubmissionFailure as exc:
            st.error(str(exc))
        else:
            st.success(f"{step.title} saved.")

    back, forward = st.columns(2)
    with back:
        st.button(
            "◀ Back",
            key=keys.namespace("back"),
            disabled=controller.active_step_index == 0,
            on_click=controller.navigate_to_previous_step,
        )
    with forward:
        st.button(
            "Next ▶",
            key=keys.namespace("next"),
            disabled=controller.active_step_index >= len(controller.steps) - 1,
            on_click=controller.navigate_to_next_step,
        )
    progress = completion_progress(runtime.stores[track].get(), controller.steps)
    st.caption(f"{progress.percentage}% complete")


def wait_for_timers(scheduler: DeferredScheduler) -> None:
    """Rerun once the next pending timer is due."""

    due_at = scheduler.next_due()
    if due_at is None:
        return
    time.sleep(min(max(due_at - scheduler.now(), 0.0), MAX_TIMER_WAIT_SECONDS))
    st.rerun()


def main() -> None:
    runtime = get_runtime()
    router = QueryParamRouter()
    runtime.scheduler.run_due()
    path = router.current_path

    token = st.session_state.get(StateKeys.AUTH_TOKEN)
    if not token and path != routes.LOGIN:
        router.navigate(routes.LOGIN, replace=True)
        st.rerun()
    if token and runtime.client.token != token:
        runtime.client.set_token(token)

    inject_navigation_style()
    render_header(
        user=st.session_state.get(StateKeys.AUTH_USER),
        simulation_mode=is_simulation_mode(
            st.session_state.get(StateKeys.SIMULATION_FLAG),
            bool(runtime.cache.peek(Track.SIMULATION)),
            routes.is_simulation_route(path),
        ),
    )
    if token:
        st.sidebar.button("◀ Previous page", on_click=router.back, disabled=not router.history)
        st.sidebar.button("Log out", on_click=logout, args=(runtime, router))

    track = _track_for_path(path)
    teardown_controllers(keep=track)
    if path == routes.LOGIN:
        if token:
            route_to_destination(runtime, router)
        else:
            render_login(runtime, router)
    elif path == routes.GETTING_STARTED:
        render_getting_started(runtime, router)
    elif path == routes.REGULAR_DASHBOARD:
        render_dashboard(runtime, Track.REGULAR)
    elif path == routes.SIMULATION_DASHBOARD:
        render_dashboard(runtime, Track.SIMULATION)
    elif track is not None:
        render_wizard(runtime, router, track, path)
    else:
        route_to_destination(runtime, router)

    if router.current_path != path:
        st.rerun()
    wait_for_timers(runtime.scheduler)


st.session_state.setdefault("app_version", APP_VERSION)
main()
