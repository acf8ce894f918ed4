from __future__ import annotations

from typing import Any

import streamlit as st

from config import OnboardingSettings
from constants.keys import StateKeys
from core.tracks import Track
from state.onboarding_store import OnboardingStore
from wizard.navigation import NavigationController, WizardSessionKeys
from wizard.navigation import ui


def test_current_path_defaults_to_login() -> None:
    router = ui.QueryParamRouter(params={}, session={})

    assert router.current_path == "/login"
    assert ui.QueryParamRouter(params={"path": ["/a", "/dashboard"]}, session={}).current_path == "/dashboard"


def test_push_and_replace_history() -> None:
    params: dict[str, Any] = {"path": "/login"}
    session: dict[str, Any] = {}
    router = ui.QueryParamRouter(params=params, session=session)

    router.navigate("/getting-started")
    router.navigate("/onboarding/basic-information")
    router.navigate("/onboarding/basic-information")
    router.navigate("/dashboard", replace=True)

    assert params["path"] == "/dashboard"
    assert session[StateKeys.ROUTE_HISTORY] == ["/login", "/getting-started"]
    assert router.back() is True
    assert router.current_path == "/getting-started"
    assert router.back() is True
    assert router.back() is False


def test_router_uses_streamlit_session_by_default() -> None:
    router = ui.QueryParamRouter(params={"path": "/login"})

    router.navigate("/getting-started")

    assert st.session_state[StateKeys.ROUTE_HISTORY] == ["/login"]


def test_controller_drives_query_param_router(scheduler) -> None:
    params: dict[str, Any] = {"path": "/onboarding/expense"}
    router = ui.QueryParamRouter(params=params, session={})
    controller = NavigationController.for_track(
        Track.REGULAR,
        store=OnboardingStore("regular", storage={}),
        router=router,
        scheduler=scheduler,
        settings=OnboardingSettings(),
    )

    controller.mount()

    assert params["path"] == "/onboarding/basic-information"
    assert router.history == []


def test_render_header_shows_simulation_badge(monkeypatch) -> None:
    rendered: list[str] = []
    monkeypatch.setattr(ui.st, "markdown", lambda body, **_: rendered.append(body))

    ui.render_header(user="<chef>", simulation_mode=True)
    ui.render_header(user=None, simulation_mode=False)

    assert "Simulation mode" in rendered[0]
    assert "&lt;chef&gt;" in rendered[0]
    assert "Simulation mode" not in rendered[1]


def test_render_notice_only_when_present(monkeypatch, scheduler) -> None:
    warnings: list[str] = []
    buttons: list[str] = []
    monkeypatch.setattr(ui.st, "warning", warnings.append)
    monkeypatch.setattr(ui.st, "button", lambda label, **_: buttons.append(label))
    router = ui.QueryParamRouter(params={"path": "/onboarding/basic-information"}, session={})
    controller = NavigationController.for_track(
        "regular",
        store=OnboardingStore("regular", storage={}),
        router=router,
        scheduler=scheduler,
        settings=OnboardingSettings(),
    )
    keys = WizardSessionKeys("regular")
    controller.mount()

    ui.render_notice(controller, keys)
    controller.handle_tab_click(2)
    ui.render_notice(controller, keys)

    assert warnings == ["Step 2 is locked until 'Basic Information' is completed."]
    assert buttons == ["Dismiss"]
    assert keys.navigation_controller == "wiz:regular:navigation_controller"
