from __future__ import annotations

import html
import logging
from typing import Any, MutableMapping

import streamlit as st

from constants import routes
from constants.keys import QueryKeys, StateKeys
from wizard.navigation.keys import WizardSessionKeys
from wizard.navigation.router import NavigationController
from wizard.step_status import completion_progress

logger = logging.getLogger(__name__)


_NAVIGATION_STYLE = """
<style>
.onboarding-header {
    display: flex;
    align-items: center;
    justify-content: space-between;
    margin-bottom: 0.8rem;
}

.onboarding-badge {
    padding: 0.2rem 0.65rem;
    border-radius: 999px;
    border: 1px solid rgba(245, 158, 11, 0.45);
    background: rgba(251, 191, 36, 0.18);
    font-size: 0.85rem;
    font-weight: 600;
}

.onboarding-tab-marker + div[data-testid="stHorizontalBlock"] button {
    width: 100%;
    border-radius: 12px;
}
</style>
"""


def inject_navigation_style() -> None:
    st.markdown(_NAVIGATION_STYLE, unsafe_allow_html=True)


class QueryParamRouter:
    """Router backed by the ``path`` query parameter.

    Pushed paths are remembered in session state so :meth:`back` can return to
    them; ``replace`` navigations overwrite the current entry instead.
    """

    def __init__(
        self,
        *,
        params: MutableMapping[str, Any] | None = None,
        session: MutableMapping[str, Any] | None = None,
        default_path: str = routes.LOGIN,
    ) -> None:
        self._params = params if params is not None else st.query_params
        self._session = session if session is not None else st.session_state
        self.default_path = default_path

    @property
    def current_path(self) -> str:
        value = self._params.get(QueryKeys.PATH)
        if isinstance(value, list):
            value = value[-1] if value else None
        return str(value) if value else self.default_path

    @property
    def history(self) -> list[str]:
        history = self._session.get(StateKeys.ROUTE_HISTORY)
        if not isinstance(history, list):
            history = []
            self._session[StateKeys.ROUTE_HISTORY] = history
        return history

    def navigate(self, path: str, *, replace: bool = False) -> None:
        current = self.current_path
        if path == current:
            return
        if not replace:
            self.history.append(current)
        self._params[QueryKeys.PATH] = path
        logger.debug("Route %s -> %s (replace=%s)", current, path, replace)

    def back(self) -> bool:
        history = self.history
        if not history:
            return False
        self._params[QueryKeys.PATH] = history.pop()
        return True


def render_step_tabs(controller: NavigationController, keys: WizardSessionKeys) -> None:
    """Render one button per step plus the completion progress bar."""

    statuses = controller.step_statuses()
    progress = completion_progress(controller.store_state(), controller.steps)
    st.progress(progress.percentage / 100, text=f"{progress.completed}/{progress.total} steps completed")
    st.markdown('<div class="onboarding-tab-marker"></div>', unsafe_allow_html=True)
    columns = st.columns(len(statuses))
    for column, status in zip(columns, statuses):
        icon = "✓" if status.completed else ("" if status.accessible else "🔒")
        label = f"{icon} {status.step.title}".strip()
        with column:
            st.button(
                label,
                key=keys.tab(status.step.index),
                type="primary" if status.step.index == controller.active_step_index else "secondary",
                on_click=controller.handle_tab_click,
                args=(status.step.index,),
            )


def render_notice(controller: NavigationController, keys: WizardSessionKeys) -> None:
    notice = controller.notice
    if notice is None:
        return
    if notice.level == "error":
        st.error(notice.message)
    else:
        st.warning(notice.message)
    st.button("Dismiss", key=keys.namespace("dismiss_notice"), on_click=controller.dismiss_notice)


def render_header(*, user: str | None, simulation_mode: bool) -> None:
    """Render the page header with the simulation badge when active."""

    badge = '<span class="onboarding-badge">Simulation mode</span>' if simulation_mode else ""
    who = html.escape(user) if user else ""
    st.markdown(
        f"""
        <div class="onboarding-header">
            <h2>Restaurant onboarding</h2>
            <div>{who} {badge}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


__all__ = [
    "QueryParamRouter",
    "inject_navigation_style",
    "render_header",
    "render_notice",
    "render_step_tabs",
]
