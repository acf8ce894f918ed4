"""Navigation state machine for the onboarding wizards.

The Streamlit bindings live in :mod:`wizard.navigation.ui` and are imported
explicitly by the app shell.
"""

from __future__ import annotations

from wizard.navigation.auto_advance import AutoAdvanceController
from wizard.navigation.gate import can_navigate_to_tab
from wizard.navigation.keys import WizardSessionKeys
from wizard.navigation.router import NavigationController
from wizard.navigation.url_sync import RouteResolution, UrlSynchronizer

__all__ = [
    "AutoAdvanceController",
    "NavigationController",
    "RouteResolution",
    "UrlSynchronizer",
    "WizardSessionKeys",
    "can_navigate_to_tab",
]
