from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WizardSessionKeys:
    """Session-state and widget keys scoped to one track's wizard."""

    track: str

    @property
    def prefix(self) -> str:
        return f"wiz:{self.track}:"

    def namespace(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @property
    def navigation_controller(self) -> str:
        return self.namespace("navigation_controller")

    def tab(self, index: int) -> str:
        return self.namespace(f"tab:{index}")

    def form(self, route_slug: str) -> str:
        return self.namespace(f"form:{route_slug}")
