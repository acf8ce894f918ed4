"""Route constants shared by the router, the oracle and the wizard tracks."""

from __future__ import annotations

from typing import Final

LOGIN: Final[str] = "/login"
GETTING_STARTED: Final[str] = "/getting-started"
REGULAR_PREFIX: Final[str] = "/onboarding"
SIMULATION_PREFIX: Final[str] = "/simulation"
REGULAR_DASHBOARD: Final[str] = "/dashboard"
SIMULATION_DASHBOARD: Final[str] = "/simulation/dashboard"
FIRST_REGULAR_SLUG: Final[str] = "basic-information"
FIRST_SIMULATION_SLUG: Final[str] = "basic-information"


def join_route(prefix: str, slug: str) -> str:
    """Return ``prefix/slug`` without doubled separators."""

    return f"{prefix.rstrip('/')}/{slug.strip('/')}"


def split_route(path: str) -> tuple[str, str | None]:
    """Split ``path`` into ``(namespace, last_segment)``.

    ``"/simulation/expenses"`` becomes ``("/simulation", "expenses")`` and a
    bare namespace such as ``"/onboarding"`` yields ``("/onboarding", None)``.
    Query strings and trailing slashes are ignored.
    """

    cleaned = (path or "").split("?", 1)[0].split("#", 1)[0].strip()
    segments = [segment for segment in cleaned.split("/") if segment]
    if not segments:
        return "/", None
    namespace = f"/{segments[0]}"
    if len(segments) == 1:
        return namespace, None
    return namespace, segments[-1]


def is_simulation_route(path: str | None) -> bool:
    """Return ``True`` when ``path`` lives under the simulation namespace."""

    namespace, _ = split_route(path or "")
    return namespace == SIMULATION_PREFIX
