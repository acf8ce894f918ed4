"""HTTP client for the restaurant onboarding backend.

Every call returns an :class:`ApiResult` instead of raising for HTTP error
statuses so the services above can decide how a failure is surfaced. Only
transport errors that survive the retry policy propagate as
:class:`core.errors.ApiError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from config import OnboardingSettings, SETTINGS
from core.adapters import extract_entity_id
from core.errors import ApiError
from core.tracks import Track
from utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

_SUBMIT_PATHS: dict[Track, str] = {
    Track.REGULAR: "/restaurant/onboarding/",
    Track.SIMULATION: "/simulation/onboarding/",
}
_STATUS_PATHS: dict[Track, str] = {
    Track.REGULAR: "/restaurant/restaurants-onboarding/",
    Track.SIMULATION: "/simulation/simulation-onboarding/",
}
SIMULATION_ACTIVATION_PATH = "/authentication/user/restaurant-simulation/"


@dataclass(frozen=True)
class ApiResult:
    """Outcome of one backend call."""

    success: bool
    data: Any = None
    entity_id: int | str | None = None
    error: str | None = None


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"HTTP {response.status_code}"


class OnboardingApiClient:
    """Thin wrapper around a :class:`requests.Session` with bearer auth."""

    def __init__(
        self,
        *,
        settings: OnboardingSettings | None = None,
        token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or SETTINGS
        self.session = session or requests.Session()
        self.token = token if token is not None else self.settings.api_token
        self._request = retry_with_backoff(max_tries=self.settings.api_max_tries, logger=logger)(
            self._send
        )

    def set_token(self, token: str | None) -> None:
        self.token = token

    def _url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        return self.session.request(
            method,
            self._url(path),
            headers=self._headers(),
            timeout=self.settings.api_timeout,
            **kwargs,
        )

    def _call(self, method: str, path: str, **kwargs: Any) -> ApiResult:
        try:
            response = self._request(method, path, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach the onboarding service: {exc}") from exc
        if response.status_code >= 400:
            message = _error_message(response)
            logger.info("%s %s returned %s: %s", method, path, response.status_code, message)
            return ApiResult(success=False, error=message)
        try:
            data = response.json() if response.content else None
        except ValueError:
            logger.warning("%s %s returned a non-JSON body", method, path)
            data = None
        payload = data.get("data", data) if isinstance(data, Mapping) and "data" in data else data
        entity_id = extract_entity_id(payload)
        if entity_id is None and payload is not data:
            entity_id = extract_entity_id(data)
        return ApiResult(success=True, data=payload, entity_id=entity_id)

    def submit_step(
        self,
        track: Track | str,
        step_name: str,
        payload: Mapping[str, Any],
        *,
        entity_id: int | str | None = None,
    ) -> ApiResult:
        """Store ``payload`` for ``step_name`` on ``track``."""

        body: dict[str, Any] = {"step": step_name, "data": dict(payload)}
        if entity_id is not None:
            body["restaurant_id"] = entity_id
        return self._call("POST", _SUBMIT_PATHS[Track(track)], json=body)

    def load_steps(self, track: Track | str, *, entity_id: int | str | None = None) -> ApiResult:
        """Fetch the step records of ``track``."""

        params = {"restaurant_id": entity_id} if entity_id is not None else None
        return self._call("GET", _SUBMIT_PATHS[Track(track)], params=params)

    def get_status(self, track: Track | str) -> ApiResult:
        """Fetch the restaurants list that backs the track status."""

        return self._call("GET", _STATUS_PATHS[Track(track)])

    def activate_simulation(self) -> ApiResult:
        return self._call("POST", SIMULATION_ACTIVATION_PATH, json={"restaurant_simulation": True})


__all__ = ["ApiResult", "OnboardingApiClient", "SIMULATION_ACTIVATION_PATH"]
