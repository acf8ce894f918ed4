"""Exception types for the onboarding orchestration layer."""

from __future__ import annotations


class OnboardingError(Exception):
    """Base exception for onboarding related issues."""


class GateViolation(OnboardingError):
    """Describes a rejected navigation to a locked step.

    Navigation never raises it; the controller turns it into the user-facing
    notice and keeps ``blocking_step`` for the UI.
    """

    def __init__(self, target_index: int, blocking_step: str | None) -> None:
        self.target_index = target_index
        self.blocking_step = blocking_step
        if blocking_step:
            message = f"Step {target_index} is locked until '{blocking_step}' is completed."
        else:
            message = f"Step {target_index} is not available."
        super().__init__(message)


class SubmissionFailure(OnboardingError):
    """Raised when a step submission could not be stored by the backend."""

    def __init__(self, step_name: str, message: str | None = None) -> None:
        self.step_name = step_name
        super().__init__(message or f"Failed to save {step_name}. Please try again.")


class StatusQueryFailure(OnboardingError):
    """Raised internally when a track status fetch fails.

    Never escapes :class:`state.track_cache.TrackStatusCache`; the failure is
    logged and the track is treated as having no entity.
    """

    def __init__(self, track: str, message: str | None = None) -> None:
        self.track = track
        super().__init__(message or f"Failed to fetch {track} onboarding status.")


class ApiError(OnboardingError):
    """Raised when the onboarding backend returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
