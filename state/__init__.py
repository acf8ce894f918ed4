"""Session state containers for onboarding data."""

from .onboarding_store import OnboardingState, OnboardingStore, StepRecord

__all__ = ["OnboardingState", "OnboardingStore", "StepRecord"]
