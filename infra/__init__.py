"""Infrastructure helpers for the onboarding app."""
