"""Utility helpers for the onboarding app."""
