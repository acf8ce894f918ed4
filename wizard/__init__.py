"""Onboarding wizard: step registries, completion resolver and navigation."""
