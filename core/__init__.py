"""Core onboarding logic: tracks, adapters, routing oracle and status polling."""
