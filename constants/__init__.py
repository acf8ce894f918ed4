"""Shared constants: session-state keys and route paths."""
