"""Clients for the services the onboarding wizard talks to."""
