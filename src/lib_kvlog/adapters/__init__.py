"""Adapters: concrete sinks and environment-driven settings."""
