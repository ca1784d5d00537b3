"""Adapters for external providers and host services."""
