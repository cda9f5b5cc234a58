"""Integrations with the host system."""
