"""Outbound connectors (HTTP services, search index)."""
