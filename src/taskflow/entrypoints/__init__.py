"""Entrypoints - ways into the core (HTTP API)."""
