"""Adapters - Infrastructure implementations of core interfaces.

Adapters are organized by backend:
- memory/: In-process repositories used by the default app and tests
"""

from .memory import InMemoryStore

__all__ = ["InMemoryStore"]
