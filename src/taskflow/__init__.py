"""taskflow - task and team collaboration backend."""

__version__ = "0.1.0"
