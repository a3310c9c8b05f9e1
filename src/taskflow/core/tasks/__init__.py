"""Task lifecycle: pure state machine and the workflow service around it."""

from taskflow.core.tasks.service import TaskService

__all__ = ["TaskService"]
