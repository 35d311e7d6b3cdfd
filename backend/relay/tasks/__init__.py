"""Background maintenance tasks."""

from .scheduler import SessionCleanupScheduler

__all__ = ["SessionCleanupScheduler"]
