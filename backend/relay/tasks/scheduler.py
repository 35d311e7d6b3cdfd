"""Session Cleanup Scheduler

Purges expired login sessions on a fixed interval using APScheduler.
Runs alongside the application and shares nothing with the publishing
workflow except the database.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from relay.database import Database
from relay.models.base import utcnow
from relay.services.sessions import SessionStore

logger = logging.getLogger(__name__)

JOB_ID = "session_cleanup"


class SessionCleanupScheduler:
    """Periodic purge of expired sessions."""

    def __init__(self, database: Database, interval_seconds: int = 3600):
        self.database = database
        self.interval_seconds = interval_seconds
        self._scheduler = AsyncIOScheduler()
        self._running = False
        self.last_run: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.purged_total = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the scheduler."""
        if self._running:
            return

        self._scheduler.add_job(
            self.run_cleanup,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
        )
        self._scheduler.start()
        self._running = True
        logger.info(f"Session cleanup scheduled every {self.interval_seconds}s")

    async def shutdown(self):
        """Stop the scheduler without waiting for a running purge."""
        if not self._running:
            return

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Session cleanup scheduler stopped")

    async def run_cleanup(self) -> int:
        """Run one purge. Failures are logged, not raised."""
        self.last_run = utcnow()
        try:
            async with self.database.session() as session:
                removed = await SessionStore(session).purge_expired(self.last_run)
        except Exception as e:
            self.last_error = str(e)
            logger.error("Session cleanup failed", extra={"error": str(e)})
            return 0

        self.last_error = None
        self.purged_total += removed
        logger.info(f"Session cleanup removed {removed} expired sessions")
        return removed

    def get_stats(self) -> Dict[str, Any]:
        """Scheduler state for health reporting."""
        return {
            "scheduler_running": self._running,
            "interval_seconds": self.interval_seconds,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_error": self.last_error,
            "purged_total": self.purged_total,
        }
