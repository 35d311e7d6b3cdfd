"""Session store maintenance."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from relay.database import transaction
from relay.models.base import utcnow
from relay.models.user import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Login session records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete sessions that expired before ``now``.

        Returns:
            Number of sessions removed.
        """
        cutoff = now or utcnow()
        async with transaction(self.session, "purge_sessions") as session:
            result = await session.execute(delete(Session).where(Session.expires_at < cutoff))

        if result.rowcount:
            logger.info(f"Purged {result.rowcount} expired sessions")
        return result.rowcount or 0
