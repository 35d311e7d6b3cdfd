"""Webhook Notifier

Tells an external listener that a post was published. One attempt per
publish, bounded by a timeout; every failure is logged and swallowed.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from relay.config import Settings

logger = logging.getLogger(__name__)

PUBLISHED_EVENT = "post.published"


class WebhookNotifier:
    """Posts JSON event notifications to a configured URL."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        user_agent: str = "Relay/1.0",
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookNotifier":
        return cls(
            url=settings.webhook_url,
            timeout_seconds=settings.webhook_timeout_seconds,
            user_agent=f"{settings.app_name}/{settings.app_version}",
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._session

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def notify(self, event: str, payload: Dict[str, Any]) -> bool:
        """Send one notification. Never raises.

        Returns:
            True when the listener answered with a 2xx status.
        """
        body = {"event": event, **payload}
        try:
            session = await self._get_session()
            async with session.post(self.url, json=body) as response:
                if response.status >= 400:
                    logger.warning(
                        f"Webhook returned HTTP {response.status}",
                        extra={"url": self.url, "event": event, "status": response.status},
                    )
                    return False
        except asyncio.TimeoutError:
            logger.error(
                f"Webhook timed out after {self.timeout_seconds}s",
                extra={"url": self.url, "event": event},
            )
            return False
        except aiohttp.ClientError as e:
            logger.error(f"Webhook failed: {e}", extra={"url": self.url, "event": event})
            return False

        logger.info("Webhook triggered", extra={"url": self.url, "event": event})
        return True

    async def notify_published(self, post) -> bool:
        """Announce a published post."""
        return await self.notify(PUBLISHED_EVENT, {
            "post": {
                "id": str(post.id),
                "title": post.title,
                "collection": post.collection,
                "slug": post.slug,
            },
        })
