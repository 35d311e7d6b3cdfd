"""Publish Orchestrator

Turns a published post into workspace artifacts and dispatches the
best-effort side effects. Only the artifact write decides the outcome of
``publish_post``; the webhook and git sync run as background tasks whose
failures end up in the log and the optional error hook.

The orchestrator never touches the database. Callers flip the post's
status before ``publish_post`` and after ``delete_post``.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional, Set

from relay.config import Settings
from relay.models.schemas import ExportResult, MediaResponse, PostResponse
from relay.publishing.git_sync import GitSync
from relay.publishing.renderer import ArtifactRenderer
from relay.publishing.webhook import WebhookNotifier

logger = logging.getLogger(__name__)

SideEffectErrorHook = Callable[[str, BaseException], None]


class PublishOrchestrator:
    """Publish/unpublish workflow over the workspace."""

    def __init__(
        self,
        renderer: ArtifactRenderer,
        git_sync: Optional[GitSync] = None,
        webhook: Optional[WebhookNotifier] = None,
        on_side_effect_error: Optional[SideEffectErrorHook] = None,
    ):
        self.renderer = renderer
        self.git_sync = git_sync
        self.webhook = webhook
        self.on_side_effect_error = on_side_effect_error
        self._background_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_side_effect_error: Optional[SideEffectErrorHook] = None,
    ) -> "PublishOrchestrator":
        """Build an orchestrator with only the side effects the settings enable."""
        return cls(
            renderer=ArtifactRenderer.from_settings(settings),
            git_sync=GitSync.from_settings(settings) if settings.git_sync_enabled else None,
            webhook=WebhookNotifier.from_settings(settings) if settings.webhook_configured else None,
            on_side_effect_error=on_side_effect_error,
        )

    @property
    def pending_side_effects(self) -> int:
        return len(self._background_tasks)

    async def publish_post(
        self,
        post: PostResponse,
        tag_names: Iterable[str],
        media: Iterable[MediaResponse] = (),
    ) -> ExportResult:
        """Write the post's artifact, then dispatch webhook and git sync.

        Raises:
            OSError: The artifact could not be written.
        """
        result = await self.export_post(post, tag_names, media)
        self.dispatch_side_effects(post)
        return result

    async def export_post(
        self,
        post: PostResponse,
        tag_names: Iterable[str],
        media: Iterable[MediaResponse] = (),
    ) -> ExportResult:
        """Write the post's artifact without notifying anyone.

        Callers that hold a database transaction export inside it and call
        ``dispatch_side_effects`` once it has committed.

        Raises:
            OSError: The artifact could not be written.
        """
        artifact = self.renderer.render(post, tag_names)
        try:
            await asyncio.to_thread(self.renderer.write, artifact)
            media_count = await asyncio.to_thread(self.renderer.count_media, list(media))
        except OSError as e:
            logger.error(
                f"Export failed: {e}",
                extra={"post_id": str(post.id), "path": artifact.path},
            )
            raise

        return ExportResult(path=artifact.path, media_count=media_count)

    def dispatch_side_effects(self, post: PostResponse) -> None:
        """Schedule the webhook and git sync for a published post."""
        if self.webhook is not None:
            self._dispatch("webhook", self.webhook.notify_published(post))
        if self.git_sync is not None:
            self._dispatch("git_sync", self.git_sync.sync(f"publish: {post.title}"))

    async def delete_post(self, post: PostResponse) -> bool:
        """Remove the post's artifact. A missing file is not an error.

        Returns:
            Whether a file was removed.
        """
        return await asyncio.to_thread(self.renderer.remove, post)

    async def drain(self) -> None:
        """Wait for in-flight side effects to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def close(self) -> None:
        """Drain side effects and release the webhook's HTTP session."""
        await self.drain()
        if self.webhook is not None:
            await self.webhook.close()

    def _dispatch(self, name: str, coro: Awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        task.set_name(f"publish:{name}")
        self._background_tasks.add(task)
        task.add_done_callback(lambda t: self._on_side_effect_done(name, t))
        return task

    def _on_side_effect_done(self, name: str, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Side effect {name} was cancelled")
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error(f"{name} failed: {exc}", extra={"side_effect": name})
        if self.on_side_effect_error is not None:
            try:
                self.on_side_effect_error(name, exc)
            except Exception:
                logger.exception(f"Side effect error hook raised for {name}")
