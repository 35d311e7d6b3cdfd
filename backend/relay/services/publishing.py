"""Publishing workflow

Composes the content store and the publish orchestrator in the order the
publish lifecycle requires:

- publish: status transition, then artifact export, both inside one
  transaction so a failed export leaves the post a draft. Webhook and git
  sync go out after the commit.
- unpublish: artifact removal for published posts, then the status flip.
  A removal failure is logged and does not block the flip.
- delete: existence check, artifact removal for published posts, then the
  row deletion.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from relay.middleware.error_handler import NotFoundException, StorageException
from relay.models.enums import PostStatus
from relay.models.schemas import BaseSchema, ExportResult, PostResponse
from relay.publishing.orchestrator import PublishOrchestrator
from relay.services.content_store import ContentStore, PostId

logger = logging.getLogger(__name__)


class PublishResult(BaseSchema):
    """A published post and where its artifact was written."""

    post: PostResponse
    export: ExportResult


class PublishingService:
    """Publish lifecycle over one database session."""

    def __init__(self, session: AsyncSession, orchestrator: PublishOrchestrator):
        self.session = session
        self.store = ContentStore(session)
        self.orchestrator = orchestrator

    async def publish(
        self,
        post_id: PostId,
        published_at: Optional[datetime] = None,
    ) -> PublishResult:
        """Publish a post and export its artifact.

        The webhook and git sync are dispatched only after the status change
        has committed. When the session already has a transaction open they
        follow the end of this call instead, and committing is the caller's
        job.

        Raises:
            NotFoundException: Unknown post id.
            StorageException: The artifact could not be written, or the
                status change could not be committed. Either way the post
                stays a draft and no artifact is left behind.
        """
        exported: Optional[PostResponse] = None
        try:
            async with self.store.transaction("publish_post"):
                post = await self.store.publish(post_id, published_at)
                media = await self.store.get_post_media(post.id)
                try:
                    export = await self.orchestrator.export_post(post, post.tags, media)
                except OSError as e:
                    raise StorageException(
                        message=f"Could not export post: {e}",
                        operation="export",
                    ) from e
                exported = post
        except StorageException:
            if exported is not None:
                await self._remove_artifact(exported)
            raise

        self.orchestrator.dispatch_side_effects(post)
        return PublishResult(post=post, export=export)

    async def unpublish(self, post_id: PostId) -> PostResponse:
        """Return a post to draft, removing its artifact if it was published.

        Drafts have no artifact of their own; their path may belong to a
        published post with the same slug, so it is left alone.

        Raises:
            NotFoundException: Unknown post id.
        """
        post = await self._require(post_id)
        if post.status == PostStatus.PUBLISHED:
            await self._remove_artifact(post)
        return await self.store.unpublish(post.id)

    async def delete(self, post_id: PostId) -> None:
        """Delete a post, removing its artifact first when it is published.

        Raises:
            NotFoundException: Unknown post id.
        """
        post = await self._require(post_id)
        if post.status == PostStatus.PUBLISHED:
            await self._remove_artifact(post)
        await self.store.delete_post(post.id)

    async def _require(self, post_id: PostId) -> PostResponse:
        post = await self.store.find_by_id(post_id)
        if post is None:
            raise NotFoundException(
                message="Post not found",
                resource_type="post",
                resource_id=str(post_id),
            )
        return post

    async def _remove_artifact(self, post: PostResponse) -> None:
        try:
            await self.orchestrator.delete_post(post)
        except OSError as e:
            logger.error(
                f"Failed to delete exported file: {e}",
                extra={"post_id": str(post.id)},
            )
