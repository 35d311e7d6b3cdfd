"""Content Store

Transactional persistence of posts, their version history and their tag
associations. This is the only component that writes the posts,
post_versions, tags and post_tags tables.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from relay.database import transaction
from relay.middleware.error_handler import (
    NotFoundException,
    ValidationException,
    format_validation_errors,
)
from relay.models.base import utcnow
from relay.models.enums import PostStatus, SortOrder
from relay.models.media import Media, PostMedia
from relay.models.post import Post, PostVersion
from relay.models.schemas import (
    MediaResponse,
    PostCreate,
    PostListParams,
    PostListResponse,
    PostResponse,
    PostSummaryResponse,
    PostTagsReplace,
    PostUpdate,
    PostVersionResponse,
)
from relay.models.tag import PostTag, Tag
from relay.models.user import User
from relay.utils.slugify import slugify

logger = logging.getLogger(__name__)

PostId = Union[uuid.UUID, str]

# Unrecognized sort/order values silently fall back to these.
DEFAULT_SORT = "created"
DEFAULT_ORDER = SortOrder.DESC

SORT_COLUMNS = {
    "created": Post.created_at,
    "created_at": Post.created_at,
    "updated": Post.updated_at,
    "updated_at": Post.updated_at,
    "published": Post.published_at,
    "published_at": Post.published_at,
    "title": Post.title,
}

AUTHOR_NAME = func.coalesce(User.display_name, User.username).label("author_name")


def resolve_sort(sort: Optional[str], order: Optional[str]):
    """Map sort/order strings to an ORDER BY clause via the allow-list."""
    column = SORT_COLUMNS.get((sort or "").lower(), SORT_COLUMNS[DEFAULT_SORT])
    try:
        direction = SortOrder((order or "").lower())
    except ValueError:
        direction = DEFAULT_ORDER
    return column.asc() if direction is SortOrder.ASC else column.desc()


def parse_post_id(post_id: PostId) -> Optional[uuid.UUID]:
    """Coerce an identifier to a UUID; malformed ids identify nothing."""
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        return None


def validate_input(schema, data: Dict[str, Any]):
    """Validate raw input against a schema, raising ValidationException."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = format_validation_errors(e.errors())
        raise ValidationException(
            message=f"Validation failed: {', '.join(err['message'] for err in errors)}",
            errors=errors,
        ) from e


class ContentStore:
    """Transactional operations over posts, versions and tag associations.

    The store works on a caller-supplied session. Every public operation
    runs inside one transaction: its own when the session is idle, or the
    caller's when one is already open, in which case committing or rolling
    back is left to the caller.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def transaction(self, operation: str):
        """Shorthand for ``relay.database.transaction`` on this store's session."""
        return transaction(self.session, operation)

    # -- Write operations ----------------------------------------------------

    async def create_post(
        self,
        collection: str,
        title: str,
        body: str,
        author_id: int,
        summary: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> PostResponse:
        """Create a draft post together with its version 1 snapshot.

        Tags are attached in the same transaction, creating any that do
        not exist yet.

        Raises:
            ValidationException: Malformed fields or a title with no usable slug.
            StorageException: A database constraint was violated.
        """
        data = validate_input(PostCreate, {
            "collection": collection,
            "title": title,
            "body": body,
            "summary": summary,
            "tags": tags,
        })
        slug = slugify(data.title)
        if not slug:
            raise ValidationException(
                message="Title must contain at least one URL-safe character",
                errors=[{"field": "title", "message": "Slug would be empty", "type": "value_error"}],
            )

        async with self.transaction("create_post") as session:
            post = Post(
                id=uuid.uuid4(),
                collection=data.collection,
                slug=slug,
                title=data.title,
                body=data.body,
                summary=data.summary,
                status=PostStatus.DRAFT,
                created_by=author_id,
            )
            session.add(post)
            await session.flush()

            session.add(PostVersion(
                post_id=post.id,
                version_number=1,
                title=post.title,
                body=post.body,
                summary=post.summary,
                created_by=author_id,
            ))

            if data.tags:
                await self._attach_tags(post.id, data.tags)

            await session.flush()
            result = await self._load_post(post.id)

        logger.info(
            f"Created post {result.collection}/{result.slug}",
            extra={"post_id": str(result.id), "collection": result.collection},
        )
        return result

    async def update_post(
        self,
        post_id: PostId,
        changes: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        author_id: Optional[int] = None,
        autosave: bool = False,
    ) -> PostResponse:
        """Apply a partial update and append a new version.

        Only keys present in ``changes`` are applied. The new version is a
        snapshot of the merged post, numbered one past the current maximum.
        When ``tags`` is given, the whole association set is replaced.
        Autosaves are versioned exactly like manual saves.

        Raises:
            NotFoundException: Unknown post id.
            ValidationException: Malformed fields, or an attempt to set slug/status.
        """
        update = validate_input(PostUpdate, changes or {})
        if tags is not None:
            tags = validate_input(PostTagsReplace, {"tags": tags}).tags

        async with self.transaction("update_post") as session:
            post = await self._get_post_row(post_id)

            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(post, field, value)
            post.updated_at = utcnow()
            await session.flush()

            version_number = await self._next_version_number(post.id)
            session.add(PostVersion(
                post_id=post.id,
                version_number=version_number,
                title=post.title,
                body=post.body,
                summary=post.summary,
                created_by=author_id if author_id is not None else post.created_by,
            ))

            if tags is not None:
                await self._replace_tags(post.id, tags)

            await session.flush()
            result = await self._load_post(post.id)

        logger.info(
            f"Updated post {result.collection}/{result.slug} (version {version_number})",
            extra={"post_id": str(result.id), "version": version_number, "autosave": autosave},
        )
        return result

    async def publish(
        self,
        post_id: PostId,
        published_at: Optional[datetime] = None,
    ) -> PostResponse:
        """Mark a post published. No version is recorded.

        Raises:
            NotFoundException: Unknown post id.
        """
        async with self.transaction("publish") as session:
            post = await self._get_post_row(post_id)
            post.status = PostStatus.PUBLISHED
            post.published_at = published_at or utcnow()
            post.updated_at = utcnow()
            await session.flush()
            result = await self._load_post(post.id)

        logger.info(
            f"Published post {result.collection}/{result.slug}",
            extra={"post_id": str(result.id)},
        )
        return result

    async def unpublish(self, post_id: PostId) -> PostResponse:
        """Return a post to draft, keeping its published timestamp.

        Raises:
            NotFoundException: Unknown post id.
        """
        async with self.transaction("unpublish") as session:
            post = await self._get_post_row(post_id)
            post.status = PostStatus.DRAFT
            post.updated_at = utcnow()
            await session.flush()
            result = await self._load_post(post.id)

        logger.info(
            f"Unpublished post {result.collection}/{result.slug}",
            extra={"post_id": str(result.id)},
        )
        return result

    async def delete_post(self, post_id: PostId) -> None:
        """Delete a post with its versions and associations.

        Deleting an unknown id is a no-op; callers check existence first
        when they need not-found semantics.
        """
        pid = parse_post_id(post_id)
        if pid is None:
            return

        async with self.transaction("delete_post") as session:
            await session.execute(delete(PostVersion).where(PostVersion.post_id == pid))
            await session.execute(delete(PostTag).where(PostTag.post_id == pid))
            await session.execute(delete(PostMedia).where(PostMedia.post_id == pid))
            result = await session.execute(delete(Post).where(Post.id == pid))

        if result.rowcount:
            logger.info(f"Deleted post {pid}", extra={"post_id": str(pid)})

    # -- Read operations -----------------------------------------------------

    async def find_by_id(self, post_id: PostId) -> Optional[PostResponse]:
        """Get a post with its resolved tag names, or None."""
        pid = parse_post_id(post_id)
        if pid is None:
            return None
        async with self.transaction("find_by_id"):
            return await self._load_post(pid)

    async def list_posts(
        self,
        params: Optional[PostListParams] = None,
        **filters: Any,
    ) -> PostListResponse:
        """List posts with optional status/collection filters.

        Accepts either a ``PostListParams`` or the same fields as keyword
        arguments. Sorting only uses allow-listed columns; anything else
        falls back to creation time, descending.
        """
        if params is None:
            params = validate_input(PostListParams, filters)

        conditions = []
        if params.status:
            conditions.append(Post.status == params.status)
        if params.collection:
            conditions.append(Post.collection == params.collection)

        async with self.transaction("list_posts") as session:
            total = await session.scalar(
                select(func.count()).select_from(Post).where(*conditions)
            )
            rows = (await session.execute(
                select(Post, AUTHOR_NAME)
                .outerjoin(User, User.id == Post.created_by)
                .where(*conditions)
                .order_by(resolve_sort(params.sort, params.order), Post.id)
                .limit(params.limit)
                .offset(params.offset)
            )).all()
            tags_by_post = await self._tag_names_for([post.id for post, _ in rows])
            items = [
                self._to_response(post, author_name, tags_by_post[post.id], PostSummaryResponse)
                for post, author_name in rows
            ]

        return PostListResponse(
            items=items,
            total=total or 0,
            limit=params.limit,
            offset=params.offset,
        )

    async def get_versions(self, post_id: PostId) -> List[PostVersionResponse]:
        """Get a post's version history, newest first."""
        pid = parse_post_id(post_id)
        if pid is None:
            return []
        async with self.transaction("get_versions") as session:
            rows = (await session.execute(
                select(PostVersion, AUTHOR_NAME)
                .outerjoin(User, User.id == PostVersion.created_by)
                .where(PostVersion.post_id == pid)
                .order_by(PostVersion.version_number.desc())
            )).all()
            return [
                PostVersionResponse.model_validate({**version.to_dict(), "author_name": author_name})
                for version, author_name in rows
            ]

    async def get_post_tags(self, post_id: PostId) -> List[str]:
        """Get the names of the tags attached to a post."""
        pid = parse_post_id(post_id)
        if pid is None:
            return []
        async with self.transaction("get_post_tags"):
            return (await self._tag_names_for([pid]))[pid]

    async def get_post_media(self, post_id: PostId) -> List[MediaResponse]:
        """Get the media records associated with a post."""
        pid = parse_post_id(post_id)
        if pid is None:
            return []
        async with self.transaction("get_post_media") as session:
            media = (await session.scalars(
                select(Media)
                .join(PostMedia, PostMedia.media_id == Media.id)
                .where(PostMedia.post_id == pid)
                .order_by(Media.created_at)
            )).all()
            return [MediaResponse.model_validate(m) for m in media]

    # -- Tag association -----------------------------------------------------

    async def _attach_tags(self, post_id: uuid.UUID, tag_names: Iterable[str]) -> None:
        """Attach tags by name, creating missing tags; duplicate pairs are ignored."""
        linked = set(
            (await self.session.scalars(
                select(PostTag.tag_id).where(PostTag.post_id == post_id)
            )).all()
        )
        for name in tag_names:
            tag_slug = slugify(name)
            if not tag_slug:
                raise ValidationException(
                    message=f"Tag name '{name}' has no URL-safe characters",
                    errors=[{"field": "tags", "message": "Slug would be empty", "type": "value_error"}],
                )
            tag = await self.session.scalar(select(Tag).where(Tag.slug == tag_slug))
            if tag is None:
                tag = Tag(name=name.strip(), slug=tag_slug)
                self.session.add(tag)
                await self.session.flush()
                logger.debug(f"Created tag '{tag.name}' ({tag.slug})")
            if tag.id in linked:
                continue
            self.session.add(PostTag(post_id=post_id, tag_id=tag.id))
            linked.add(tag.id)
        await self.session.flush()

    async def _replace_tags(self, post_id: uuid.UUID, tag_names: List[str]) -> None:
        await self.session.execute(delete(PostTag).where(PostTag.post_id == post_id))
        if tag_names:
            await self._attach_tags(post_id, tag_names)

    # -- Helpers -------------------------------------------------------------

    async def _get_post_row(self, post_id: PostId) -> Post:
        pid = parse_post_id(post_id)
        post = await self.session.get(Post, pid) if pid is not None else None
        if post is None:
            raise NotFoundException(
                message="Post not found",
                resource_type="post",
                resource_id=str(post_id),
            )
        return post

    async def _next_version_number(self, post_id: uuid.UUID) -> int:
        current = await self.session.scalar(
            select(func.max(PostVersion.version_number)).where(PostVersion.post_id == post_id)
        )
        return (current or 0) + 1

    async def _tag_names_for(self, post_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[str]]:
        names: Dict[uuid.UUID, List[str]] = defaultdict(list)
        if not post_ids:
            return names
        rows = await self.session.execute(
            select(PostTag.post_id, Tag.name)
            .join(Tag, Tag.id == PostTag.tag_id)
            .where(PostTag.post_id.in_(post_ids))
            .order_by(Tag.name)
        )
        for pid, name in rows:
            names[pid].append(name)
        return names

    async def _load_post(self, post_id: uuid.UUID) -> Optional[PostResponse]:
        row = (await self.session.execute(
            select(Post, AUTHOR_NAME)
            .outerjoin(User, User.id == Post.created_by)
            .where(Post.id == post_id)
        )).first()
        if row is None:
            return None
        post, author_name = row
        tags = await self._tag_names_for([post_id])
        return self._to_response(post, author_name, tags[post_id], PostResponse)

    @staticmethod
    def _to_response(post: Post, author_name: Optional[str], tag_names: List[str], schema):
        return schema.model_validate({
            **post.to_dict(),
            "author_name": author_name,
            "tags": tag_names,
        })
