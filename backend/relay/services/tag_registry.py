"""Tag Registry

Owns the tag taxonomy: slug uniqueness on creation, listing with usage
counts, and removal that leaves posts untouched.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from relay.database import transaction
from relay.middleware.error_handler import (
    ConflictException,
    StorageException,
    ValidationException,
)
from relay.models.schemas import TagCreate, TagResponse, TagWithCount
from relay.models.tag import PostTag, Tag
from relay.services.content_store import validate_input
from relay.utils.slugify import slugify

logger = logging.getLogger(__name__)


class TagRegistry:
    """Explicit tag management.

    Tag writes follow the same all-or-nothing rules as post writes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_tag(self, name: str) -> TagResponse:
        """Create a tag from its display name.

        The slug check and the insert can race with another writer; the
        unique constraint on ``tags.slug`` decides, and the loser gets the same
        conflict as a sequential duplicate.

        Raises:
            ValidationException: The name is malformed or has no usable slug.
            ConflictException: A tag with the same slug already exists.
        """
        data = validate_input(TagCreate, {"name": name})
        slug = slugify(data.name)
        if not slug:
            raise ValidationException(
                message="Tag name must contain at least one URL-safe character",
                errors=[{"field": "name", "message": "Slug would be empty", "type": "value_error"}],
            )

        try:
            async with transaction(self.session, "create_tag") as session:
                if await self._slug_exists(slug):
                    raise self._conflict()
                tag = Tag(name=data.name, slug=slug)
                session.add(tag)
                await session.flush()
                result = TagResponse.model_validate(tag)
        except StorageException as e:
            if isinstance(e.__cause__, IntegrityError):
                raise self._conflict() from e
            raise

        logger.info(f"Created tag '{result.name}' ({result.slug})", extra={"tag_id": result.id})
        return result

    async def find_by_id(self, tag_id: int) -> Optional[TagWithCount]:
        """Get a tag with its post count, or None."""
        async with transaction(self.session, "find_tag"):
            tags = await self._query(Tag.id == tag_id)
        return tags[0] if tags else None

    async def find_by_slug(self, slug: str) -> Optional[TagWithCount]:
        """Get a tag by slug with its post count, or None."""
        async with transaction(self.session, "find_tag"):
            tags = await self._query(Tag.slug == slug)
        return tags[0] if tags else None

    async def list_tags(self) -> List[TagWithCount]:
        """List all tags by display name, each with its post count."""
        async with transaction(self.session, "list_tags"):
            return await self._query()

    async def delete_tag(self, tag_id: int) -> None:
        """Remove a tag and its post associations; posts are kept.

        Deleting an unknown id is a no-op.
        """
        async with transaction(self.session, "delete_tag") as session:
            await session.execute(delete(PostTag).where(PostTag.tag_id == tag_id))
            result = await session.execute(delete(Tag).where(Tag.id == tag_id))

        if result.rowcount:
            logger.info(f"Deleted tag {tag_id}", extra={"tag_id": tag_id})

    async def _slug_exists(self, slug: str) -> bool:
        return await self.session.scalar(select(Tag.id).where(Tag.slug == slug)) is not None

    @staticmethod
    def _conflict() -> ConflictException:
        return ConflictException(message="Tag already exists", conflicting_field="slug")

    async def _query(self, *conditions) -> List[TagWithCount]:
        rows = await self.session.execute(
            select(Tag, func.count(PostTag.post_id).label("post_count"))
            .outerjoin(PostTag, PostTag.tag_id == Tag.id)
            .where(*conditions)
            .group_by(Tag.id)
            .order_by(Tag.name.asc())
        )
        return [
            TagWithCount.model_validate({**tag.to_dict(), "post_count": count})
            for tag, count in rows
        ]
