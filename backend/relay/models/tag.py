"""Tag model for flexible post labeling."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Tag(Base):
    """Taxonomy labels shared by every collection.

    Tags are identified by a slug derived from their display name, so
    names that differ only in case or punctuation map to the same tag.

    Attributes:
        id: Primary key identifier.
        name: Display name (unique).
        slug: URL-friendly identifier (unique).
        created_at: When the tag was created.
    """

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        doc="Tag display name"
    )
    slug: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        doc="URL-friendly identifier for the tag"
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        nullable=False,
        doc="When the tag was created"
    )

    # Indexes
    __table_args__ = (
        Index("idx_tags_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', slug='{self.slug}')>"


class PostTag(Base):
    """Association table linking posts to tags."""

    __tablename__ = "post_tags"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
        doc="Reference to the post"
    )
    tag_id: Mapped[int] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        doc="Reference to the tag"
    )

    # Indexes
    __table_args__ = (
        Index("idx_post_tags_tag", "tag_id"),
    )

    def __repr__(self) -> str:
        return f"<PostTag(post_id={self.post_id}, tag_id={self.tag_id})>"
