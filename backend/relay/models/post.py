"""Post and PostVersion models for authored content and its history."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint, Enum, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, utcnow
from .enums import PostStatus


class Post(Base, TimestampMixin):
    """A unit of authored content that can be exported to the workspace.

    The slug is derived from the title when the post is created and never
    changes afterwards. Status only moves through publish/unpublish.

    Attributes:
        id: UUID primary key.
        collection: Namespace the post belongs to (e.g. "blog").
        slug: URL-safe identifier, unique only by convention within a collection.
        title: Current title.
        body: Current markdown body.
        summary: Optional short description.
        status: draft or published.
        published_at: First/last publish time; kept after unpublish.
        created_by: Reference to the authoring user.
        created_at: When the post was created.
        updated_at: When the post was last modified.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Unique identifier for the post"
    )
    collection: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        doc="Collection namespace of the post"
    )
    slug: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="URL-friendly identifier derived from the title at creation"
    )
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Post title"
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Markdown body"
    )
    summary: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        doc="Short description used in listings and metadata"
    )
    status: Mapped[PostStatus] = mapped_column(
        Enum(
            PostStatus,
            name="post_status",
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=PostStatus.DRAFT,
        doc="Publication status"
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
        doc="When the post was published; retained after unpublish"
    )
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        doc="Reference to the authoring user"
    )

    __table_args__ = (
        Index("idx_posts_collection_slug", "collection", "slug"),
        Index("idx_posts_status", "status"),
        Index("idx_posts_created_at", "created_at"),
        Index("idx_posts_published_at", "published_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, collection='{self.collection}', slug='{self.slug}')>"


class PostVersion(Base):
    """Immutable snapshot of a post's content at save time.

    Version numbers start at 1 and increase by one per content save.

    Attributes:
        id: Primary key identifier.
        post_id: Owning post.
        version_number: Position of the snapshot in the post's history.
        title: Title snapshot.
        body: Body snapshot.
        summary: Summary snapshot.
        created_by: Author of the save.
        created_at: When the snapshot was recorded.
    """

    __tablename__ = "post_versions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        doc="Reference to the owning post"
    )
    version_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Gapless, strictly increasing version number per post"
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        doc="Author of this snapshot"
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        nullable=False,
        doc="When the snapshot was recorded"
    )

    __table_args__ = (
        UniqueConstraint("post_id", "version_number", name="post_versions_post_number_unique"),
        CheckConstraint("version_number >= 1", name="post_versions_number_positive"),
        Index("idx_post_versions_post", "post_id"),
    )

    def __repr__(self) -> str:
        return f"<PostVersion(post_id={self.post_id}, version={self.version_number})>"
