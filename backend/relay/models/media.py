"""Media models for uploaded files referenced by posts."""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Media(Base, TimestampMixin):
    """An uploaded media file stored under the workspace public directory.

    Uploading and resizing happen outside the core; publishing only reads
    these records to account for a post's media.

    Attributes:
        id: UUID primary key.
        filename: Stored file name.
        original_filename: Name of the uploaded file.
        mime_type: Content type of the file.
        size_bytes: File size.
        width: Image width in pixels, if known.
        height: Image height in pixels, if known.
        storage_path: Path relative to the workspace public directory.
        alt_text: Accessibility text.
        created_by: Uploading user.
    """

    __tablename__ = "media"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    storage_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        doc="Path relative to the workspace public directory"
    )
    alt_text: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Media(id={self.id}, storage_path='{self.storage_path}')>"


class PostMedia(Base):
    """Association table linking posts to the media they embed."""

    __tablename__ = "post_media"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    media_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("media.id", ondelete="CASCADE"),
        primary_key=True,
    )

    def __repr__(self) -> str:
        return f"<PostMedia(post_id={self.post_id}, media_id={self.media_id})>"
