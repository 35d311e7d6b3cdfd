"""SQLAlchemy models for the Relay content backend.

This package contains all database models and Pydantic schemas
for the Relay application.

Models:
    - Post: Authored content exported to the static-site workspace
    - PostVersion: Append-only content snapshots
    - Tag: Shared taxonomy labels
    - User: Authors
    - Session: Login sessions (purged periodically)
    - Media: Uploaded media files

Association Tables:
    - PostTag: Links posts to tags
    - PostMedia: Links posts to media

Usage:
    from relay.models import Post, PostVersion, Tag, User
    from relay.models import PostStatus
    from relay.models.schemas import PostCreate, PostResponse, etc.
"""

# Base and utilities
from .base import Base, TimestampMixin, metadata, utcnow

# Enums
from .enums import PostStatus, SortOrder

# Models
from .user import User, Session
from .post import Post, PostVersion
from .tag import Tag, PostTag
from .media import Media, PostMedia

# Pydantic schemas
from .schemas import (
    # Post schemas
    PostCreate,
    PostUpdate,
    PostTagsReplace,
    PostListParams,
    PostSummaryResponse,
    PostResponse,
    PostListResponse,
    PostVersionResponse,
    # Tag schemas
    TagCreate,
    TagResponse,
    TagWithCount,
    # Media schemas
    MediaResponse,
    # Export schemas
    ExportResult,
    # Common schemas
    HealthResponse,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "metadata",
    "utcnow",
    # Enums
    "PostStatus",
    "SortOrder",
    # Models
    "User",
    "Session",
    "Post",
    "PostVersion",
    "Tag",
    "PostTag",
    "Media",
    "PostMedia",
    # Post schemas
    "PostCreate",
    "PostUpdate",
    "PostTagsReplace",
    "PostListParams",
    "PostSummaryResponse",
    "PostResponse",
    "PostListResponse",
    "PostVersionResponse",
    # Tag schemas
    "TagCreate",
    "TagResponse",
    "TagWithCount",
    # Media schemas
    "MediaResponse",
    # Export schemas
    "ExportResult",
    # Common schemas
    "HealthResponse",
]
