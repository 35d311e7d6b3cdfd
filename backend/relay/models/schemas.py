"""Pydantic schemas for store inputs and plain result representations."""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import PostStatus


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


class TimestampSchema(BaseSchema):
    """Schema mixin for timestamp fields."""

    created_at: datetime
    updated_at: datetime


# =============================================================================
# POST SCHEMAS
# =============================================================================

TagName = Annotated[str, Field(min_length=1, max_length=50)]
TagNames = Annotated[list[TagName], Field(max_length=10)]


class PostCreate(BaseSchema):
    """Schema for creating a new post."""

    # Markdown is whitespace-sensitive.
    model_config = ConfigDict(str_strip_whitespace=False)

    collection: str = Field(
        ..., min_length=2, max_length=30, pattern=r"^[A-Za-z0-9]+$",
        description="Collection namespace",
    )
    title: str = Field(..., min_length=1, max_length=200, description="Post title")
    body: str = Field(..., min_length=1, description="Markdown body")
    summary: Optional[str] = Field(None, max_length=500, description="Short description")
    tags: Optional[TagNames] = Field(None, description="Tag names to attach")


class PostUpdate(BaseSchema):
    """Schema for a partial post update.

    Only fields explicitly supplied are applied. Slug and status are not
    accepted here.
    """

    model_config = ConfigDict(str_strip_whitespace=False, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    body: Optional[str] = Field(None, min_length=1)
    summary: Optional[str] = Field(None, max_length=500)

    @field_validator("title", "body")
    @classmethod
    def reject_null(cls, v: Optional[str]) -> str:
        """Title and body may be omitted but never cleared."""
        if v is None:
            raise ValueError("Field may be omitted but not set to null")
        return v


class PostTagsReplace(BaseSchema):
    """Full replacement set of tag names for a post."""

    tags: TagNames


class PostListParams(BaseSchema):
    """Filtering, pagination and sort options for listing posts.

    Sort and order are plain strings; unknown values fall back to the
    defaults when the query is built.
    """

    status: Optional[PostStatus] = None
    collection: Optional[str] = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    sort: Optional[str] = "created"
    order: Optional[str] = "desc"


class PostSummaryResponse(TimestampSchema):
    """Post representation used in listings."""

    id: uuid.UUID
    collection: str
    slug: str
    title: str
    summary: Optional[str] = None
    status: PostStatus
    published_at: Optional[datetime] = None
    created_by: int
    author_name: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class PostResponse(PostSummaryResponse):
    """Full post representation."""

    body: str


class PostListResponse(BaseSchema):
    """Paginated list of posts."""

    items: list[PostSummaryResponse]
    total: int
    limit: int
    offset: int


class PostVersionResponse(BaseSchema):
    """A single entry of a post's version history."""

    id: int
    post_id: uuid.UUID
    version_number: int
    title: str
    body: str
    summary: Optional[str] = None
    created_by: int
    author_name: Optional[str] = None
    created_at: datetime


# =============================================================================
# TAG SCHEMAS
# =============================================================================

class TagCreate(BaseSchema):
    """Schema for creating a tag explicitly."""

    name: str = Field(..., min_length=1, max_length=50, description="Tag display name")


class TagResponse(BaseSchema):
    """Tag representation."""

    id: int
    name: str
    slug: str
    created_at: datetime


class TagWithCount(TagResponse):
    """Tag annotated with the number of posts carrying it."""

    post_count: int = 0


# =============================================================================
# MEDIA SCHEMAS
# =============================================================================

class MediaResponse(BaseSchema):
    """Media file associated with a post."""

    id: uuid.UUID
    filename: str
    mime_type: str
    storage_path: str
    alt_text: Optional[str] = None


# =============================================================================
# EXPORT SCHEMAS
# =============================================================================

class ExportResult(BaseSchema):
    """Outcome of exporting a published post to the workspace."""

    path: str = Field(..., description="Workspace-relative path of the artifact")
    media_count: int = Field(default=0, ge=0, description="Media files accounted for")


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str
    version: str
    checks: dict[str, str] = Field(default_factory=dict)
