"""Enum definitions for Relay models."""

import enum


class PostStatus(str, enum.Enum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


class SortOrder(str, enum.Enum):
    """Direction for list ordering."""

    ASC = "asc"
    DESC = "desc"
