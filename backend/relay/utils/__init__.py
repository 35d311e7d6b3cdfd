"""Small pure helpers shared across Relay."""

from .slugify import slugify

__all__ = ["slugify"]
