"""Domain services for the Relay backend."""

from .content_store import ContentStore, resolve_sort, validate_input
from .publishing import PublishingService, PublishResult
from .sessions import SessionStore
from .tag_registry import TagRegistry

__all__ = [
    "ContentStore",
    "PublishingService",
    "PublishResult",
    "SessionStore",
    "TagRegistry",
    "resolve_sort",
    "validate_input",
]
