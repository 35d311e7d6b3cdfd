"""Slug generation for posts and tags."""

import re

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9_-]")
_HYPHEN_RUNS = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Turn arbitrary text into a lowercase, URL-safe token.

    Whitespace runs become single hyphens, anything outside ``[a-z0-9_-]``
    is dropped, hyphen runs collapse and edge hyphens are trimmed.

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("Node.js")
        'nodejs'
        >>> slugify("hello 世界")
        'hello'

    Returns:
        The slug, which is empty when nothing usable remains. Callers treat
        an empty slug as invalid input.
    """
    slug = _WHITESPACE.sub("-", text.strip().lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")
