"""
Relay Test Data Factories
=========================

Factory classes for generating test data using factory_boy.
Factories build plain keyword dictionaries that feed either the services
(``ContentStore.create_post(**PostPayloadFactory())``) or the SQLAlchemy
models (``User(**UserFactory())``).

Usage:
    from tests.factories import PostPayloadFactory, UserFactory

    # Create a single payload
    payload = PostPayloadFactory()

    # Create with specific attributes
    payload = PostPayloadFactory(collection="notes", tags=["python"])

    # Create a batch
    payloads = PostPayloadFactory.create_batch(5)
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import factory
from factory import fuzzy
from faker import Faker

from relay.models import PostResponse, PostStatus, utcnow

# Initialize Faker with consistent seed for reproducibility
fake = Faker()
Faker.seed(42)


# =============================================================================
# Base Factory Configuration
# =============================================================================

class BaseFactory(factory.Factory):
    """
    Base factory producing keyword dictionaries.
    """

    class Meta:
        model = dict


# =============================================================================
# User Factory
# =============================================================================

class UserFactory(BaseFactory):
    """
    Keyword arguments for a ``User`` row.

    Examples:
        user = User(**UserFactory())
        inactive = User(**UserFactory(inactive=True))
    """

    username = factory.Sequence(lambda n: f"author{n}")
    display_name = factory.LazyFunction(lambda: fake.name())
    email = factory.LazyAttribute(lambda o: f"{o.username}@relay.test")
    is_active = True

    class Params:
        inactive = factory.Trait(is_active=False)


class SessionFactory(BaseFactory):
    """
    Keyword arguments for a ``Session`` row.

    Pass ``user_id``; use the ``expired`` trait for a session already past
    its expiry.
    """

    id = factory.LazyFunction(lambda: uuid4().hex)
    user_id = None
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
    user_agent = factory.LazyFunction(lambda: fake.user_agent())
    ip_address = factory.LazyFunction(lambda: fake.ipv4())

    class Params:
        expired = factory.Trait(
            expires_at=factory.LazyFunction(lambda: utcnow() - timedelta(hours=1)),
        )


# =============================================================================
# Post Factory
# =============================================================================

class PostPayloadFactory(BaseFactory):
    """
    Keyword arguments for ``ContentStore.create_post`` (author excluded).

    Examples:
        post = await store.create_post(author_id=author, **PostPayloadFactory())
    """

    collection = fuzzy.FuzzyChoice(["blog", "portfolio", "notes"])
    title = factory.LazyFunction(lambda: fake.sentence(nb_words=5).rstrip("."))
    body = factory.LazyFunction(lambda: "\n\n".join(fake.paragraphs(nb=3)))
    summary = factory.LazyFunction(lambda: fake.sentence(nb_words=12))
    tags = None


# =============================================================================
# Media Factory
# =============================================================================

class MediaFactory(BaseFactory):
    """
    Keyword arguments for a ``Media`` row. Pass ``created_by``.
    """

    id = factory.LazyFunction(uuid4)
    filename = factory.LazyAttribute(lambda o: f"{o.id.hex}.png")
    original_filename = factory.LazyFunction(lambda: fake.file_name(extension="png"))
    mime_type = "image/png"
    size_bytes = fuzzy.FuzzyInteger(1_000, 500_000)
    width = 800
    height = 600
    storage_path = factory.LazyAttribute(lambda o: f"/media/{o.filename}")
    alt_text = factory.LazyFunction(lambda: fake.sentence(nb_words=4))
    created_by = None


# =============================================================================
# Post Response Factory
# =============================================================================

class PostResponseFactory(factory.Factory):
    """
    Published ``PostResponse`` values for exercising the publishing layer
    without a database.

    Examples:
        post = PostResponseFactory()
        draft = PostResponseFactory(draft=True)
    """

    class Meta:
        model = PostResponse

    id = factory.LazyFunction(uuid4)
    collection = "blog"
    title = "Hello World"
    slug = "hello-world"
    body = "# Hello\n\nFirst post."
    summary = "A greeting"
    status = PostStatus.PUBLISHED
    published_at = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    created_by = 1
    author_name = None
    created_at = datetime(2024, 4, 30, tzinfo=timezone.utc)
    updated_at = datetime(2024, 4, 30, tzinfo=timezone.utc)
    tags = factory.LazyFunction(list)

    class Params:
        draft = factory.Trait(status=PostStatus.DRAFT, published_at=None)
