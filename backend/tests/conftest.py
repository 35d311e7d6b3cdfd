"""
Relay Test Fixtures
===================

Pytest fixtures for testing the Relay content backend.
Provides fixtures for settings, a per-test SQLite database, the content
services and a scratch workspace.

Usage:
    Fixtures are automatically discovered by pytest. Simply include them as
    function parameters in your test functions.

Example:
    async def test_create_post(store, author):
        post = await store.create_post("blog", "Hello World", "Body", author)
        assert post.slug == "hello-world"
"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from relay.config import Settings
from relay.database import Database
from relay.models import User
from relay.publishing import ArtifactRenderer, PublishOrchestrator
from relay.services import ContentStore, TagRegistry

from tests.factories import UserFactory


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty static-site workspace."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path: Path, workspace: Path) -> Settings:
    """
    Settings isolated from the environment.

    Uses a SQLite file under the test's temp directory and disables the
    webhook and git sync.
    """
    return Settings(
        _env_file=None,
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'relay.db'}",
        workspace_path=str(workspace),
        git_sync_enabled=False,
        webhook_enabled=False,
        webhook_url="",
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh database with the full schema."""
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session on the test database; services manage their own transactions."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def author(db_session: AsyncSession) -> int:
    """Id of a persisted author."""
    async with db_session.begin():
        user = User(**UserFactory(display_name="Ada Lovelace"))
        db_session.add(user)
        await db_session.flush()
        user_id = user.id
    return user_id


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def store(db_session: AsyncSession) -> ContentStore:
    return ContentStore(db_session)


@pytest.fixture
def tag_registry(db_session: AsyncSession) -> TagRegistry:
    return TagRegistry(db_session)


@pytest.fixture
def renderer(settings: Settings) -> ArtifactRenderer:
    return ArtifactRenderer.from_settings(settings)


@pytest_asyncio.fixture
async def orchestrator(renderer: ArtifactRenderer) -> AsyncGenerator[PublishOrchestrator, None]:
    """Orchestrator without webhook or git sync."""
    orch = PublishOrchestrator(renderer)
    yield orch
    await orch.close()
