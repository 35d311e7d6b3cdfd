"""Tests for the shared transaction boundary."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from relay.database import transaction
from relay.middleware.error_handler import StorageException
from relay.models import Tag


async def count_tags(db_session) -> int:
    async with transaction(db_session, "count_tags"):
        return await db_session.scalar(select(func.count()).select_from(Tag))


async def test_transaction_commits_on_success(db_session):
    async with transaction(db_session, "insert_tag") as session:
        session.add(Tag(name="Python", slug="python"))

    assert not db_session.in_transaction()
    assert await count_tags(db_session) == 1


async def test_transaction_maps_constraint_violations(db_session):
    with pytest.raises(StorageException) as exc_info:
        async with transaction(db_session, "insert_tag") as session:
            session.add(Tag(name="Python", slug="python"))
            session.add(Tag(name="PYTHON!", slug="python"))

    assert exc_info.value.details == {"operation": "insert_tag"}
    assert isinstance(exc_info.value.__cause__, IntegrityError)
    assert await count_tags(db_session) == 0


async def test_transaction_joins_the_callers_transaction(db_session):
    with pytest.raises(RuntimeError):
        async with db_session.begin():
            async with transaction(db_session, "insert_tag") as session:
                session.add(Tag(name="Python", slug="python"))
            assert db_session.in_transaction()
            raise RuntimeError("caller aborts")

    assert await count_tags(db_session) == 0
