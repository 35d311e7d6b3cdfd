"""Tests for expired session purging and its scheduler."""

from datetime import timedelta

from sqlalchemy import func, select

from relay.models import Session, utcnow
from relay.services import SessionStore
from relay.tasks import SessionCleanupScheduler

from tests.factories import SessionFactory


async def add_sessions(db_session, author, expired: int, active: int):
    async with db_session.begin():
        for _ in range(expired):
            db_session.add(Session(**SessionFactory(user_id=author, expired=True)))
        for _ in range(active):
            db_session.add(Session(**SessionFactory(user_id=author)))


async def count_sessions(db_session) -> int:
    async with db_session.begin():
        return await db_session.scalar(select(func.count()).select_from(Session))


async def test_purge_expired_removes_only_expired(db_session, author):
    await add_sessions(db_session, author, expired=3, active=2)

    removed = await SessionStore(db_session).purge_expired()

    assert removed == 3
    assert await count_sessions(db_session) == 2


async def test_purge_expired_honours_reference_time(db_session, author):
    await add_sessions(db_session, author, expired=0, active=2)

    removed = await SessionStore(db_session).purge_expired(now=utcnow() + timedelta(days=30))

    assert removed == 2
    assert await count_sessions(db_session) == 0


async def test_purge_with_nothing_expired(db_session):
    assert await SessionStore(db_session).purge_expired() == 0


async def test_cleanup_run_reports_counts(database, db_session, author):
    await add_sessions(db_session, author, expired=2, active=1)
    scheduler = SessionCleanupScheduler(database, interval_seconds=60)

    removed = await scheduler.run_cleanup()

    assert removed == 2
    stats = scheduler.get_stats()
    assert stats["purged_total"] == 2
    assert stats["last_error"] is None
    assert stats["last_run"] is not None


async def test_cleanup_run_logs_and_swallows_failures(database):
    await database.drop_all()
    scheduler = SessionCleanupScheduler(database, interval_seconds=60)

    assert await scheduler.run_cleanup() == 0
    assert scheduler.get_stats()["last_error"]


async def test_scheduler_start_and_shutdown(database):
    scheduler = SessionCleanupScheduler(database, interval_seconds=60)

    await scheduler.start()
    assert scheduler.running
    assert scheduler.get_stats()["scheduler_running"] is True

    await scheduler.shutdown()
    assert not scheduler.running
