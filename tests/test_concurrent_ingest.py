"""Tests for ingestion racing across sessions and failing mid-batch."""

import asyncio
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, OperationalError

from afterparty.database.models import BucketParticipant, Participant
from afterparty.services.event_service import EventService
from afterparty.services.participant_service import ParticipantService


async def _create_event(db) -> int:
    async with db.session() as session:
        event = await EventService(session).create_event(
            title="October meetup",
            event_date=date(2026, 10, 20),
            start_time=None,
            location="Seongsu"
        )
        return event.id


async def _ingest(db, event_id, names) -> int:
    # SQLite lets one writer through and fails the other with "database is locked"
    for attempt in range(10):
        try:
            async with db.session() as session:
                return await ParticipantService(session).add_participants(event_id, names)
        except OperationalError:
            await asyncio.sleep(0.05 * (attempt + 1))
    raise AssertionError("ingestion kept failing on lock errors")


async def _counts(db, event_id):
    async with db.session() as session:
        participants = (await session.execute(
            select(func.lower(Participant.name)).where(Participant.event_id == event_id)
        )).scalars().all()
        links = (await session.execute(
            select(func.count())
            .select_from(BucketParticipant)
            .join(Participant, Participant.id == BucketParticipant.participant_id)
            .where(Participant.event_id == event_id)
        )).scalar_one()
    return sorted(participants), links


async def test_overlapping_batches_in_two_sessions(db):
    event_id = await _create_event(db)

    first, second = await asyncio.gather(
        _ingest(db, event_id, ["Alice", "Bob", "Carol", "Dave"]),
        _ingest(db, event_id, ["dave", "Carol", "bob", "Erin"]),
    )

    names, links = await _counts(db, event_id)
    assert names == ["alice", "bob", "carol", "dave", "erin"]
    assert links == 5
    assert first + second == 5


async def test_batch_failing_midway_leaves_nothing(db):
    event_id = await _create_event(db)
    async with db.engine.begin() as connection:
        await connection.exec_driver_sql(
            "CREATE TRIGGER reject_mallory BEFORE INSERT ON participants "
            "WHEN lower(NEW.name) = 'mallory' "
            "BEGIN SELECT RAISE(ABORT, 'rejected'); END"
        )

    with pytest.raises(DBAPIError):
        async with db.session() as session:
            await ParticipantService(session).add_participants(
                event_id, ["Zed", "Mallory", "Alice"]
            )

    assert await _counts(db, event_id) == ([], 0)

    assert await _ingest(db, event_id, ["Alice", "Zed"]) == 2
    assert await _counts(db, event_id) == (["alice", "zed"], 2)
