"""Tests for EventService."""

from datetime import date, time

import pytest
from sqlalchemy import func, select

from afterparty.database.models import BucketParticipant, Event, Participant, SettlementBucket
from afterparty.services.event_service import EventService
from afterparty.services.exceptions import ValidationError
from afterparty.services.participant_service import ParticipantService
from afterparty.services.settlement_service import SettlementService
from afterparty.utils.constants import DEFAULT_BUCKET_TITLE


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def test_create_event_creates_default_bucket(session, event):
    loaded = await EventService(session).get_event(event.id)

    assert loaded.title == "October meetup"
    assert loaded.event_date == date(2026, 10, 20)
    assert loaded.start_time == time(19, 30)
    assert loaded.display_manager == "Kim"
    assert loaded.display_account == "110-1"

    assert len(loaded.buckets) == 1
    bucket = loaded.buckets[0]
    assert bucket.title == DEFAULT_BUCKET_TITLE
    assert bucket.sort_order == 0
    assert (bucket.manager, bucket.account) == ("Kim", "110-1")


async def test_create_event_without_time_or_settlement(session):
    event = await EventService(session).create_event(
        title="Lunch",
        event_date="2026-11-01",
        start_time=None,
        location="Office",
        manager="  ",
    )
    loaded = await EventService(session).get_event(event.id)

    assert loaded.start_time is None
    assert loaded.display_manager is None
    assert loaded.buckets[0].manager is None


@pytest.mark.parametrize(
    "fields",
    [
        {"title": " ", "event_date": "2026-10-20", "start_time": None, "location": "Seoul"},
        {"title": "Meetup", "event_date": "", "start_time": None, "location": "Seoul"},
        {"title": "Meetup", "event_date": "10/20/2026", "start_time": None, "location": "Seoul"},
        {"title": "Meetup", "event_date": "2026-10-20", "start_time": "25:00", "location": "Seoul"},
        {"title": "Meetup", "event_date": "2026-10-20", "start_time": None, "location": ""},
    ],
)
async def test_create_event_validation(session, fields):
    with pytest.raises(ValidationError):
        await EventService(session).create_event(**fields)

    assert await _count(session, Event) == 0
    assert await _count(session, SettlementBucket) == 0


async def test_update_event_keeps_settlement_fields(session, event):
    service = EventService(session)

    updated = await service.update_event(
        event.id,
        title="November meetup",
        event_date=date(2026, 11, 3),
        start_time="",
        location="Hongdae",
        description="Bring cash"
    )

    assert updated.title == "November meetup"
    assert updated.start_time is None
    assert updated.description == "Bring cash"
    assert updated.display_manager == "Kim"
    assert await service.update_event(9999, "x", "2026-01-01", None, "y") is None


async def test_delete_event_removes_everything(session, event, resolver):
    second = await SettlementService(session).create_bucket(event.id, "2nd round")
    await ParticipantService(session).add_participants(event.id, ["Alice", "Bob"], resolver=resolver)
    await ParticipantService(session).add_participants(
        event.id, ["Bob"], target_bucket_id=second.id, resolver=resolver
    )

    other = await EventService(session).create_event("Other", "2026-10-21", None, "Gangnam")
    await ParticipantService(session).add_participants(other.id, ["Alice"], resolver=resolver)

    assert await EventService(session).delete_event(event.id) is True

    assert await EventService(session).get_event(event.id) is None
    assert await _count(session, SettlementBucket) == 1
    assert await _count(session, Participant) == 1
    assert await _count(session, BucketParticipant) == 1

    assert await EventService(session).delete_event(event.id) is False
