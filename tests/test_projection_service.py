"""Tests for read projections."""

from datetime import date

import pytest
from sqlalchemy import delete

from afterparty.database.models import BucketParticipant
from afterparty.services.event_service import EventService
from afterparty.services.participant_service import ParticipantService
from afterparty.services.projection_service import ProjectionService
from afterparty.services.settlement_service import SettlementService


@pytest.fixture
async def two_rounds(session, event, resolver):
    """Alice and Bob in round 1, Bob and Carol in round 2."""
    second = await SettlementService(session).create_bucket(event.id, "2nd round", manager="Lee")
    participants = ParticipantService(session)
    await participants.add_participants(event.id, ["Alice", "Bob"], resolver=resolver)
    await participants.add_participants(
        event.id, ["Bob", "Carol"], target_bucket_id=second.id, resolver=resolver
    )
    return second


async def test_list_events(session, event, two_rounds):
    later = await EventService(session).create_event("Later", "2026-12-01", None, "Itaewon")

    events = await ProjectionService(session).list_events()

    assert [e.id for e in events] == [later.id, event.id]
    summary = events[1]
    assert summary.participant_count == 3
    assert summary.bucket_count == 2
    assert (summary.settlement_manager, summary.settlement_account) == ("Kim", "110-1")
    assert events[0].participant_count == 0


async def test_list_events_by_date(session, event):
    await EventService(session).create_event("Later", "2026-12-01", None, "Itaewon")

    events = await ProjectionService(session).list_events(event_date=date(2026, 10, 20))

    assert [e.id for e in events] == [event.id]
    assert await ProjectionService(session).list_events(event_date=date(2030, 1, 1)) == []


async def test_get_event_summary(session, event, two_rounds):
    projections = ProjectionService(session)

    summary = await projections.get_event_summary(event.id)

    assert summary.title == "October meetup"
    assert summary.participant_count == 3
    assert await projections.get_event_summary(404) is None


async def test_list_participants_overall_and_per_bucket(session, event, two_rounds):
    participants = ParticipantService(session)
    bob = await participants.get_participant_by_name(event.id, "Bob")
    await participants.set_settled(bob.id, event.id, True, bucket_id=two_rounds.id)

    projections = ProjectionService(session)

    overall = {p.name: p for p in (await projections.list_participants([event.id]))[event.id]}
    assert set(overall) == {"Alice", "Bob", "Carol"}
    assert overall["Bob"].is_settled is False
    assert overall["Bob"].bucket_count == 2

    in_second = (await projections.list_participants([event.id], bucket_id=two_rounds.id))[event.id]
    assert [p.name for p in in_second] == ["Bob", "Carol"]
    assert in_second[0].is_settled is True
    assert in_second[0].settled_at is not None
    assert in_second[0].bucket_count == 2
    assert in_second[1].is_settled is False


async def test_list_participants_keyword(session, event, two_rounds, resolver):
    await ParticipantService(session).add_participants(event.id, ["100%_club"], resolver=resolver)
    projections = ProjectionService(session)

    found = (await projections.list_participants([event.id], keyword=" AL "))[event.id]
    assert [p.name for p in found] == ["Alice"]

    # LIKE wildcards are matched literally
    found = (await projections.list_participants([event.id], keyword="%_"))[event.id]
    assert [p.name for p in found] == ["100%_club"]


async def test_list_participants_groups_by_event(session, event, two_rounds, resolver):
    other = await EventService(session).create_event("Other", "2026-10-21", None, "Gangnam")
    await ParticipantService(session).add_participants(other.id, ["alice"], resolver=resolver)

    grouped = await ProjectionService(session).list_participants([event.id, other.id, 404])

    assert len(grouped[event.id]) == 3
    assert [p.name for p in grouped[other.id]] == ["alice"]
    assert grouped[404] == []
    assert await ProjectionService(session).list_participants([]) == {}


async def test_participants_without_links_are_hidden(session, event, two_rounds):
    await session.execute(delete(BucketParticipant))

    projections = ProjectionService(session)
    assert (await projections.list_participants([event.id]))[event.id] == []
    assert (await projections.get_event_summary(event.id)).participant_count == 0


async def test_list_buckets(session, event, two_rounds):
    participants = ParticipantService(session)
    alice = await participants.get_participant_by_name(event.id, "Alice")
    await participants.set_settled(alice.id, event.id, True)

    buckets = await ProjectionService(session).list_buckets(event.id)

    assert [b.title for b in buckets] == ["Round 1", "2nd round"]
    assert [b.is_primary for b in buckets] == [True, False]
    assert (buckets[0].participant_count, buckets[0].settled_count) == (2, 1)
    assert buckets[0].settlement_rate == 0.5
    assert (buckets[1].participant_count, buckets[1].settled_count) == (2, 0)
    assert buckets[1].manager == "Lee"


async def test_empty_bucket_rate(session, event):
    buckets = await ProjectionService(session).list_buckets(event.id)

    assert buckets[0].participant_count == 0
    assert buckets[0].settlement_rate == 0.0


async def test_settlement_summary(session, event, two_rounds):
    participants = ParticipantService(session)
    for name in ("Alice", "Bob"):
        participant = await participants.get_participant_by_name(event.id, name)
        await participants.set_settled(participant.id, event.id, True)
    carol = await participants.get_participant_by_name(event.id, "Carol")
    await participants.set_settled(carol.id, event.id, False)

    summary = await ProjectionService(session).get_settlement_summary(event.id)

    assert summary.participant_count == 3
    assert summary.settled_count == 2
    assert summary.bucket_count == 2
    assert summary.settlement_rate == pytest.approx(2 / 3)


async def test_aggregate_settled_at_needs_every_link(session, event, two_rounds):
    participants = ParticipantService(session)
    projections = ProjectionService(session)
    bob = await participants.get_participant_by_name(event.id, "Bob")

    await participants.set_settled(bob.id, event.id, True, bucket_id=two_rounds.id)
    overall = {p.name: p for p in (await projections.list_participants([event.id]))[event.id]}
    assert overall["Bob"].settled_at is None

    await participants.set_settled(bob.id, event.id, True)
    overall = {p.name: p for p in (await projections.list_participants([event.id]))[event.id]}
    assert overall["Bob"].is_settled is True
    assert overall["Bob"].settled_at is not None
    assert overall["Alice"].settled_at is None
