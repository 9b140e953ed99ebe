"""Tests for message formatting."""

from datetime import date, datetime, time

from afterparty.services.projection_service import (
    BucketSummary,
    EventSummary,
    ParticipantView,
    SettlementSummary,
)
from afterparty.utils.constants import ParticipantRole
from afterparty.utils.formatters import (
    format_buckets_list,
    format_event_info,
    format_events_list,
    format_participants_list,
    format_rate,
    format_role,
    sort_by_role,
)


def _event(**overrides) -> EventSummary:
    fields = dict(
        id=1,
        title="Meetup <b>",
        event_date=date(2026, 10, 20),
        start_time=time(19, 30),
        location="Seongsu & Co",
        description=None,
        settlement_manager="Kim",
        settlement_account="110-1",
        participant_count=3,
        bucket_count=2,
    )
    fields.update(overrides)
    return EventSummary(**fields)


def _bucket(bucket_id, title, participants, settled, is_primary) -> BucketSummary:
    return BucketSummary(
        id=bucket_id,
        event_id=1,
        title=title,
        manager=None,
        account=None,
        sort_order=bucket_id,
        participant_count=participants,
        settled_count=settled,
        is_primary=is_primary,
    )


def test_format_role_and_rate():
    assert format_role(ParticipantRole.ATTENDEE) == ""
    assert format_role(ParticipantRole.MENTOR) == "👑 Mentor"
    assert format_rate(2 / 3) == "67%"
    assert format_rate(0.0) == "0%"


def test_format_event_info_escapes_html():
    buckets = [_bucket(1, "Round 1", 2, 1, True), _bucket(2, "Karaoke", 2, 0, False)]
    summary = SettlementSummary(event_id=1, participant_count=3, settled_count=1, bucket_count=2)

    text = format_event_info(_event(), buckets, summary)

    assert "Meetup &lt;b&gt;" in text
    assert "Seongsu &amp; Co" in text
    assert "20.10.2026 19:30" in text
    assert "Kim / 110-1" in text
    assert "1/3 (33%)" in text
    assert "⭐️ <b>Round 1</b>: 1/2 paid (50%)" in text


def test_format_event_info_without_time_or_settlement():
    text = format_event_info(_event(start_time=None, settlement_manager=None, settlement_account=None), [])

    assert "20.10.2026\n" in text
    assert "Settlement" not in text


def test_format_events_list():
    assert format_events_list([]) == "❌ No events yet"

    text = format_events_list([_event(), _event(id=2, title="Lunch", bucket_count=1)])
    assert "1. <b>Meetup &lt;b&gt;</b> (20.10) 👥 3 · 2 rounds" in text
    assert "2. <b>Lunch</b> (20.10) 👥 3\n" in text


def test_format_buckets_list_empty():
    assert format_buckets_list([]) == "❌ No settlement rounds"


def test_format_participants_list():
    participants = [
        ParticipantView(
            id=1, event_id=1, name="Alice", role=ParticipantRole.ANGEL,
            is_settled=True, created_at=datetime(2026, 10, 20, 19, 0)
        ),
        ParticipantView(
            id=2, event_id=1, name="Bob", role=ParticipantRole.ATTENDEE,
            is_settled=False, created_at=datetime(2026, 10, 20, 19, 1)
        ),
    ]

    text = format_participants_list(participants, _bucket(1, "Round 1", 2, 1, True))

    assert text.startswith("<b>👥 Round 1</b> (2)")
    assert "1. ✅ Alice · 🪽 Angel" in text
    assert "2. ⬜️ Bob\n" in text
    assert "All rounds" in format_participants_list([])


def test_sort_by_role_keeps_order_within_role():
    def view(pid, name, role):
        return ParticipantView(
            id=pid, event_id=1, name=name, role=role,
            is_settled=False, created_at=datetime(2026, 10, 20, 19, pid)
        )

    participants = [
        view(1, "Dan", ParticipantRole.ATTENDEE),
        view(2, "Hana", ParticipantRole.ANGEL),
        view(3, "Alen", ParticipantRole.MENTOR),
        view(4, "Bea", ParticipantRole.ATTENDEE),
        view(5, "Min", ParticipantRole.BUDDY),
    ]

    assert [p.name for p in sort_by_role(participants)] == ["Alen", "Hana", "Min", "Dan", "Bea"]
