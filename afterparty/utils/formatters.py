"""Formatters for displaying data in messages."""

from html import escape
from typing import List, Optional

from afterparty.services.projection_service import (
    BucketSummary,
    EventSummary,
    ParticipantView,
    SettlementSummary,
)
from afterparty.utils.constants import PARTICIPANT_ROLE_ORDER, ROLE_LABELS, ParticipantRole


def format_role(role: ParticipantRole) -> str:
    """Role badge, empty for plain attendees."""
    if role == ParticipantRole.ATTENDEE:
        return ""
    label, emoji = ROLE_LABELS[role]
    return f"{emoji} {label}"


def sort_by_role(participants: List[ParticipantView]) -> List[ParticipantView]:
    """Group participants by role, strongest role first; order within a role is kept."""
    return sorted(participants, key=lambda participant: PARTICIPANT_ROLE_ORDER.index(participant.role))


def format_rate(rate: float) -> str:
    return f"{rate * 100:.0f}%"


def format_event_info(
        event: EventSummary,
        buckets: List[BucketSummary],
        summary: Optional[SettlementSummary] = None
) -> str:
    """Format event information with its settlement rounds."""
    message = f"<b>📋 {escape(event.title)}</b>\n\n"
    message += f"<b>Date:</b> {event.event_date.strftime('%d.%m.%Y')}"
    if event.start_time:
        message += f" {event.start_time.strftime('%H:%M')}"
    message += "\n"
    message += f"<b>Location:</b> {escape(event.location)}\n"

    if event.description:
        message += f"<b>Notes:</b> {escape(event.description)}\n"

    if event.settlement_manager or event.settlement_account:
        message += (
            f"<b>Settlement:</b> {escape(event.settlement_manager or '-')} "
            f"/ {escape(event.settlement_account or '-')}\n"
        )

    message += f"\n<b>Participants:</b> {event.participant_count}\n"

    if summary is not None:
        message += (
            f"<b>Settled:</b> {summary.settled_count}/{summary.participant_count} "
            f"({format_rate(summary.settlement_rate)})\n"
        )

    if buckets:
        message += "\n" + format_buckets_list(buckets)

    return message


def format_events_list(events: List[EventSummary]) -> str:
    """Format list of events."""
    if not events:
        return "❌ No events yet"

    message = "<b>📋 Events:</b>\n\n"

    for i, event in enumerate(events, 1):
        message += f"{i}. <b>{escape(event.title)}</b> ({event.event_date.strftime('%d.%m')})"
        message += f" 👥 {event.participant_count}"
        if event.bucket_count > 1:
            message += f" · {event.bucket_count} rounds"
        message += "\n"

    return message


def format_buckets_list(buckets: List[BucketSummary]) -> str:
    """Format settlement rounds with their paid counts."""
    if not buckets:
        return "❌ No settlement rounds"

    message = "<b>💳 Settlement rounds:</b>\n"

    for bucket in buckets:
        marker = "⭐️" if bucket.is_primary else "•"
        message += (
            f"{marker} <b>{escape(bucket.title)}</b>: "
            f"{bucket.settled_count}/{bucket.participant_count} paid "
            f"({format_rate(bucket.settlement_rate)})\n"
        )
        if bucket.manager or bucket.account:
            message += f"   {escape(bucket.manager or '-')} / {escape(bucket.account or '-')}\n"

    return message


def format_participants_list(
        participants: List[ParticipantView],
        bucket: Optional[BucketSummary] = None
) -> str:
    """Format list of participants with paid marks."""
    title = escape(bucket.title) if bucket else "All rounds"

    if not participants:
        return f"<b>👥 {title}</b>\n\n❌ No participants"

    message = f"<b>👥 {title}</b> ({len(participants)})\n\n"

    for i, participant in enumerate(participants, 1):
        icon = "✅" if participant.is_settled else "⬜️"
        message += f"{i}. {icon} {escape(participant.name)}"

        role = format_role(participant.role)
        if role:
            message += f" · {role}"

        message += "\n"

    return message
