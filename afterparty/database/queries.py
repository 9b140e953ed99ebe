"""Query builders shared by the schema migration and the services."""

from typing import Optional

from sqlalchemy import delete, exists, select, update

from afterparty.database.models import BucketParticipant, Event, Participant, SettlementBucket


def primary_bucket_order():
    """Ordering that puts the primary bucket first."""
    return (
        SettlementBucket.sort_order.asc(),
        SettlementBucket.created_at.asc(),
        SettlementBucket.id.asc(),
    )


def primary_bucket_value(column, event_id_column):
    """Scalar subquery selecting `column` of the primary bucket of an event."""
    return (
        select(column)
        .where(SettlementBucket.event_id == event_id_column)
        .order_by(*primary_bucket_order())
        .limit(1)
        .scalar_subquery()
    )


def mirror_primary_statement(event_id: Optional[int] = None):
    """
    Copy the primary bucket's manager/account onto the event row.

    Applies to every event when event_id is None.
    """
    stmt = (
        update(Event)
        .values(
            display_manager=primary_bucket_value(SettlementBucket.manager, Event.id),
            display_account=primary_bucket_value(SettlementBucket.account, Event.id),
            updated_at=Event.updated_at,
        )
        .execution_options(synchronize_session=False)
    )
    if event_id is not None:
        stmt = stmt.where(Event.id == event_id)
    return stmt


def unlinked_participant_filter():
    """WHERE clause matching participants without any bucket link."""
    return ~exists().where(BucketParticipant.participant_id == Participant.id)


def sweep_orphans_statement(event_id: Optional[int] = None):
    """Delete participants left without any bucket link."""
    stmt = (
        delete(Participant)
        .where(unlinked_participant_filter())
        .execution_options(synchronize_session=False)
    )
    if event_id is not None:
        stmt = stmt.where(Participant.event_id == event_id)
    return stmt
