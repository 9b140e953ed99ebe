"""Service for managing events."""

import logging
from datetime import date, time
from typing import Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from afterparty.database.models import BucketParticipant, Event, Participant, SettlementBucket
from afterparty.services.exceptions import ValidationError
from afterparty.services.settlement_service import SettlementService, clean_optional
from afterparty.utils.constants import DEFAULT_BUCKET_TITLE
from afterparty.utils.validators import (
    parse_event_date,
    parse_start_time,
    validate_event_title,
    validate_location,
)

logger = logging.getLogger(__name__)


def _validate_event_fields(
        title: str,
        event_date,
        start_time,
        location: str
) -> Tuple[date, Optional[time]]:
    """Validate event fields before any I/O; returns parsed date and time."""
    is_valid, error = validate_event_title(title)
    if not is_valid:
        raise ValidationError(error)

    is_valid, parsed_date, error = parse_event_date(event_date)
    if not is_valid:
        raise ValidationError(error)

    is_valid, parsed_time, error = parse_start_time(start_time)
    if not is_valid:
        raise ValidationError(error)

    is_valid, error = validate_location(location)
    if not is_valid:
        raise ValidationError(error)

    return parsed_date, parsed_time


class EventService:
    """Service for event operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(
            self,
            title: str,
            event_date,
            start_time,
            location: str,
            description: Optional[str] = None,
            manager: Optional[str] = None,
            account: Optional[str] = None
    ) -> Event:
        """
        Create an event together with its first settlement bucket.

        Args:
            title: Event title
            event_date: date or "YYYY-MM-DD"
            start_time: time, "HH:MM" or empty
            location: Where it happens
            description: Optional free text
            manager: Settlement manager of the first bucket
            account: Settlement account of the first bucket

        Returns:
            Created event
        """
        parsed_date, parsed_time = _validate_event_fields(title, event_date, start_time, location)

        event = Event(
            title=title.strip(),
            event_date=parsed_date,
            start_time=parsed_time,
            location=location.strip(),
            description=clean_optional(description),
            display_manager=clean_optional(manager),
            display_account=clean_optional(account)
        )
        self.session.add(event)
        await self.session.flush()

        await SettlementService(self.session).create_bucket(
            event.id,
            DEFAULT_BUCKET_TITLE,
            manager=manager,
            account=account
        )

        logger.info("Created event %s '%s'", event.id, event.title)
        return event

    async def get_event(self, event_id: int) -> Optional[Event]:
        """Get event by ID with its buckets loaded."""
        result = await self.session.execute(
            select(Event)
            .where(Event.id == event_id)
            .options(selectinload(Event.buckets))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_event(
            self,
            event_id: int,
            title: str,
            event_date,
            start_time,
            location: str,
            description: Optional[str] = None
    ) -> Optional[Event]:
        """
        Update event details.

        Settlement manager/account live on the buckets and are not touched.

        Returns:
            Updated event or None if not found
        """
        parsed_date, parsed_time = _validate_event_fields(title, event_date, start_time, location)

        event = await self.get_event(event_id)
        if not event:
            return None

        event.title = title.strip()
        event.event_date = parsed_date
        event.start_time = parsed_time
        event.location = location.strip()
        event.description = clean_optional(description)
        await self.session.flush()

        return event

    async def delete_event(self, event_id: int) -> bool:
        """
        Delete an event with its buckets, links and participants.

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            select(Event.id).where(Event.id == event_id).with_for_update()
        )
        if result.scalar_one_or_none() is None:
            return False

        bucket_ids = select(SettlementBucket.id).where(SettlementBucket.event_id == event_id)
        await self.session.execute(
            delete(BucketParticipant)
            .where(BucketParticipant.bucket_id.in_(bucket_ids))
            .execution_options(synchronize_session=False)
        )
        for model in (Participant, SettlementBucket):
            await self.session.execute(
                delete(model)
                .where(model.event_id == event_id)
                .execution_options(synchronize_session=False)
            )
        await self.session.execute(
            delete(Event)
            .where(Event.id == event_id)
            .execution_options(synchronize_session=False)
        )

        logger.info("Deleted event %s", event_id)
        return True
