"""Service for managing settlement buckets."""

import logging
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from afterparty.database.models import BucketParticipant, Event, SettlementBucket
from afterparty.database.queries import mirror_primary_statement, primary_bucket_order, sweep_orphans_statement
from afterparty.services.exceptions import EventNotFoundError, LastBucketError, ValidationError
from afterparty.utils.constants import DEFAULT_BUCKET_TITLE
from afterparty.utils.validators import validate_bucket_title

logger = logging.getLogger(__name__)


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trimmed value, or None when blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class SettlementService:
    """
    Settlement bucket operations.

    Every event keeps at least one bucket. The bucket with the lowest sort
    order (then creation time, then id) is primary, and its manager/account
    are mirrored onto the event row.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_bucket(
            self,
            event_id: int,
            title: str,
            manager: Optional[str] = None,
            account: Optional[str] = None
    ) -> SettlementBucket:
        """
        Append a bucket after the existing ones.

        Args:
            event_id: Event ID
            title: Bucket title
            manager: Person collecting the money
            account: Account to pay into

        Returns:
            Created bucket
        """
        is_valid, error = validate_bucket_title(title)
        if not is_valid:
            raise ValidationError(error)

        await self._lock_event(event_id)

        result = await self.session.execute(
            select(func.max(SettlementBucket.sort_order))
            .where(SettlementBucket.event_id == event_id)
        )
        max_order = result.scalar_one()
        sort_order = 0 if max_order is None else max_order + 1

        bucket = SettlementBucket(
            event_id=event_id,
            title=title.strip(),
            manager=clean_optional(manager),
            account=clean_optional(account),
            sort_order=sort_order
        )
        self.session.add(bucket)
        await self.session.flush()

        if sort_order == 0:
            await self.mirror_primary(event_id)

        return bucket

    async def get_bucket(self, bucket_id: int, event_id: int) -> Optional[SettlementBucket]:
        """Get bucket by ID within an event."""
        result = await self.session.execute(
            select(SettlementBucket)
            .where(
                SettlementBucket.id == bucket_id,
                SettlementBucket.event_id == event_id
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_bucket(
            self,
            bucket_id: int,
            event_id: int,
            title: str,
            manager: Optional[str] = None,
            account: Optional[str] = None
    ) -> bool:
        """
        Update a bucket scoped to its event.

        A bucket that does not belong to the event is left alone.

        Returns:
            True if a bucket was updated
        """
        is_valid, error = validate_bucket_title(title)
        if not is_valid:
            raise ValidationError(error)

        result = await self.session.execute(
            update(SettlementBucket)
            .where(
                SettlementBucket.id == bucket_id,
                SettlementBucket.event_id == event_id
            )
            .values(
                title=title.strip(),
                manager=clean_optional(manager),
                account=clean_optional(account),
                updated_at=func.now()
            )
            .returning(SettlementBucket.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return False

        if await self.get_primary_bucket_id(event_id) == bucket_id:
            await self.mirror_primary(event_id)

        return True

    async def delete_bucket(self, bucket_id: int, event_id: int) -> int:
        """
        Delete a bucket, its links and the participants left without links.

        Raises:
            LastBucketError: if this is the event's only bucket

        Returns:
            ID of the event's primary bucket after deletion
        """
        await self._lock_event(event_id)

        result = await self.session.execute(
            select(func.count(SettlementBucket.id))
            .where(SettlementBucket.event_id == event_id)
        )
        if result.scalar_one() <= 1:
            raise LastBucketError()

        owned = select(SettlementBucket.id).where(
            SettlementBucket.id == bucket_id,
            SettlementBucket.event_id == event_id
        )
        await self.session.execute(
            delete(BucketParticipant)
            .where(BucketParticipant.bucket_id.in_(owned))
            .execution_options(synchronize_session=False)
        )
        deleted = await self.session.execute(
            delete(SettlementBucket)
            .where(
                SettlementBucket.id == bucket_id,
                SettlementBucket.event_id == event_id
            )
            .returning(SettlementBucket.id)
            .execution_options(synchronize_session=False)
        )
        if deleted.scalar_one_or_none() is not None:
            swept = await self.sweep_orphan_participants(event_id)
            logger.info(
                "Deleted settlement bucket %s of event %s, swept %s participants",
                bucket_id, event_id, swept
            )

        await self.mirror_primary(event_id)
        return await self.get_primary_bucket_id(event_id)

    async def resolve_target_bucket(
            self,
            event_id: int,
            requested_bucket_id: Optional[int] = None
    ) -> int:
        """
        Pick the bucket an operation should act on.

        The requested bucket when it belongs to the event, else the primary
        bucket. An event without buckets only exists in damaged historical
        data; it gets a fallback bucket seeded from the event's display fields.
        """
        if requested_bucket_id is not None:
            result = await self.session.execute(
                select(SettlementBucket.id).where(
                    SettlementBucket.id == requested_bucket_id,
                    SettlementBucket.event_id == event_id
                )
            )
            bucket_id = result.scalar_one_or_none()
            if bucket_id is not None:
                return bucket_id

        primary_id = await self.get_primary_bucket_id(event_id)
        if primary_id is not None:
            return primary_id

        event = await self.session.get(Event, event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        logger.warning("Event %s has no settlement buckets, creating a fallback bucket", event_id)
        bucket = SettlementBucket(
            event_id=event_id,
            title=DEFAULT_BUCKET_TITLE,
            manager=event.display_manager,
            account=event.display_account,
            sort_order=0
        )
        self.session.add(bucket)
        await self.session.flush()
        return bucket.id

    async def get_primary_bucket_id(self, event_id: int) -> Optional[int]:
        """ID of the event's primary bucket, if any."""
        result = await self.session.execute(
            select(SettlementBucket.id)
            .where(SettlementBucket.event_id == event_id)
            .order_by(*primary_bucket_order())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mirror_primary(self, event_id: int):
        """Copy the primary bucket's manager/account onto the event."""
        await self.session.execute(mirror_primary_statement(event_id))

    async def sweep_orphan_participants(self, event_id: int) -> int:
        """Delete the event's participants that have no bucket link left."""
        result = await self.session.execute(sweep_orphans_statement(event_id))
        return result.rowcount

    async def _lock_event(self, event_id: int):
        """Lock the event row so bucket counts can't change underneath us."""
        result = await self.session.execute(
            select(Event.id).where(Event.id == event_id).with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise EventNotFoundError(event_id)
