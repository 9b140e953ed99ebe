"""Service for managing participants and their settlement links."""

from typing import Iterable, List, Mapping, NamedTuple, Optional, Union

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from afterparty.database.base import insert_ignoring_conflicts
from afterparty.database.models import BucketParticipant, Participant, SettlementBucket
from afterparty.services.exceptions import ValidationError
from afterparty.services.settlement_service import SettlementService
from afterparty.utils.constants import MAX_BATCH_SIZE, ParticipantRole
from afterparty.utils.roles import RoleResolver


class ParticipantEntry(NamedTuple):
    """Name with an optional explicit role."""
    name: str
    role: Optional[ParticipantRole] = None


EntryInput = Union[str, ParticipantEntry, Mapping[str, str]]


def normalize_entries(entries: Iterable[EntryInput]) -> List[ParticipantEntry]:
    """
    Trim names, drop empties, de-duplicate case-insensitively and cap the batch.

    The first occurrence of a name wins.
    """
    normalized = []
    seen = set()

    for entry in entries:
        if isinstance(entry, str):
            name, role = entry, None
        elif isinstance(entry, ParticipantEntry):
            name, role = entry.name, entry.role
        else:
            name, role = entry.get("name", ""), entry.get("role")

        name = (name or "").strip()
        key = name.lower()
        if not name or key in seen:
            continue

        if role:
            try:
                role = ParticipantRole(role)
            except ValueError:
                raise ValidationError(f"❌ Unknown role: {role}") from None

        seen.add(key)
        normalized.append(ParticipantEntry(name, role or None))
        if len(normalized) >= MAX_BATCH_SIZE:
            break

    return normalized


class ParticipantService:
    """Service for participant operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_participants(
            self,
            event_id: int,
            entries: Iterable[EntryInput],
            target_bucket_id: Optional[int] = None,
            resolver: Optional[RoleResolver] = None
    ) -> int:
        """
        Add names to a settlement bucket, creating participants as needed.

        Re-adding a known name reuses the participant; re-adding a name that is
        already in the bucket changes nothing. The whole batch runs in the
        caller's transaction.

        Args:
            event_id: Event ID
            entries: Names, ParticipantEntry tuples or {"name", "role"} mappings
            target_bucket_id: Bucket to add to (primary bucket when omitted)
            resolver: Role resolver for entries without a role

        Returns:
            Number of bucket links actually created
        """
        normalized = normalize_entries(entries)
        if not normalized:
            return 0

        resolver = resolver or RoleResolver()
        bucket_id = await SettlementService(self.session).resolve_target_bucket(
            event_id, target_bucket_id
        )
        dialect_name = self.session.bind.dialect.name

        inserted_links = 0
        # Same lock order in every batch so concurrent batches cannot deadlock
        for entry in sorted(normalized, key=lambda entry: entry.name.lower()):
            role = entry.role or resolver.resolve(entry.name)
            participant_id = await self._insert_or_get(dialect_name, event_id, entry.name, role)

            if entry.role and entry.role != ParticipantRole.ATTENDEE:
                await self._upgrade_default_role(participant_id, entry.role)

            result = await self.session.execute(
                insert_ignoring_conflicts(dialect_name, BucketParticipant)
                .values(bucket_id=bucket_id, participant_id=participant_id, is_settled=False)
                .returning(BucketParticipant.participant_id)
            )
            inserted_links += len(result.all())

        return inserted_links

    async def get_participant(self, participant_id: int, event_id: int) -> Optional[Participant]:
        """Get participant by ID within an event."""
        result = await self.session.execute(
            select(Participant)
            .where(
                Participant.id == participant_id,
                Participant.event_id == event_id
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_participant_by_name(self, event_id: int, name: str) -> Optional[Participant]:
        """Get participant by case-insensitive name."""
        result = await self.session.execute(
            select(Participant)
            .where(
                Participant.event_id == event_id,
                func.lower(Participant.name) == func.lower(name.strip())
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def remove_participant(
            self,
            participant_id: int,
            event_id: int,
            bucket_id: Optional[int] = None
    ) -> bool:
        """
        Remove a participant from one bucket, or from every bucket of the event.

        A participant left without links is deleted.

        Returns:
            True if any link was removed
        """
        result = await self.session.execute(
            delete(BucketParticipant)
            .where(
                BucketParticipant.participant_id == participant_id,
                BucketParticipant.bucket_id.in_(self._event_buckets(event_id, bucket_id))
            )
            .execution_options(synchronize_session=False)
        )
        removed = result.rowcount > 0

        await SettlementService(self.session).sweep_orphan_participants(event_id)
        return removed

    async def set_settled(
            self,
            participant_id: int,
            event_id: int,
            is_settled: bool,
            bucket_id: Optional[int] = None
    ) -> int:
        """
        Mark a participant as paid or unpaid.

        With a bucket only that link changes; without one every link of the
        participant in the event changes. settled_at is stamped when a link
        becomes settled and cleared when it becomes unsettled.

        Returns:
            Number of links updated
        """
        if is_settled:
            settled_at = case(
                (BucketParticipant.is_settled.is_(True), BucketParticipant.settled_at),
                else_=func.now()
            )
        else:
            settled_at = None

        result = await self.session.execute(
            update(BucketParticipant)
            .where(
                BucketParticipant.participant_id == participant_id,
                BucketParticipant.bucket_id.in_(self._event_buckets(event_id, bucket_id))
            )
            .values(is_settled=is_settled, settled_at=settled_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def _insert_or_get(
            self,
            dialect_name: str,
            event_id: int,
            name: str,
            role: ParticipantRole
    ) -> int:
        """Insert the participant unless the name exists; return its ID."""
        result = await self.session.execute(
            insert_ignoring_conflicts(dialect_name, Participant)
            .values(event_id=event_id, name=name, role=role.value)
            .returning(Participant.id)
        )
        participant_id = result.scalar_one_or_none()
        if participant_id is not None:
            return participant_id

        result = await self.session.execute(
            select(Participant.id).where(
                Participant.event_id == event_id,
                func.lower(Participant.name) == func.lower(name)
            )
        )
        return result.scalar_one()

    async def _upgrade_default_role(self, participant_id: int, role: ParticipantRole):
        """Replace the default role with an explicit one; never downgrade."""
        await self.session.execute(
            update(Participant)
            .where(
                Participant.id == participant_id,
                Participant.role == ParticipantRole.ATTENDEE.value
            )
            .values(role=role.value)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _event_buckets(event_id: int, bucket_id: Optional[int] = None):
        query = select(SettlementBucket.id).where(SettlementBucket.event_id == event_id)
        if bucket_id is not None:
            query = query.where(SettlementBucket.id == bucket_id)
        return query
