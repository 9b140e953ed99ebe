"""Read-side queries: event listings, participant lists and settlement rates."""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence

from sqlalchemy import case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from afterparty.database.models import BucketParticipant, Event, Participant, SettlementBucket
from afterparty.database.queries import primary_bucket_order
from afterparty.utils.constants import ParticipantRole


def _rate(settled: int, total: int) -> float:
    return settled / total if total else 0.0


@dataclass(frozen=True)
class EventSummary:
    id: int
    title: str
    event_date: date
    start_time: Optional[time]
    location: str
    description: Optional[str]
    settlement_manager: Optional[str]
    settlement_account: Optional[str]
    participant_count: int
    bucket_count: int


@dataclass(frozen=True)
class ParticipantView:
    id: int
    event_id: int
    name: str
    role: ParticipantRole
    is_settled: bool
    created_at: datetime
    # Link timestamp when settled; latest across links in aggregate views
    settled_at: Optional[datetime] = None
    bucket_count: int = 1


@dataclass(frozen=True)
class BucketSummary:
    id: int
    event_id: int
    title: str
    manager: Optional[str]
    account: Optional[str]
    sort_order: int
    participant_count: int
    settled_count: int
    is_primary: bool

    @property
    def settlement_rate(self) -> float:
        return _rate(self.settled_count, self.participant_count)


@dataclass(frozen=True)
class SettlementSummary:
    event_id: int
    participant_count: int
    settled_count: int
    bucket_count: int

    @property
    def settlement_rate(self) -> float:
        return _rate(self.settled_count, self.participant_count)


def _settled_as_int():
    return case((BucketParticipant.is_settled.is_(True), 1), else_=0)


class ProjectionService:
    """
    Aggregate read queries.

    Nothing is cached; every call reads the current rows. Participants
    without any bucket link are never returned.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_events(self, event_date: Optional[date] = None) -> List[EventSummary]:
        """
        List events, newest first, with participant and bucket counts.

        Args:
            event_date: Only events on this date
        """
        criteria = [Event.event_date == event_date] if event_date is not None else []
        return await self._event_summaries(*criteria)

    async def get_event_summary(self, event_id: int) -> Optional[EventSummary]:
        """Summary of a single event."""
        summaries = await self._event_summaries(Event.id == event_id)
        return summaries[0] if summaries else None

    async def _event_summaries(self, *criteria) -> List[EventSummary]:
        participant_count = (
            select(func.count(Participant.id))
            .where(
                Participant.event_id == Event.id,
                exists().where(BucketParticipant.participant_id == Participant.id)
            )
            .correlate(Event)
            .scalar_subquery()
        )
        bucket_count = (
            select(func.count(SettlementBucket.id))
            .where(SettlementBucket.event_id == Event.id)
            .correlate(Event)
            .scalar_subquery()
        )

        query = (
            select(Event, participant_count, bucket_count)
            .where(*criteria)
            .order_by(
                Event.event_date.desc(),
                Event.start_time.desc(),
                Event.created_at.desc(),
                Event.id.desc()
            )
        )

        result = await self.session.execute(query.execution_options(populate_existing=True))
        return [
            EventSummary(
                id=event.id,
                title=event.title,
                event_date=event.event_date,
                start_time=event.start_time,
                location=event.location,
                description=event.description,
                settlement_manager=event.display_manager,
                settlement_account=event.display_account,
                participant_count=participants,
                bucket_count=buckets
            )
            for event, participants, buckets in result.all()
        ]

    async def list_participants(
            self,
            event_ids: Sequence[int],
            keyword: str = "",
            bucket_id: Optional[int] = None
    ) -> Dict[int, List[ParticipantView]]:
        """
        List participants grouped by event.

        Args:
            event_ids: Events to include (every ID appears as a key)
            keyword: Case-insensitive substring filter on the name
            bucket_id: Restrict to one bucket and report its own settled flag

        Returns:
            Mapping of event ID to participants in creation order
        """
        grouped: Dict[int, List[ParticipantView]] = {event_id: [] for event_id in event_ids}
        if not event_ids:
            return grouped

        if bucket_id is not None:
            all_links = aliased(BucketParticipant)
            link_count = (
                select(func.count(all_links.bucket_id))
                .where(all_links.participant_id == Participant.id)
                .correlate(Participant)
                .scalar_subquery()
            )
            query = (
                select(
                    Participant,
                    BucketParticipant.is_settled,
                    BucketParticipant.settled_at,
                    link_count
                )
                .join(BucketParticipant, BucketParticipant.participant_id == Participant.id)
                .where(BucketParticipant.bucket_id == bucket_id)
            )
        else:
            query = (
                select(
                    Participant,
                    func.min(_settled_as_int()),
                    func.max(BucketParticipant.settled_at),
                    func.count(BucketParticipant.bucket_id)
                )
                .join(BucketParticipant, BucketParticipant.participant_id == Participant.id)
                .group_by(Participant.id)
            )

        query = query.where(Participant.event_id.in_(list(event_ids)))
        search = (keyword or "").strip().lower()
        if search:
            query = query.where(func.lower(Participant.name).contains(search, autoescape=True))
        query = query.order_by(Participant.created_at.asc(), Participant.id.asc())

        result = await self.session.execute(query.execution_options(populate_existing=True))
        for participant, settled, settled_at, bucket_count in result.all():
            view = ParticipantView(
                id=participant.id,
                event_id=participant.event_id,
                name=participant.name,
                role=ParticipantRole(participant.role),
                is_settled=bool(settled),
                created_at=participant.created_at,
                settled_at=settled_at if settled else None,
                bucket_count=bucket_count
            )
            grouped.setdefault(participant.event_id, []).append(view)

        return grouped

    async def list_buckets(self, event_id: int) -> List[BucketSummary]:
        """List an event's buckets, primary first, with participant and settled counts."""
        query = (
            select(
                SettlementBucket,
                func.count(BucketParticipant.participant_id),
                func.coalesce(func.sum(_settled_as_int()), 0)
            )
            .outerjoin(BucketParticipant, BucketParticipant.bucket_id == SettlementBucket.id)
            .where(SettlementBucket.event_id == event_id)
            .group_by(SettlementBucket.id)
            .order_by(*primary_bucket_order())
            .execution_options(populate_existing=True)
        )

        result = await self.session.execute(query)
        return [
            BucketSummary(
                id=bucket.id,
                event_id=bucket.event_id,
                title=bucket.title,
                manager=bucket.manager,
                account=bucket.account,
                sort_order=bucket.sort_order,
                participant_count=participants,
                settled_count=settled,
                is_primary=index == 0
            )
            for index, (bucket, participants, settled) in enumerate(result.all())
        ]

    async def get_settlement_summary(self, event_id: int) -> SettlementSummary:
        """Overall settlement rate: a participant counts as settled when every link is."""
        per_participant = (
            select(func.min(_settled_as_int()).label("settled"))
            .select_from(Participant)
            .join(BucketParticipant, BucketParticipant.participant_id == Participant.id)
            .where(Participant.event_id == event_id)
            .group_by(Participant.id)
            .subquery()
        )
        result = await self.session.execute(
            select(
                func.count(),
                func.coalesce(func.sum(per_participant.c.settled), 0)
            ).select_from(per_participant)
        )
        participant_count, settled_count = result.one()

        result = await self.session.execute(
            select(func.count(SettlementBucket.id))
            .where(SettlementBucket.event_id == event_id)
        )

        return SettlementSummary(
            event_id=event_id,
            participant_count=participant_count,
            settled_count=settled_count,
            bucket_count=result.scalar_one()
        )
