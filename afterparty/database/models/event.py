from datetime import date, time
from typing import List

from sqlalchemy import Date, String, Text, Time, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from afterparty.database.base import Base, BigIntPK, TimestampMixin


class Event(Base, TimestampMixin):
    """Scheduled gathering whose attendees settle up afterwards."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Mirrors of the primary settlement bucket
    display_manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_account: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    buckets: Mapped[List["SettlementBucket"]] = relationship(
        back_populates="event",
        order_by="[SettlementBucket.sort_order, SettlementBucket.created_at, SettlementBucket.id]",
        passive_deletes=True
    )
    participants: Mapped[List["Participant"]] = relationship(
        back_populates="event",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_events_date", "event_date", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title}', date={self.event_date})>"
