from datetime import datetime
from typing import List

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Index, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from afterparty.database.base import Base, BigIntPK, TimestampMixin


class SettlementBucket(Base, TimestampMixin):
    """One settlement pot (round) within an event."""

    __tablename__ = "settlement_buckets"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    event_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(60), nullable=False)
    manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    # Relationships
    event: Mapped["Event"] = relationship(back_populates="buckets")
    links: Mapped[List["BucketParticipant"]] = relationship(
        back_populates="bucket",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_settlement_buckets_order", "event_id", "sort_order", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SettlementBucket(id={self.id}, event_id={self.event_id}, title='{self.title}')>"


class BucketParticipant(Base):
    """Membership of a participant in a bucket, with its paid flag."""

    __tablename__ = "bucket_participant_links"

    bucket_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("settlement_buckets.id", ondelete="CASCADE"),
        primary_key=True
    )
    participant_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("participants.id", ondelete="CASCADE"),
        primary_key=True,
        index=True
    )
    is_settled: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    bucket: Mapped["SettlementBucket"] = relationship(back_populates="links")
    participant: Mapped["Participant"] = relationship(back_populates="links")

    def __repr__(self) -> str:
        return (
            f"<BucketParticipant(bucket={self.bucket_id}, participant={self.participant_id}, "
            f"settled={self.is_settled})>"
        )
