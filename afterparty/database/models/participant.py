from datetime import datetime
from typing import List

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, String, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from afterparty.database.base import Base, BigIntPK
from afterparty.utils.constants import ParticipantRole


class Participant(Base):
    """Named person attending one event."""

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    event_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        default=ParticipantRole.ATTENDEE.value,
        server_default=ParticipantRole.ATTENDEE.value,
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    event: Mapped["Event"] = relationship(back_populates="participants")
    links: Mapped[List["BucketParticipant"]] = relationship(
        back_populates="participant",
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "role in ({})".format(", ".join(f"'{role.value}'" for role in ParticipantRole)),
            name="ck_participants_role"
        ),
        Index("idx_participants_event_created", "event_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Participant(id={self.id}, name='{self.name}', role='{self.role}')>"


# One participant per case-insensitive name within an event
Index(
    "uq_participants_event_name",
    Participant.event_id,
    func.lower(Participant.name),
    unique=True
)
