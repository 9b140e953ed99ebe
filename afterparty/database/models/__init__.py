"""Database models for the afterparty settlement tracker."""

from afterparty.database.models.event import Event
from afterparty.database.models.participant import Participant
from afterparty.database.models.settlement import SettlementBucket, BucketParticipant

__all__ = [
    "Event",
    "Participant",
    "SettlementBucket",
    "BucketParticipant",
]
