"""Services package."""

from afterparty.services.event_service import EventService
from afterparty.services.settlement_service import SettlementService
from afterparty.services.participant_service import ParticipantService, ParticipantEntry
from afterparty.services.projection_service import ProjectionService
from afterparty.services.exceptions import (
    SettlementError,
    ValidationError,
    EventNotFoundError,
    LastBucketError
)

__all__ = [
    "EventService",
    "SettlementService",
    "ParticipantService",
    "ParticipantEntry",
    "ProjectionService",
    "SettlementError",
    "ValidationError",
    "EventNotFoundError",
    "LastBucketError"
]
