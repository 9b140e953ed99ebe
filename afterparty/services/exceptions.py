"""Errors raised by the settlement services."""

from afterparty.utils.constants import ERR_LAST_BUCKET


class SettlementError(Exception):
    """Base class for settlement engine errors."""


class ValidationError(SettlementError):
    """Input rejected before touching the database."""


class EventNotFoundError(SettlementError):
    """Mutation targeted an event that does not exist."""

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class LastBucketError(SettlementError):
    """An event must keep at least one settlement bucket."""

    def __init__(self):
        super().__init__(ERR_LAST_BUCKET)
