"""States package."""

from afterparty.states.forms import (
    EventForm,
    BucketForm,
    ParticipantForm
)

__all__ = [
    "EventForm",
    "BucketForm",
    "ParticipantForm"
]
