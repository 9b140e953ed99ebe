"""Handlers package."""

from afterparty.handlers import (
    start,
    event,
    bucket,
    participant
)

__all__ = [
    "start",
    "event",
    "bucket",
    "participant"
]
