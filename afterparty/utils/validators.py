"""Validators for user input."""

from datetime import date, datetime, time
from typing import Optional, Tuple


def validate_event_title(title: str) -> Tuple[bool, Optional[str]]:
    """
    Validate event title.

    Returns:
        Tuple of (is_valid, error_message)
    """
    title = (title or "").strip()

    if not title:
        return False, "❌ Title can't be empty"

    if len(title) > 100:
        return False, "❌ Title is too long (100 characters max)"

    return True, None


def validate_location(location: str) -> Tuple[bool, Optional[str]]:
    """
    Validate event location.

    Returns:
        Tuple of (is_valid, error_message)
    """
    location = (location or "").strip()

    if not location:
        return False, "❌ Location can't be empty"

    if len(location) > 200:
        return False, "❌ Location is too long (200 characters max)"

    return True, None


def validate_bucket_title(title: str) -> Tuple[bool, Optional[str]]:
    """
    Validate settlement bucket title.

    Returns:
        Tuple of (is_valid, error_message)
    """
    title = (title or "").strip()

    if not title:
        return False, "❌ Settlement title can't be empty"

    if len(title) > 60:
        return False, "❌ Settlement title is too long (60 characters max)"

    return True, None


def parse_event_date(value) -> Tuple[bool, Optional[date], Optional[str]]:
    """
    Validate and parse event date.

    Accepts a date or an ISO string (YYYY-MM-DD).

    Returns:
        Tuple of (is_valid, date, error_message)
    """
    if isinstance(value, datetime):
        return True, value.date(), None
    if isinstance(value, date):
        return True, value, None

    text = (value or "").strip()
    if not text:
        return False, None, "❌ Date can't be empty"

    try:
        return True, date.fromisoformat(text), None
    except ValueError:
        return False, None, "❌ Invalid date. Use YYYY-MM-DD, e.g. 2026-10-20"


def parse_start_time(value) -> Tuple[bool, Optional[time], Optional[str]]:
    """
    Validate and parse start time.

    Accepts a time, an "HH:MM" string, or an empty value (no time).

    Returns:
        Tuple of (is_valid, time, error_message)
    """
    if isinstance(value, time):
        return True, value, None

    text = (value or "").strip()
    if not text:
        return True, None, None

    try:
        return True, datetime.strptime(text, "%H:%M").time(), None
    except ValueError:
        return False, None, "❌ Invalid time. Use HH:MM, e.g. 19:30"


def parse_settlement_line(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a "manager / account" line.

    Only the first slash separates; a dash or empty part means not set.

    Returns:
        Tuple of (manager, account)
    """
    manager, _, account = (text or "").partition("/")
    manager, account = manager.strip(), account.strip()
    return (
        manager if manager not in ("", "-") else None,
        account if account not in ("", "-") else None
    )
