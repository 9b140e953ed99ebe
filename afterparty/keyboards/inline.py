"""Inline keyboards for the bot."""

from typing import List

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from afterparty.utils.constants import CB_EVENT, CB_BUCKET, CB_PARTICIPANT, CB_SETTLE, CB_CONFIRM, CB_CANCEL


def get_events_keyboard(events: List[tuple], action: str = "view") -> InlineKeyboardMarkup:
    """
    Create keyboard with list of events.

    Args:
        events: List of (event_id, event_title) tuples
        action: Action prefix for callback data
    """
    builder = InlineKeyboardBuilder()

    for event_id, title in events:
        builder.button(
            text=title,
            callback_data=f"{CB_EVENT}:{action}:{event_id}"
        )

    builder.adjust(1)  # One button per row
    return builder.as_markup()


def get_event_actions_keyboard(event_id: int, is_admin: bool = False) -> InlineKeyboardMarkup:
    """
    Create keyboard with event actions.

    Args:
        event_id: Event ID
        is_admin: Whether user may delete the event
    """
    builder = InlineKeyboardBuilder()

    builder.button(
        text="➕ Add names",
        callback_data=f"{CB_PARTICIPANT}:add:{event_id}:0"
    )
    builder.button(
        text="👥 Participants",
        callback_data=f"{CB_PARTICIPANT}:list:{event_id}:0"
    )
    builder.button(
        text="💳 Rounds",
        callback_data=f"{CB_BUCKET}:list:{event_id}"
    )

    if is_admin:
        builder.button(
            text="🗑 Delete",
            callback_data=f"{CB_EVENT}:delete:{event_id}"
        )

    builder.adjust(2)  # Two buttons per row
    return builder.as_markup()


def get_buckets_keyboard(event_id: int, buckets: List[tuple]) -> InlineKeyboardMarkup:
    """
    Create keyboard with settlement rounds and their actions.

    Args:
        event_id: Event ID
        buckets: List of (bucket_id, title) tuples
    """
    builder = InlineKeyboardBuilder()

    for bucket_id, title in buckets:
        builder.button(
            text=f"👥 {title}",
            callback_data=f"{CB_PARTICIPANT}:list:{event_id}:{bucket_id}"
        )
        builder.button(
            text="➕",
            callback_data=f"{CB_PARTICIPANT}:add:{event_id}:{bucket_id}"
        )
        builder.button(
            text="✏️",
            callback_data=f"{CB_BUCKET}:edit:{event_id}:{bucket_id}"
        )
        builder.button(
            text="🗑",
            callback_data=f"{CB_BUCKET}:delete:{event_id}:{bucket_id}"
        )

    builder.button(
        text="➕ New round",
        callback_data=f"{CB_BUCKET}:new:{event_id}"
    )
    builder.button(
        text="◀️ Back",
        callback_data=f"{CB_EVENT}:view:{event_id}"
    )

    builder.adjust(*([4] * len(buckets)), 2)
    return builder.as_markup()


def get_participants_keyboard(
        event_id: int,
        bucket_id: int,
        participants: List[tuple]
) -> InlineKeyboardMarkup:
    """
    Create keyboard with settle toggles.

    Args:
        event_id: Event ID
        bucket_id: Bucket ID, 0 for all rounds at once
        participants: List of (participant_id, name, is_settled) tuples
    """
    builder = InlineKeyboardBuilder()

    for participant_id, name, is_settled in participants:
        builder.button(
            text=f"{'✅' if is_settled else '⬜️'} {name}",
            callback_data=f"{CB_SETTLE}:{event_id}:{bucket_id}:{participant_id}:{0 if is_settled else 1}"
        )
        builder.button(
            text="✖️",
            callback_data=f"{CB_PARTICIPANT}:remove:{event_id}:{bucket_id}:{participant_id}"
        )

    builder.button(
        text="◀️ Back",
        callback_data=f"{CB_EVENT}:view:{event_id}"
    )

    builder.adjust(*([2] * len(participants)), 1)
    return builder.as_markup()


def get_confirmation_keyboard(action: str, item_id: int) -> InlineKeyboardMarkup:
    """
    Create confirmation keyboard.

    Args:
        action: Action prefix (e.g., 'delete_event')
        item_id: ID of item to confirm action for
    """
    builder = InlineKeyboardBuilder()

    builder.button(
        text="✅ Confirm",
        callback_data=f"{CB_CONFIRM}:{action}:{item_id}"
    )
    builder.button(
        text="❌ Cancel",
        callback_data=f"{CB_CANCEL}:{action}:{item_id}"
    )

    builder.adjust(2)
    return builder.as_markup()
