"""Handlers for event management."""

import logging
from typing import Optional

from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from afterparty.keyboards.inline import (
    get_confirmation_keyboard,
    get_event_actions_keyboard,
    get_events_keyboard
)
from afterparty.keyboards.reply import get_cancel_keyboard, get_main_menu_keyboard, get_skip_keyboard
from afterparty.services.event_service import EventService
from afterparty.services.exceptions import ValidationError
from afterparty.services.projection_service import ProjectionService
from afterparty.states.forms import EventForm
from afterparty.utils.constants import (
    BTN_EVENTS,
    BTN_NEW_EVENT,
    BTN_SKIP,
    CMD_EVENTS,
    CMD_NEW_EVENT,
    ERR_NO_EVENT,
    ERR_NO_PERMISSION
)
from afterparty.utils.formatters import format_event_info, format_events_list
from afterparty.utils.validators import (
    parse_event_date,
    parse_settlement_line,
    parse_start_time,
    validate_event_title,
    validate_location
)

logger = logging.getLogger(__name__)
router = Router()


async def render_event(session: AsyncSession, event_id: int) -> Optional[str]:
    """Event card text, or None if the event is gone."""
    projections = ProjectionService(session)

    event = await projections.get_event_summary(event_id)
    if event is None:
        return None

    buckets = await projections.list_buckets(event_id)
    summary = await projections.get_settlement_summary(event_id)
    return format_event_info(event, buckets, summary)


@router.message(Command(CMD_NEW_EVENT))
@router.message(F.text == BTN_NEW_EVENT)
async def cmd_new_event(message: Message, state: FSMContext):
    """Start creating a new event."""
    await state.set_state(EventForm.title)
    await message.answer(
        "📝 <b>New event</b>\n\n"
        "Enter the event title:",
        reply_markup=get_cancel_keyboard(),
        parse_mode="HTML"
    )


@router.message(EventForm.title)
async def process_event_title(message: Message, state: FSMContext):
    """Process event title input."""
    is_valid, error = validate_event_title(message.text)
    if not is_valid:
        await message.answer(error)
        return

    await state.update_data(title=message.text.strip())
    await state.set_state(EventForm.event_date)

    await message.answer("📅 Enter the date (YYYY-MM-DD):")


@router.message(EventForm.event_date)
async def process_event_date(message: Message, state: FSMContext):
    """Process event date input."""
    is_valid, event_date, error = parse_event_date(message.text)
    if not is_valid:
        await message.answer(error)
        return

    await state.update_data(event_date=event_date.isoformat())
    await state.set_state(EventForm.start_time)

    await message.answer(
        "🕖 Enter the start time (HH:MM) or press 'Skip':",
        reply_markup=get_skip_keyboard()
    )


@router.message(EventForm.start_time)
async def process_event_start_time(message: Message, state: FSMContext):
    """Process start time input."""
    start_time = None
    if message.text != BTN_SKIP:
        is_valid, start_time, error = parse_start_time(message.text)
        if not is_valid:
            await message.answer(error)
            return

    await state.update_data(start_time=start_time.strftime("%H:%M") if start_time else None)
    await state.set_state(EventForm.location)

    await message.answer(
        "📍 Enter the location:",
        reply_markup=get_cancel_keyboard()
    )


@router.message(EventForm.location)
async def process_event_location(message: Message, state: FSMContext):
    """Process location input."""
    is_valid, error = validate_location(message.text)
    if not is_valid:
        await message.answer(error)
        return

    await state.update_data(location=message.text.strip())
    await state.set_state(EventForm.settlement)

    await message.answer(
        "💳 Who collects the money? Send 'manager / account' or press 'Skip':",
        reply_markup=get_skip_keyboard()
    )


@router.message(EventForm.settlement)
async def process_event_settlement(
        message: Message,
        state: FSMContext,
        session: AsyncSession,
        is_admin: bool
):
    """Create the event with its first settlement round."""
    manager, account = (None, None)
    if message.text != BTN_SKIP:
        manager, account = parse_settlement_line(message.text)

    data = await state.get_data()

    try:
        event = await EventService(session).create_event(
            title=data["title"],
            event_date=data["event_date"],
            start_time=data.get("start_time"),
            location=data["location"],
            manager=manager,
            account=account
        )
    except ValidationError as e:
        await state.clear()
        await message.answer(str(e), reply_markup=get_main_menu_keyboard())
        return

    await state.clear()

    await message.answer(
        "✅ Event created!",
        reply_markup=get_main_menu_keyboard()
    )
    await message.answer(
        await render_event(session, event.id),
        reply_markup=get_event_actions_keyboard(event.id, is_admin),
        parse_mode="HTML"
    )


@router.message(Command(CMD_EVENTS))
@router.message(F.text == BTN_EVENTS)
async def cmd_list_events(message: Message, session: AsyncSession):
    """List all events."""
    events = await ProjectionService(session).list_events()

    if not events:
        await message.answer(
            "❌ No events yet.\n\n"
            f"Create one with /{CMD_NEW_EVENT}"
        )
        return

    events_data = [(e.id, f"{e.event_date.strftime('%d.%m')} {e.title}") for e in events]

    await message.answer(
        format_events_list(events),
        reply_markup=get_events_keyboard(events_data, action="view"),
        parse_mode="HTML"
    )


@router.callback_query(F.data.startswith("event:view:"))
async def callback_view_event(
        callback: CallbackQuery,
        session: AsyncSession,
        is_admin: bool
):
    """View event details."""
    event_id = int(callback.data.split(":")[2])

    text = await render_event(session, event_id)
    if text is None:
        await callback.answer(ERR_NO_EVENT, show_alert=True)
        return

    await callback.message.edit_text(
        text,
        reply_markup=get_event_actions_keyboard(event_id, is_admin),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("event:delete:"))
async def callback_delete_event(callback: CallbackQuery, is_admin: bool):
    """Ask confirmation to delete event."""
    if not is_admin:
        await callback.answer(ERR_NO_PERMISSION, show_alert=True)
        return

    event_id = int(callback.data.split(":")[2])

    await callback.message.edit_text(
        "⚠️ <b>Delete event</b>\n\n"
        "Every settlement round, participant and payment mark will be removed.\n"
        "Confirm:",
        reply_markup=get_confirmation_keyboard("delete_event", event_id),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("confirm:delete_event:"))
async def callback_confirm_delete_event(
        callback: CallbackQuery,
        session: AsyncSession,
        user_id: int,
        is_admin: bool
):
    """Confirm and delete event."""
    if not is_admin:
        await callback.answer(ERR_NO_PERMISSION, show_alert=True)
        return

    event_id = int(callback.data.split(":")[2])

    if not await EventService(session).delete_event(event_id):
        await callback.answer(ERR_NO_EVENT, show_alert=True)
        return

    logger.info("User %s deleted event %s", user_id, event_id)
    await callback.message.edit_text("🗑 Event deleted")
    await callback.answer()


@router.callback_query(F.data.startswith("cancel:delete_event:"))
async def callback_cancel_delete_event(
        callback: CallbackQuery,
        session: AsyncSession,
        is_admin: bool
):
    """Cancel event deletion."""
    event_id = int(callback.data.split(":")[2])

    text = await render_event(session, event_id)
    if text is None:
        await callback.answer(ERR_NO_EVENT, show_alert=True)
        return

    await callback.message.edit_text(
        text,
        reply_markup=get_event_actions_keyboard(event_id, is_admin),
        parse_mode="HTML"
    )
    await callback.answer("❌ Cancelled")
