"""Handlers for participant management."""

import logging
from typing import Optional

from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from afterparty.keyboards.inline import get_participants_keyboard
from afterparty.keyboards.reply import get_cancel_keyboard, get_main_menu_keyboard
from afterparty.services.exceptions import SettlementError
from afterparty.services.participant_service import ParticipantService
from afterparty.services.projection_service import ProjectionService
from afterparty.states.forms import ParticipantForm
from afterparty.utils.constants import ERR_NO_NAMES, MAX_BATCH_SIZE
from afterparty.utils.formatters import format_participants_list, sort_by_role
from afterparty.utils.names import parse_delimited_names
from afterparty.utils.roles import RoleResolver

logger = logging.getLogger(__name__)
router = Router()


def _bucket_or_none(raw: str) -> Optional[int]:
    # 0 in callback data stands for "all rounds" / primary round
    bucket_id = int(raw)
    return bucket_id or None


async def _render_participants(session: AsyncSession, event_id: int, bucket_id: Optional[int]):
    projections = ProjectionService(session)

    bucket = None
    if bucket_id is not None:
        buckets = await projections.list_buckets(event_id)
        bucket = next((b for b in buckets if b.id == bucket_id), None)
        if bucket is None:
            bucket_id = None

    grouped = await projections.list_participants([event_id], bucket_id=bucket_id)
    participants = sort_by_role(grouped[event_id])

    text = format_participants_list(participants, bucket)
    keyboard = get_participants_keyboard(
        event_id,
        bucket_id or 0,
        [(p.id, p.name, p.is_settled) for p in participants]
    )
    return text, keyboard


@router.callback_query(F.data.startswith("participant:add:"))
async def callback_add_participants(callback: CallbackQuery, state: FSMContext):
    """Ask for a block of names."""
    _, _, event_id, bucket_id = callback.data.split(":")

    await state.set_state(ParticipantForm.names)
    await state.update_data(event_id=int(event_id), bucket_id=_bucket_or_none(bucket_id))

    await callback.message.answer(
        "👥 <b>Add participants</b>\n\n"
        "Paste the names separated by new lines or commas "
        f"(up to {MAX_BATCH_SIZE} at once):",
        reply_markup=get_cancel_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.message(ParticipantForm.names)
async def process_participant_names(
        message: Message,
        state: FSMContext,
        session: AsyncSession,
        role_resolver: RoleResolver
):
    """Add the pasted names to the round."""
    names = parse_delimited_names(message.text)
    if not names:
        await message.answer(ERR_NO_NAMES)
        return

    data = await state.get_data()
    await state.clear()

    try:
        added = await ParticipantService(session).add_participants(
            data["event_id"],
            names,
            target_bucket_id=data.get("bucket_id"),
            resolver=role_resolver
        )
    except SettlementError as e:
        await message.answer(str(e), reply_markup=get_main_menu_keyboard())
        return

    logger.info("Added %s of %s names to event %s", added, len(names), data["event_id"])

    skipped = len(names) - added
    text = f"✅ Added: {added}"
    if skipped > 0:
        text += f"\n⏭ Already there or over the limit: {skipped}"

    await message.answer(text, reply_markup=get_main_menu_keyboard())


@router.callback_query(F.data.startswith("participant:list:"))
async def callback_list_participants(callback: CallbackQuery, session: AsyncSession):
    """Show participants with settle toggles."""
    _, _, event_id, bucket_id = callback.data.split(":")

    text, keyboard = await _render_participants(session, int(event_id), _bucket_or_none(bucket_id))

    await callback.message.edit_text(text, reply_markup=keyboard, parse_mode="HTML")
    await callback.answer()


@router.callback_query(F.data.startswith("settle:"))
async def callback_toggle_settled(callback: CallbackQuery, session: AsyncSession):
    """Mark a participant as paid or unpaid."""
    _, event_id, bucket_id, participant_id, flag = callback.data.split(":")
    event_id = int(event_id)
    bucket_id = _bucket_or_none(bucket_id)

    updated = await ParticipantService(session).set_settled(
        int(participant_id), event_id, flag == "1", bucket_id=bucket_id
    )
    if not updated:
        await callback.answer("❌ Participant not found", show_alert=True)
        return

    text, keyboard = await _render_participants(session, event_id, bucket_id)
    await callback.message.edit_text(text, reply_markup=keyboard, parse_mode="HTML")
    await callback.answer("✅ Paid" if flag == "1" else "⬜️ Unpaid")


@router.callback_query(F.data.startswith("participant:remove:"))
async def callback_remove_participant(callback: CallbackQuery, session: AsyncSession):
    """Remove a participant from the round, or from every round."""
    _, _, event_id, bucket_id, participant_id = callback.data.split(":")
    event_id = int(event_id)
    bucket_id = _bucket_or_none(bucket_id)

    removed = await ParticipantService(session).remove_participant(
        int(participant_id), event_id, bucket_id=bucket_id
    )
    if not removed:
        await callback.answer("❌ Participant not found", show_alert=True)
        return

    text, keyboard = await _render_participants(session, event_id, bucket_id)
    await callback.message.edit_text(text, reply_markup=keyboard, parse_mode="HTML")
    await callback.answer("✖️ Removed")
