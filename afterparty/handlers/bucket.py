"""Handlers for settlement rounds."""

from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from afterparty.keyboards.inline import get_buckets_keyboard, get_confirmation_keyboard
from afterparty.keyboards.reply import get_cancel_keyboard, get_main_menu_keyboard, get_skip_keyboard
from afterparty.services.exceptions import LastBucketError, SettlementError
from afterparty.services.projection_service import ProjectionService
from afterparty.services.settlement_service import SettlementService
from afterparty.states.forms import BucketForm
from afterparty.utils.constants import BTN_SKIP, ERR_NO_EVENT
from afterparty.utils.formatters import format_buckets_list
from afterparty.utils.validators import parse_settlement_line, validate_bucket_title

router = Router()


async def _show_buckets(callback: CallbackQuery, session: AsyncSession, event_id: int):
    buckets = await ProjectionService(session).list_buckets(event_id)
    if not buckets:
        await callback.answer(ERR_NO_EVENT, show_alert=True)
        return

    await callback.message.edit_text(
        format_buckets_list(buckets),
        reply_markup=get_buckets_keyboard(event_id, [(b.id, b.title) for b in buckets]),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("bucket:list:"))
async def callback_list_buckets(callback: CallbackQuery, session: AsyncSession):
    """Show the event's settlement rounds."""
    event_id = int(callback.data.split(":")[2])
    await _show_buckets(callback, session, event_id)


@router.callback_query(F.data.startswith("bucket:new:"))
@router.callback_query(F.data.startswith("bucket:edit:"))
async def callback_bucket_form(callback: CallbackQuery, state: FSMContext):
    """Ask for the title of a new or edited round."""
    parts = callback.data.split(":")
    event_id = int(parts[2])
    bucket_id = int(parts[3]) if len(parts) > 3 else None

    await state.set_state(BucketForm.title)
    await state.update_data(event_id=event_id, bucket_id=bucket_id)

    await callback.message.answer(
        "💳 Enter the round title:",
        reply_markup=get_cancel_keyboard()
    )
    await callback.answer()


@router.message(BucketForm.title)
async def process_bucket_title(message: Message, state: FSMContext):
    """Process round title input."""
    is_valid, error = validate_bucket_title(message.text)
    if not is_valid:
        await message.answer(error)
        return

    await state.update_data(title=message.text.strip())
    await state.set_state(BucketForm.settlement)

    await message.answer(
        "Send 'manager / account' or press 'Skip':",
        reply_markup=get_skip_keyboard()
    )


@router.message(BucketForm.settlement)
async def process_bucket_settlement(
        message: Message,
        state: FSMContext,
        session: AsyncSession
):
    """Create or update the round."""
    manager, account = (None, None)
    if message.text != BTN_SKIP:
        manager, account = parse_settlement_line(message.text)

    data = await state.get_data()
    await state.clear()

    settlement_service = SettlementService(session)
    try:
        if data.get("bucket_id") is None:
            await settlement_service.create_bucket(
                data["event_id"], data["title"], manager=manager, account=account
            )
            text = "✅ Round added"
        elif await settlement_service.update_bucket(
                data["bucket_id"], data["event_id"], data["title"], manager=manager, account=account
        ):
            text = "✅ Round updated"
        else:
            text = "❌ Round not found"
    except SettlementError as e:
        text = str(e)

    await message.answer(text, reply_markup=get_main_menu_keyboard())


@router.callback_query(F.data.startswith("bucket:delete:"))
async def callback_delete_bucket(callback: CallbackQuery):
    """Ask confirmation to delete a round."""
    _, _, event_id, bucket_id = callback.data.split(":")

    await callback.message.edit_text(
        "⚠️ <b>Delete round</b>\n\n"
        "Payment marks of this round will be lost.\n"
        "Confirm:",
        reply_markup=get_confirmation_keyboard(f"delete_bucket:{event_id}", int(bucket_id)),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("confirm:delete_bucket:"))
async def callback_confirm_delete_bucket(callback: CallbackQuery, session: AsyncSession):
    """Delete the round."""
    _, _, event_id, bucket_id = callback.data.split(":")
    event_id = int(event_id)

    try:
        await SettlementService(session).delete_bucket(int(bucket_id), event_id)
    except LastBucketError as e:
        await callback.answer(f"❌ {e}", show_alert=True)
        return
    except SettlementError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await _show_buckets(callback, session, event_id)


@router.callback_query(F.data.startswith("cancel:delete_bucket:"))
async def callback_cancel_delete_bucket(callback: CallbackQuery, session: AsyncSession):
    """Back to the rounds list."""
    event_id = int(callback.data.split(":")[2])
    await _show_buckets(callback, session, event_id)
