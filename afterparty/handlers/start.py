"""Handlers for start, help and cancel."""

from aiogram import Router, F
from aiogram.filters import Command, CommandStart, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from afterparty.keyboards.reply import get_main_menu_keyboard
from afterparty.utils.constants import BTN_CANCEL, BTN_HELP, CMD_HELP, MSG_HELP, MSG_WELCOME

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    """Handle /start command."""
    await state.clear()
    await message.answer(
        MSG_WELCOME,
        reply_markup=get_main_menu_keyboard()
    )


@router.message(Command(CMD_HELP))
@router.message(F.text == BTN_HELP)
async def cmd_help(message: Message):
    """Handle /help command."""
    await message.answer(MSG_HELP, parse_mode="HTML")


@router.message(StateFilter("*"), Command("cancel"))
@router.message(StateFilter("*"), F.text == BTN_CANCEL)
async def cmd_cancel(message: Message, state: FSMContext):
    """Leave any form."""
    await state.clear()
    await message.answer(
        "❌ Cancelled",
        reply_markup=get_main_menu_keyboard()
    )
