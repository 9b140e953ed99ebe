"""User identification middleware."""

from typing import Callable, Dict, Any, Awaitable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from afterparty.config.settings import settings


class AuthMiddleware(BaseMiddleware):
    """Inject the sender's identity and admin flag into handler data."""

    async def __call__(
            self,
            handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
            event: TelegramObject,
            data: Dict[str, Any],
    ) -> Any:
        # aiogram puts the sender of messages and callbacks here
        user = data.get("event_from_user")

        data["user_id"] = user.id if user else None
        data["full_name"] = user.full_name if user else None
        data["is_admin"] = settings.is_admin(user.id) if user else False

        return await handler(event, data)
