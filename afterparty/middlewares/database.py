"""Database middleware for injecting session into handlers."""

from typing import Callable, Dict, Any, Awaitable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from afterparty.database.session import sessionmanager


class DatabaseMiddleware(BaseMiddleware):
    """
    Run each update inside one database transaction.

    The schema is ensured first (a no-op once it has succeeded), then the
    handler gets a session that commits when it returns and rolls back if it
    raises.
    """

    async def __call__(
            self,
            handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
            event: TelegramObject,
            data: Dict[str, Any],
    ) -> Any:
        await sessionmanager.ensure_schema()

        async with sessionmanager.session() as session:
            data["session"] = session
            return await handler(event, data)
