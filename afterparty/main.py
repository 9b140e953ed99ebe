"""Main entry point for the bot."""

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from aiogram.types import BotCommand
from redis.asyncio import Redis

from afterparty.config.roster import load_roster
from afterparty.config.settings import settings
from afterparty.database.session import sessionmanager
from afterparty.handlers import bucket, event, participant, start
from afterparty.middlewares.auth import AuthMiddleware
from afterparty.middlewares.database import DatabaseMiddleware
from afterparty.utils.constants import CMD_EVENTS, CMD_HELP, CMD_NEW_EVENT, CMD_START
from afterparty.utils.roles import RoleResolver

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def on_startup(bot: Bot):
    """Actions to perform on bot startup."""
    logger.info("Bot starting up...")

    sessionmanager.init(settings.database_url)
    logger.info("Database session manager initialized")

    # Requests retry this lazily if it fails here
    try:
        await sessionmanager.ensure_schema()
    except Exception:
        logger.exception("Schema upgrade failed, will retry on the next request")

    commands = [
        BotCommand(command=CMD_START, description="Start"),
        BotCommand(command=CMD_HELP, description="Show help"),
        BotCommand(command=CMD_NEW_EVENT, description="Create an event"),
        BotCommand(command=CMD_EVENTS, description="List events"),
    ]

    await bot.set_my_commands(commands)
    logger.info("Bot commands set")

    bot_info = await bot.get_me()
    logger.info("Bot started: @%s", bot_info.username)


async def on_shutdown(bot: Bot):
    """Actions to perform on bot shutdown."""
    logger.info("Bot shutting down...")

    await sessionmanager.close()
    logger.info("Database connections closed")


def create_storage():
    """Redis FSM storage, or memory storage when Redis is disabled or broken."""
    if not settings.use_redis:
        logger.info("Using memory storage for FSM")
        return MemoryStorage()

    try:
        redis = Redis.from_url(settings.redis_url)
        logger.info("Using Redis storage for FSM")
        return RedisStorage(redis=redis)
    except Exception as e:
        logger.warning("Could not connect to Redis: %s. Using memory storage.", e)
        return MemoryStorage()


def create_dispatcher() -> Dispatcher:
    """Build the dispatcher with middlewares, routers and the role resolver."""
    dp = Dispatcher(storage=create_storage())

    roster = load_roster(settings.roster_file)
    dp["role_resolver"] = RoleResolver.from_roster(roster)
    logger.info(
        "Loaded roster: %s angels, %s special role lists",
        len(roster.angel_names), len(roster.special_roles)
    )

    dp.message.middleware(DatabaseMiddleware())
    dp.callback_query.middleware(DatabaseMiddleware())
    dp.message.middleware(AuthMiddleware())
    dp.callback_query.middleware(AuthMiddleware())

    # Start router first so cancel wins over form states
    dp.include_router(start.router)
    dp.include_router(event.router)
    dp.include_router(bucket.router)
    dp.include_router(participant.router)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)
    return dp


async def main():
    """Main function to run the bot."""
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = create_dispatcher()

    try:
        logger.info("Starting bot polling...")
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


def run():
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Bot stopped by user")


if __name__ == "__main__":
    run()
