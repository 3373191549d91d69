import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand, BotCommandScopeDefault

from chapter_quiz import config
from chapter_quiz.db import KeyValueRepository, create_db_engine, init_db
from chapter_quiz.errors import LoadError
from chapter_quiz.handlers import setup_routers
from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.content_source import (
    ContentSource,
    DirectoryContentSource,
    HttpContentSource,
)
from chapter_quiz.services.custom_service import CustomContentStore, CustomLedger


def build_content_source() -> ContentSource:
    if config.CONTENT_URL:
        return HttpContentSource(config.CONTENT_URL)
    return DirectoryContentSource(config.CONTENT_DIR)


async def on_startup(bot: Bot, repository: ContentRepository) -> None:
    await bot.set_my_commands(
        [BotCommand(command="start", description="Main menu")],
        scope=BotCommandScopeDefault(),
    )
    try:
        await repository.load()
    except LoadError:
        # repository.load_error is shown in the main menu
        logging.error("Starting without quiz content")


async def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    if not config.bot_token:
        raise RuntimeError("BOT_TOKEN is not set")

    session_factory = init_db(create_db_engine(config.DB_PATH))
    store = KeyValueRepository(session_factory)
    ledger = CustomLedger(store)
    repository = ContentRepository(build_content_source(), ledger)
    custom_store = CustomContentStore(ledger, repository)

    bot = Bot(token=config.bot_token)
    dp = Dispatcher(
        storage=MemoryStorage(),
        store=store,
        repository=repository,
        custom_store=custom_store,
    )
    dp.include_router(setup_routers())
    dp.startup.register(on_startup)

    await dp.start_polling(bot)


if __name__ == "__main__":
    asyncio.run(main())
