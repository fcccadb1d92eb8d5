# bot.py
from __future__ import annotations

import asyncio, logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums.parse_mode import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand, BotCommandScopeDefault
import aiocron

from config import (
    TOKEN, DB_PATH, REVALIDATE_URL, FEED_PAGE_SIZE, MAX_TEXT_LENGTH, REPAIR_CRON, LOG_LEVEL
)
from database.database import init_db, make_engine, make_session_factory
from database.feed import FeedService
from database.repair import repair_references
from database.repository import ThreadRepository
from database.revalidate import Revalidator
from database.store import RecordStore
from database.errors import StoreUnavailable

from handlers import onboarding_router, threads_router, feed_router, admin_router

# ───────────────────────────  Logging
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("bot")

# ───────────────────────────  /commands
DEFAULT_COMMANDS = [
    BotCommand(command="start",    description="🚀 Главное меню"),
    BotCommand(command="post",     description="✍️ Новый пост"),
    BotCommand(command="feed",     description="📰 Лента"),
    BotCommand(command="myposts",  description="🗂 Мои посты"),
    BotCommand(command="activity", description="🔔 Ответы мне"),
]
async def set_bot_commands(b: Bot):
    await b.set_my_commands(DEFAULT_COMMANDS, BotCommandScopeDefault())


# ───────────────────────────  Cron : réparation des références
async def repair_job(store: RecordStore):
    try:
        await repair_references(store)
    except StoreUnavailable as e:
        logger.warning("Repair job skipped: %s", e)


def build_dispatcher(store: RecordStore, repo: ThreadRepository, feed: FeedService) -> Dispatcher:
    dp = Dispatcher(storage=MemoryStorage())
    # handles explicites, injectés par nom dans les handlers
    dp["store"], dp["repo"], dp["feed"] = store, repo, feed
    for r in (onboarding_router, threads_router, feed_router, admin_router):
        dp.include_router(r)
    return dp


# ───────────────────────────  Main
async def main():
    engine = make_engine(DB_PATH)
    revalidator = Revalidator(REVALIDATE_URL)
    try:
        await init_db(engine)
        store = RecordStore(make_session_factory(engine))
        repo = ThreadRepository(store, revalidator, max_text_length=MAX_TEXT_LENGTH)
        feed = FeedService(store, default_page_size=FEED_PAGE_SIZE)

        cron = aiocron.crontab(REPAIR_CRON, func=repair_job, args=(store,), start=True)

        bot = Bot(TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
        dp = build_dispatcher(store, repo, feed)
        await set_bot_commands(bot)
        try:
            await dp.start_polling(bot)
        finally:
            cron.stop()
            await bot.session.close()
    finally:
        await revalidator.close()
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
