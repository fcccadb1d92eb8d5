# handlers/feed.py
from aiogram import Router, F
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, Message

from database.errors import ThreadError
from database.feed import FeedService
from handlers.render import explain, render_feed_item

feed_router = Router()


def parse_page(args: str | None) -> int:
    try:
        return int((args or "1").strip())
    except ValueError:
        return 1


async def feed_page(feed: FeedService, page: int) -> tuple[str, InlineKeyboardMarkup | None]:
    page = max(1, page)
    views, has_more = await feed.list_roots(page)
    if not views:
        return "Лента пуста.", None

    text = f"📰 Страница {page}\n\n" + "\n\n".join(render_feed_item(v) for v in views)
    nav = []
    if page > 1:
        nav.append(InlineKeyboardButton(text="⬅️", callback_data=f"feed:{page - 1}"))
    if has_more:
        nav.append(InlineKeyboardButton(text="➡️", callback_data=f"feed:{page + 1}"))
    return text, InlineKeyboardMarkup(inline_keyboard=[nav]) if nav else None


@feed_router.message(Command("feed"))
async def cmd_feed(msg: Message, command: CommandObject, feed: FeedService):
    try:
        text, kb = await feed_page(feed, parse_page(command.args))
    except ThreadError as e:
        return await msg.answer(explain(e))
    await msg.answer(text, reply_markup=kb)


@feed_router.callback_query(F.data.startswith("feed:"))
async def feed_nav(cb: CallbackQuery, feed: FeedService):
    try:
        text, kb = await feed_page(feed, parse_page(cb.data.split(":", 1)[1]))
    except ThreadError as e:
        return await cb.answer(explain(e), show_alert=True)
    await cb.message.edit_text(text, reply_markup=kb)
    await cb.answer()
