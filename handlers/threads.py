# handlers/threads.py
from __future__ import annotations

import logging

from aiogram import Router, F
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, Message

from config import ADMINS, FEED_PATH
from database.errors import PartialCascadeFailure, StoreUnavailable, ThreadError
from database.repository import ThreadRepository
from database.store import RecordStore
from database.thread import Thread
from database.utils import get_or_create_user
from handlers.render import explain, preview, render_feed_item, render_thread

threads_router = Router()
logger = logging.getLogger(__name__)


# ───── Parsing des arguments
def parse_post_args(args: str | None) -> tuple[str | None, str]:
    """'#code texte' -> ('code', 'texte'), 'texte' -> (None, 'texte')."""
    raw = (args or "").strip()
    if raw.startswith("#"):
        code, _, body = raw.partition(" ")
        return code.lstrip("#") or None, body.strip()
    return None, raw


def parse_id_and_text(args: str | None) -> tuple[int | None, str]:
    head, _, body = (args or "").strip().partition(" ")
    try:
        return int(head.lstrip("#")), body.strip()
    except ValueError:
        return None, ""


def thread_path(thread_id: int) -> str:
    return f"/thread/{thread_id}"


def report(e: ThreadError) -> str:
    if isinstance(e, (StoreUnavailable, PartialCascadeFailure)):
        logger.error("Thread command failed: %s", e)
    return explain(e)


# ───── /post
@threads_router.message(Command("post"))
async def cmd_post(msg: Message, command: CommandObject, repo: ThreadRepository, store: RecordStore):
    group_code, body = parse_post_args(command.args)
    try:
        user = await get_or_create_user(store, msg.from_user.id)
        thread = await repo.create_root(body, user.id, group_code, path=FEED_PATH)
    except ThreadError as e:
        return await msg.answer(report(e))
    note = "" if thread.group_id or not group_code else f"\nℹ️ Группа #{group_code} не найдена, пост личный."
    await msg.answer(f"✅ Пост #{thread.id} опубликован!{note}")


# ───── /reply
@threads_router.message(Command("reply"))
async def cmd_reply(msg: Message, command: CommandObject, repo: ThreadRepository, store: RecordStore):
    parent_id, body = parse_id_and_text(command.args)
    if parent_id is None:
        return await msg.answer("ℹ️ Формат: /reply id текст")
    try:
        user = await get_or_create_user(store, msg.from_user.id)
        reply = await repo.create_reply(parent_id, body, user.id, path=thread_path(parent_id))
    except ThreadError as e:
        return await msg.answer(report(e))
    await msg.answer(f"✅ Ответ #{reply.id} опубликован!")


# ───── /thread
@threads_router.message(Command("thread"))
async def cmd_thread(msg: Message, command: CommandObject, repo: ThreadRepository):
    thread_id, _ = parse_id_and_text(command.args)
    if thread_id is None:
        return await msg.answer("ℹ️ Формат: /thread id")
    try:
        view = await repo.fetch_by_id(thread_id)
    except ThreadError as e:
        return await msg.answer(report(e))
    await msg.answer(render_thread(view))


# ───── /myposts et /activity
@threads_router.message(Command("myposts", "posts"))
async def cmd_myposts(msg: Message, repo: ThreadRepository, store: RecordStore):
    try:
        user = await get_or_create_user(store, msg.from_user.id)
        views = await repo.list_user_threads(user.id)
    except ThreadError as e:
        return await msg.answer(report(e))
    if not views:
        return await msg.answer("У тебя пока нет опубликованных постов.")
    await msg.answer("\n\n".join(render_feed_item(v) for v in views))


@threads_router.message(Command("activity"))
async def cmd_activity(msg: Message, repo: ThreadRepository, store: RecordStore):
    try:
        user = await get_or_create_user(store, msg.from_user.id)
        replies = await repo.get_activity(user.id)
    except ThreadError as e:
        return await msg.answer(report(e))
    if not replies:
        return await msg.answer("Пока никто не ответил.")
    await msg.answer("\n".join(
        f"↪️ #{r.parent_id} ← #{r.id} {r.author.pseudo if r.author else '?'}: {preview(r.text, 60)}"
        for r in replies
    ))


# ───── /delete + confirmation
def can_delete(thread: Thread, user_id: int | None, tg_id: int) -> bool:
    return tg_id in ADMINS or (user_id is not None and thread.author_id == user_id)


@threads_router.message(Command("delete"))
async def confirm_delete(msg: Message, command: CommandObject, store: RecordStore):
    tid, _ = parse_id_and_text(command.args)
    if tid is None:
        return await msg.answer("ℹ️ Формат: /delete id")
    try:
        thread = await store.find_by_id(Thread, tid)
        user = await get_or_create_user(store, msg.from_user.id)
    except ThreadError as e:
        return await msg.answer(report(e))
    if thread is None:
        return await msg.answer("Пост уже удалён.")
    if not can_delete(thread, user.id, msg.from_user.id):
        return await msg.answer("⛔ Это не твой пост.")

    kb = InlineKeyboardMarkup(
        inline_keyboard=[[
            InlineKeyboardButton(text="✅ Да", callback_data=f"tdel_yes:{tid}"),
            InlineKeyboardButton(text="❌ Нет", callback_data=f"tdel_no:{tid}"),
        ]]
    )
    await msg.answer(f"⚠️ Удалить пост #{tid} и все ответы?", reply_markup=kb)


@threads_router.callback_query(F.data.startswith("tdel_yes:"))
async def delete_thread(cb: CallbackQuery, repo: ThreadRepository, store: RecordStore):
    tid = int(cb.data.split(":", 1)[1])
    try:
        thread = await store.find_by_id(Thread, tid)
        if thread is None:
            return await cb.answer("Пост уже удалён.", show_alert=True)
        user = await get_or_create_user(store, cb.from_user.id)
        if not can_delete(thread, user.id, cb.from_user.id):
            return await cb.answer("⛔ Это не твой пост.", show_alert=True)
        victims = await repo.delete_subtree(tid, path=FEED_PATH)
    except ThreadError as e:
        await cb.answer(report(e), show_alert=True)
        return await cb.message.delete()

    await cb.answer(f"✅ Удалено: {len(victims)}", show_alert=True)
    await cb.message.delete()


@threads_router.callback_query(F.data.startswith("tdel_no:"))
async def cancel_delete(cb: CallbackQuery):
    await cb.answer("❌ Отменено", show_alert=True)
    await cb.message.delete()
