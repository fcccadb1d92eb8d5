# handlers/admin.py
from __future__ import annotations

from aiogram import Router, F
from aiogram.types import Message

from config import ADMINS
from database.errors import StoreUnavailable
from database.repair import repair_references
from database.store import RecordStore
from handlers.render import explain

admin_router = Router()


@admin_router.message(F.text == "/repair")
async def cmd_repair(msg: Message, store: RecordStore):
    if msg.from_user.id not in ADMINS:
        return await msg.answer("⛔ Только для админов.")
    try:
        rep = await repair_references(store)
    except StoreUnavailable as e:
        return await msg.answer(explain(e))
    if rep.clean:
        return await msg.answer("✅ Ссылки в порядке.")
    await msg.answer(
        f"🛠 Удалено {len(rep.stale_ids)} мёртвых ссылок "
        f"(профили: {rep.users_fixed}, группы: {rep.groups_fixed})."
    )
