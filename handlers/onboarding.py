# handlers/onboarding.py
import re

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from database.errors import StoreUnavailable
from database.store import RecordStore
from database.user import User
from database.utils import get_or_create_user
from handlers.render import explain

onboarding_router = Router()
PSEUDO_RE = re.compile(r"^(?!/)[^\s]{1,30}$", re.UNICODE)

HELP = (
    "/name псевдоним — сменить псевдоним\n"
    "/post [#группа] текст — новый пост\n"
    "/reply id текст — ответить\n"
    "/thread id — открыть обсуждение\n"
    "/feed [страница] — лента\n"
    "/myposts — мои посты\n"
    "/activity — ответы мне\n"
    "/delete id — удалить пост и все ответы"
)


@onboarding_router.message(CommandStart())
async def start_handler(msg: Message, store: RecordStore):
    try:
        user = await get_or_create_user(store, msg.from_user.id)
    except StoreUnavailable as e:
        return await msg.answer(explain(e))
    await msg.answer(f"👋 Привет, <b>{user.pseudo}</b>!\n\n{HELP}")


# ─────────────────────────────── псевдоним ───────────────────────────────
@onboarding_router.message(Command("name"))
async def name_handler(msg: Message, command: CommandObject, store: RecordStore):
    pseudo = (command.args or "").strip()
    if not PSEUDO_RE.match(pseudo):
        return await msg.answer("❌ Псевдоним: 1–30 символов, без пробелов.")
    try:
        user = await get_or_create_user(store, msg.from_user.id)
        await store.update_one(User, user.id, pseudo=pseudo)
    except StoreUnavailable as e:
        return await msg.answer(explain(e))
    await msg.answer(f"✅ Теперь ты <b>{pseudo}</b>.")
