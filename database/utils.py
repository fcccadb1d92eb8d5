from __future__ import annotations
import re

from sqlalchemy.exc import IntegrityError

from database.store import RecordStore
from database.user import User
from database.group import Group


# ───────────────────────────────  USERS  ──────────────────────────────────
async def get_user(store: RecordStore, telegram_id: int) -> User | None:
    return await store.find_one(User, {"telegram_id": telegram_id})


_ANON_RE = re.compile(r"^_anon(\d*)$")   # capte suffixe numérique (optionnel)

async def create_user_stub(store: RecordStore, tg_id: int) -> User:
    """
    Ajoute _anon, _anon2, _anon3… sans collision.
    """
    users = await store.find(User)
    max_n = 0
    for u in users:
        m = _ANON_RE.match(u.pseudo or "")
        if m:
            n = int(m.group(1) or 1)   # _anon => 1
            max_n = max(max_n, n)

    next_pseudo = "_anon" if max_n == 0 else f"_anon{max_n + 1}"
    return await store.insert(User, telegram_id=tg_id, pseudo=next_pseudo)


async def get_or_create_user(store: RecordStore, tg_id: int) -> User:
    user = await get_user(store, tg_id)
    if user is not None:
        return user
    try:
        return await create_user_stub(store, tg_id)
    except IntegrityError:
        # premier message en double : l'autre requête a créé le profil
        user = await get_user(store, tg_id)
        if user is None:
            raise
        return user


# ───────────────────────────────  GROUPS  ─────────────────────────────────
async def create_group(store: RecordStore, code: str, name: str | None = None) -> Group:
    return await store.insert(Group, code=code.strip().lstrip("#").lower(), name=name)


async def resolve_group_by_code(store: RecordStore, code: str | None) -> int | None:
    """Code externe (#code) -> id interne, None si inconnu ou vide."""
    code = (code or "").strip().lstrip("#").lower()
    if not code:
        return None
    group = await store.find_one(Group, {"code": code})
    return group.id if group else None
