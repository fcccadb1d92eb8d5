# database/views.py
"""Vues « peuplées » des threads : auteur, groupe et enfants résolus niveau par niveau."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from database.group import Group
from database.store import RecordStore
from database.thread import Thread
from database.user import User


@dataclass
class ThreadView:
    id: int
    text: str
    author_id: int
    group_id: int | None
    parent_id: int | None
    child_ids: list[int]
    created_at: datetime
    author: User | None = None
    group: Group | None = None
    children: list[ThreadView] = field(default_factory=list)

    @classmethod
    def of(cls, t: Thread) -> ThreadView:
        return cls(
            id=t.id, text=t.text, author_id=t.author_id, group_id=t.group_id,
            parent_id=t.parent_id, child_ids=list(t.children or []), created_at=t.created_at,
        )

    def walk(self):
        """Pré-ordre sur la partie déjà peuplée."""
        stack = [self]
        while stack:
            v = stack.pop()
            yield v
            stack.extend(reversed(v.children))


async def populate(store: RecordStore, threads: Sequence[Thread], depth: int = 1,
                   with_group: bool = True) -> list[ThreadView]:
    """
    Un aller-retour par niveau d'enfants, puis un pour les auteurs et un pour les groupes.
    Les références qui ne résolvent plus (enfant supprimé, auteur parti…) sont traitées comme absentes.
    """
    top = [ThreadView.of(t) for t in threads]

    level = top
    for _ in range(depth):
        wanted = {cid for v in level for cid in v.child_ids}
        if not wanted:
            break
        by_id = {t.id: t for t in await store.find(Thread, {"id": wanted})}
        nxt = []
        for v in level:
            v.children = [ThreadView.of(by_id[cid]) for cid in dict.fromkeys(v.child_ids) if cid in by_id]
            nxt.extend(v.children)
        level = nxt

    views = [v for root in top for v in root.walk()]
    author_ids = {v.author_id for v in views if v.author_id is not None}
    if author_ids:
        authors = {u.id: u for u in await store.find(User, {"id": author_ids})}
        for v in views:
            v.author = authors.get(v.author_id)

    if with_group:
        group_ids = {v.group_id for v in top if v.group_id is not None}
        if group_ids:
            groups = {g.id: g for g in await store.find(Group, {"id": group_ids})}
            for v in top:
                v.group = groups.get(v.group_id) if v.group_id is not None else None

    return top
