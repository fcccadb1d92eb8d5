# database/repository.py
"""
Cœur « threads » : création de posts et de réponses, lecture peuplée,
expansion de sous-arbre et suppression en cascade.

Aucune transaction ne couvre la cascade : la suppression des threads est tentée
une fois l'ensemble des victimes calculé, la rétractation des références ensuite.
Une réponse attachée dans l'intervalle survit, orpheline.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from database.errors import NotFound, PartialCascadeFailure, StoreUnavailable, ValidationFailed
from database.group import Group
from database.references import CrossReferenceUpdater
from database.revalidate import Revalidator
from database.store import RecordStore
from database.thread import Thread
from database.user import User
from database.utils import resolve_group_by_code
from database.views import ThreadView, populate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThreadRepository:
    def __init__(self, store: RecordStore,
                 revalidator: Revalidator | None = None,
                 references: CrossReferenceUpdater | None = None,
                 max_text_length: int = 500,
                 clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.revalidator = revalidator
        self.references = references or CrossReferenceUpdater(store)
        self.max_text_length = max_text_length
        self.clock = clock

    # ───────────────────────────────  HELPERS  ────────────────────────────────
    def _clean_text(self, text: str | None) -> str:
        text = (text or "").strip()
        if not text:
            raise ValidationFailed("text is empty")
        if len(text) > self.max_text_length:
            raise ValidationFailed(f"text longer than {self.max_text_length} chars")
        return text

    @staticmethod
    def _require_id(value, name: str) -> int:
        if value is None:
            raise ValidationFailed(f"{name} is required")
        return value

    def _revalidate(self, path: str | None) -> None:
        if self.revalidator is None or not path:
            return
        try:
            self.revalidator.invalidate(path)
        except Exception as e:  # fire-and-forget
            logger.warning("revalidate %s ignored: %s", path, e)

    # ───────────────────────────────  CRÉATION  ───────────────────────────────
    async def create_root(self, text: str, author_id: int, group_code: str | None = None,
                          path: str | None = "/") -> Thread:
        text = self._clean_text(text)
        author_id = self._require_id(author_id, "author_id")

        group_id = await resolve_group_by_code(self.store, group_code)
        if group_code and group_id is None:
            logger.info("Group %r unknown, thread stays personal", group_code)

        thread = await self.store.insert(
            Thread, text=text, author_id=author_id, group_id=group_id,
            parent_id=None, created_at=self.clock(),
        )

        if not await self.store.append_to_array(User, author_id, "threads", thread.id):
            logger.warning("Author %s not found, thread %s not listed on a profile", author_id, thread.id)
        if group_id is not None:
            await self.store.append_to_array(Group, group_id, "threads", thread.id)

        logger.info("Thread %s created by %s (group=%s)", thread.id, author_id, group_id)
        self._revalidate(path)
        return thread

    async def create_reply(self, parent_id: int, text: str, author_id: int,
                           path: str | None = "/") -> Thread:
        text = self._clean_text(text)
        parent_id = self._require_id(parent_id, "parent_id")
        author_id = self._require_id(author_id, "author_id")

        parent = await self.store.find_by_id(Thread, parent_id)
        if parent is None:
            raise NotFound(f"thread {parent_id} not found")

        # 1) la réponse d'abord, 2) puis le lien côté parent
        reply = await self.store.insert(
            Thread, text=text, author_id=author_id, group_id=None,
            parent_id=parent.id, created_at=self.clock(),
        )
        if not await self.store.append_to_array(Thread, parent.id, "children", reply.id):
            logger.warning("Parent %s vanished before reply %s was attached", parent.id, reply.id)

        logger.info("Reply %s attached to %s by %s", reply.id, parent.id, author_id)
        self._revalidate(path)
        return reply

    # ───────────────────────────────  LECTURE  ────────────────────────────────
    async def fetch_by_id(self, thread_id: int, depth: int = 2) -> ThreadView:
        thread_id = self._require_id(thread_id, "thread_id")
        thread = await self.store.find_by_id(Thread, thread_id)
        if thread is None:
            raise NotFound(f"thread {thread_id} not found")
        [view] = await populate(self.store, [thread], depth=depth)
        return view

    async def expand_subtree(self, root_id: int) -> list[Thread]:
        """
        Tous les descendants de `root_id` (exclu), en pré-ordre : un parent avant ses descendants.

        Un aller-retour au store par niveau. Un nœud déjà visité n'est jamais revisité.
        """
        seen = {root_id}
        frontier = [root_id]
        kids: dict[int, list[Thread]] = {}

        while frontier:
            level = await self.store.find(
                Thread, {"parent_id": frontier}, sort=[("created_at", "asc"), ("id", "asc")]
            )
            frontier = []
            for t in level:
                if t.id in seen:
                    logger.warning("Thread %s reached twice under %s, cycle skipped", t.id, root_id)
                    continue
                seen.add(t.id)
                kids.setdefault(t.parent_id, []).append(t)
                frontier.append(t.id)

        out: list[Thread] = []
        stack = list(reversed(kids.get(root_id, [])))
        while stack:
            t = stack.pop()
            out.append(t)
            stack.extend(reversed(kids.get(t.id, [])))
        return out

    # ───────────────────────────────  SUPPRESSION  ────────────────────────────
    async def delete_subtree(self, root_id: int, path: str | None = "/") -> set[int]:
        root_id = self._require_id(root_id, "root_id")
        root = await self.store.find_by_id(Thread, root_id)
        if root is None:
            raise NotFound(f"thread {root_id} not found")

        descendants = await self.expand_subtree(root.id)
        members = [root, *descendants]

        victim_ids = {t.id for t in members}
        author_ids = {t.author_id for t in members if t.author_id is not None}
        group_ids = {t.group_id for t in members if t.group_id is not None}

        deleted = await self.store.delete_many(Thread, victim_ids)
        logger.info("Deleted subtree of %s: %d threads", root.id, deleted)

        try:
            await self.references.retract(victim_ids, author_ids, group_ids)
        except (StoreUnavailable, SQLAlchemyError) as e:
            logger.error("Reference retraction failed, stale ids %s: %s", sorted(victim_ids), e)
            self._revalidate(path)
            raise PartialCascadeFailure(victim_ids, e) from e

        self._revalidate(path)
        return victim_ids

    # ───────────────────────────────  PROFIL  ─────────────────────────────────
    async def list_user_threads(self, user_id: int) -> list[ThreadView]:
        user = await self.store.find_by_id(User, self._require_id(user_id, "user_id"))
        if user is None:
            raise NotFound(f"user {user_id} not found")

        order = list(dict.fromkeys(user.threads or []))
        if not order:
            return []
        by_id = {t.id: t for t in await self.store.find(Thread, {"id": order})}
        return await populate(self.store, [by_id[i] for i in order if i in by_id], depth=1)

    async def get_activity(self, user_id: int) -> list[ThreadView]:
        """Réponses des autres sous les threads de `user_id`, les plus récentes d'abord."""
        user_id = self._require_id(user_id, "user_id")
        own = await self.store.find(Thread, {"author_id": user_id})
        child_ids = {cid for t in own for cid in (t.children or [])}
        if not child_ids:
            return []
        replies = [
            t for t in await self.store.find(
                Thread, {"id": child_ids}, sort=[("created_at", "desc"), ("id", "desc")]
            )
            if t.author_id != user_id
        ]
        return await populate(self.store, replies, depth=0, with_group=False)
