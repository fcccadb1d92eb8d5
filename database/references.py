# database/references.py
from __future__ import annotations

import logging
from typing import Iterable

from database.group import Group
from database.store import RecordStore
from database.user import User

logger = logging.getLogger(__name__)


class CrossReferenceUpdater:
    """Retire des ids de threads supprimés des listes `threads` des users et des groupes."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def retract(self, victim_ids: Iterable[int], author_ids: Iterable[int],
                      group_ids: Iterable[int]) -> None:
        victim_ids = set(victim_ids)
        author_ids, group_ids = set(author_ids), set(group_ids)
        if not victim_ids:
            return

        # users / groupes disparus entre-temps : ignorés par le store
        users = await self.store.bulk_pull_from_array(User, author_ids, "threads", victim_ids)
        groups = await self.store.bulk_pull_from_array(Group, group_ids, "threads", victim_ids)
        logger.info(
            "Retracted %d thread ids from %d/%d users and %d/%d groups",
            len(victim_ids), users, len(author_ids), groups, len(group_ids),
        )
