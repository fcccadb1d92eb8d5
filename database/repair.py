# database/repair.py
"""
Passage de réparation après une PartialCascadeFailure : retire des listes
`threads` (users et groupes) les ids qui n'existent plus. Ne supprime jamais de thread.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from database.group import Group
from database.store import RecordStore
from database.thread import Thread
from database.user import User

logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    stale_ids: set[int] = field(default_factory=set)
    users_fixed: int = 0
    groups_fixed: int = 0

    @property
    def clean(self) -> bool:
        return not self.stale_ids


async def repair_references(store: RecordStore) -> RepairReport:
    report = RepairReport()
    owners = {User: await store.find(User), Group: await store.find(Group)}

    referenced = {tid for rows in owners.values() for r in rows for tid in (r.threads or [])}
    if not referenced:
        return report
    alive = {t.id for t in await store.find(Thread, {"id": referenced})}
    report.stale_ids = referenced - alive
    if report.clean:
        logger.info("Repair: %d references checked, nothing stale", len(referenced))
        return report

    for model, rows in owners.items():
        dirty = [r.id for r in rows if report.stale_ids & set(r.threads or [])]
        fixed = await store.bulk_pull_from_array(model, dirty, "threads", report.stale_ids)
        if model is User:
            report.users_fixed = fixed
        else:
            report.groups_fixed = fixed

    logger.warning(
        "Repair: removed stale ids %s from %d users and %d groups",
        sorted(report.stale_ids), report.users_fixed, report.groups_fixed,
    )
    return report
