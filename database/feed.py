# database/feed.py
from __future__ import annotations

from database.store import RecordStore
from database.thread import Thread
from database.views import ThreadView, populate

ROOTS = {"parent_id": None}


class FeedService:
    """Liste paginée des posts racine, du plus récent au plus ancien."""

    def __init__(self, store: RecordStore, default_page_size: int = 20):
        self.store = store
        self.default_page_size = default_page_size

    async def list_roots(self, page: int = 1, page_size: int | None = None) -> tuple[list[ThreadView], bool]:
        # page <= 0 et page_size <= 0 sont ramenés à 1
        page = max(1, int(page or 1))
        page_size = max(1, int(self.default_page_size if page_size is None else page_size))
        skip = (page - 1) * page_size

        threads = await self.store.find(
            Thread, ROOTS, sort=[("created_at", "desc"), ("id", "desc")], skip=skip, limit=page_size,
        )
        total = await self.store.count(Thread, ROOTS)
        views = await populate(self.store, threads, depth=1)
        return views, total > skip + len(views)
