# database/revalidate.py
from __future__ import annotations

import asyncio
import logging

import aiohttp

logger = logging.getLogger(__name__)


class Revalidator:
    """
    Invalidation du cache de pages, « fire-and-forget ».
    Sans URL configurée on se contente de logger. Les échecs sont loggés puis ignorés.
    """

    def __init__(self, url: str | None = None, timeout: float = 5.0):
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None
        self._pending: set[asyncio.Task] = set()

    def invalidate(self, path: str) -> None:
        if not self.url:
            logger.debug("revalidate %s (no endpoint configured)", path)
            return
        task = asyncio.get_running_loop().create_task(self._post(path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, path: str) -> None:
        try:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
            async with self._session.post(self.url, json={"path": path}) as resp:
                if resp.status >= 400:
                    logger.warning("revalidate %s -> HTTP %s", path, resp.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("revalidate %s failed: %s", path, e)
        except Exception:
            logger.exception("revalidate %s failed", path)

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._session is not None and not self._session.closed:
            await self._session.close()
