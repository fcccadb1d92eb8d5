import unittest
from unittest.mock import AsyncMock, Mock

from database.revalidate import Revalidator


class RevalidatorTest(unittest.IsolatedAsyncioTestCase):
    async def test_without_endpoint_nothing_is_scheduled(self):
        rv = Revalidator(None)
        rv.invalidate("/feed")
        self.assertEqual(rv._pending, set())
        await rv.close()

    async def test_unreachable_endpoint_is_ignored(self):
        # nothing listens on the discard port
        rv = Revalidator("http://127.0.0.1:9/revalidate", timeout=2)
        rv.invalidate("/feed")
        rv.invalidate("/thread/1")

        await rv.close()

        self.assertEqual(rv._pending, set())

    async def test_unexpected_errors_are_logged_not_raised(self):
        rv = Revalidator("http://cache.local/revalidate")
        rv._session = Mock(closed=False, close=AsyncMock())
        rv._session.post = Mock(side_effect=ValueError("bad header"))

        with self.assertLogs("database.revalidate", level="ERROR"):
            rv.invalidate("/feed")
            task = next(iter(rv._pending))
            await rv.close()

        self.assertIsNone(task.exception())
