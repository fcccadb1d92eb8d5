import tempfile
import unittest
from datetime import datetime, timedelta

from database.database import init_db, make_engine, make_session_factory
from database.repository import ThreadRepository
from database.store import RecordStore
from database.utils import create_group, create_user_stub
from tests.recording_revalidator import RecordingRevalidator


class StepClock:
    """Strictly increasing timestamps, one second apart."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh SQLite file per test, with a repository wired to a recording revalidator."""

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.engine = make_engine(f"sqlite+aiosqlite:///{self._tmp.name}/test.db")
        await init_db(self.engine)
        self.store = RecordStore(make_session_factory(self.engine))
        self.revalidator = RecordingRevalidator()
        self.clock = StepClock()
        self.repo = ThreadRepository(self.store, self.revalidator, clock=self.clock)

    async def asyncTearDown(self):
        await self.engine.dispose()
        self._tmp.cleanup()

    async def make_user(self, tg_id: int):
        return await create_user_stub(self.store, tg_id)

    async def make_group(self, code: str = "physics"):
        return await create_group(self.store, code, name=code.title())
