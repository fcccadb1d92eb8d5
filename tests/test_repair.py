from database.group import Group
from database.repair import repair_references
from database.user import User
from tests.base import StoreTestCase


class RepairTest(StoreTestCase):
    async def test_nothing_to_repair(self):
        alice = await self.make_user(1)
        await self.repo.create_root("hello", alice.id)

        report = await repair_references(self.store)

        self.assertTrue(report.clean)
        self.assertEqual(report.users_fixed, 0)

    async def test_stale_ids_are_pulled_and_live_ones_kept(self):
        alice = await self.make_user(1)
        bob = await self.make_user(2)
        group = await self.make_group()
        live = await self.repo.create_root("live", alice.id, "physics")
        await self.store.append_to_array(User, alice.id, "threads", 500)
        await self.store.append_to_array(Group, group.id, "threads", 501)
        await self.store.append_to_array(User, bob.id, "threads", live.id)

        report = await repair_references(self.store)

        self.assertEqual(report.stale_ids, {500, 501})
        self.assertEqual((report.users_fixed, report.groups_fixed), (1, 1))
        self.assertEqual((await self.store.find_by_id(User, alice.id)).threads, [live.id])
        self.assertEqual((await self.store.find_by_id(User, bob.id)).threads, [live.id])
        self.assertEqual((await self.store.find_by_id(Group, group.id)).threads, [live.id])
