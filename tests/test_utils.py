import asyncio

from database.user import User
from database.utils import get_or_create_user, resolve_group_by_code
from tests.base import StoreTestCase


class UserUtilsTest(StoreTestCase):
    async def test_concurrent_first_contact_creates_one_user(self):
        first, second = await asyncio.gather(
            get_or_create_user(self.store, 42), get_or_create_user(self.store, 42),
        )

        self.assertEqual(first.id, second.id)
        self.assertEqual(await self.store.count(User, {"telegram_id": 42}), 1)

    async def test_stub_pseudos_do_not_collide(self):
        users = [await get_or_create_user(self.store, tg) for tg in (1, 2, 3)]
        self.assertEqual([u.pseudo for u in users], ["_anon", "_anon2", "_anon3"])

    async def test_group_codes(self):
        group = await self.make_group("Physics")
        self.assertEqual(await resolve_group_by_code(self.store, "#physics"), group.id)
        self.assertIsNone(await resolve_group_by_code(self.store, "chemistry"))
        self.assertIsNone(await resolve_group_by_code(self.store, "  "))
