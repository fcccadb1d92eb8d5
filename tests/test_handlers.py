import asyncio
import unittest
from datetime import datetime
from unittest.mock import AsyncMock, Mock

from database.feed import FeedService
from database.thread import Thread
from database.user import User
from database.views import ThreadView
from handlers.feed import feed_page, parse_page
from handlers.onboarding import name_handler
from handlers.render import render_thread
from handlers.threads import can_delete, cmd_post, cmd_reply, parse_id_and_text, parse_post_args
from tests.base import StoreTestCase


def fake_message(tg_id: int = 42) -> Mock:
    msg = Mock()
    msg.from_user = Mock(id=tg_id)
    msg.answer = AsyncMock()
    return msg


class ParsingTest(unittest.TestCase):
    def test_post_args(self):
        self.assertEqual(parse_post_args("#physics hello world"), ("physics", "hello world"))
        self.assertEqual(parse_post_args("hello"), (None, "hello"))
        self.assertEqual(parse_post_args(None), (None, ""))

    def test_id_and_text(self):
        self.assertEqual(parse_id_and_text("12 thanks!"), (12, "thanks!"))
        self.assertEqual(parse_id_and_text("#7"), (7, ""))
        self.assertEqual(parse_id_and_text("abc"), (None, ""))

    def test_page(self):
        self.assertEqual(parse_page(None), 1)
        self.assertEqual(parse_page(" 3 "), 3)
        self.assertEqual(parse_page("x"), 1)

    def test_can_delete(self):
        thread = Thread(id=1, text="t", author_id=5)
        self.assertTrue(can_delete(thread, 5, 1000))
        self.assertFalse(can_delete(thread, 6, 1000))

    def test_render_thread_escapes_and_lists_replies(self):
        view = ThreadView(id=1, text="<b>hi</b>", author_id=1, group_id=None, parent_id=None,
                          child_ids=[2], created_at=datetime(2024, 1, 1),
                          author=User(id=1, telegram_id=1, pseudo="alice"))
        view.children = [ThreadView(id=2, text="reply", author_id=9, group_id=None, parent_id=1,
                                    child_ids=[], created_at=datetime(2024, 1, 2))]
        out = render_thread(view)
        self.assertIn("&lt;b&gt;hi&lt;/b&gt;", out)
        self.assertIn("#2 (удалён): reply", out)


class CommandTest(StoreTestCase):
    async def test_post_then_reply(self):
        msg = fake_message()
        await cmd_post(msg, Mock(args="#nowhere first post"), repo=self.repo, store=self.store)

        answer = msg.answer.await_args.args[0]
        self.assertIn("✅ Пост #1", answer)
        self.assertIn("#nowhere", answer)

        msg = fake_message(43)
        await cmd_reply(msg, Mock(args="1 welcome"), repo=self.repo, store=self.store)
        self.assertIn("✅ Ответ #2", msg.answer.await_args.args[0])
        view = await self.repo.fetch_by_id(1)
        self.assertEqual([c.id for c in view.children], [2])

    async def test_reply_to_missing_post(self):
        msg = fake_message()
        await cmd_reply(msg, Mock(args="99 hello"), repo=self.repo, store=self.store)
        self.assertIn("⛔", msg.answer.await_args.args[0])

    async def test_empty_post_is_rejected(self):
        msg = fake_message()
        await cmd_post(msg, Mock(args="   "), repo=self.repo, store=self.store)
        self.assertIn("❌", msg.answer.await_args.args[0])
        self.assertEqual(await self.store.count(Thread), 0)

    async def test_feed_page_navigation(self):
        msg = fake_message()
        for i in range(3):
            await cmd_post(msg, Mock(args=f"post {i}"), repo=self.repo, store=self.store)

        text, kb = await feed_page(FeedService(self.store, default_page_size=2), 1)

        self.assertIn("post 2", text)
        self.assertNotIn("post 0", text)
        self.assertEqual([b.callback_data for b in kb.inline_keyboard[0]], ["feed:2"])

    async def test_same_new_user_posting_twice_at_once(self):
        first, second = fake_message(), fake_message()

        await asyncio.gather(
            cmd_post(first, Mock(args="a"), repo=self.repo, store=self.store),
            cmd_post(second, Mock(args="b"), repo=self.repo, store=self.store),
        )

        for msg in (first, second):
            self.assertIn("✅", msg.answer.await_args.args[0])
        self.assertEqual(await self.store.count(User), 1)
        self.assertEqual(await self.store.count(Thread), 2)

    async def test_name_command(self):
        msg = fake_message()
        await name_handler(msg, Mock(args="einstein"), store=self.store)
        self.assertIn("einstein", msg.answer.await_args.args[0])
        user = await self.store.find_one(User, {"telegram_id": 42})
        self.assertEqual(user.pseudo, "einstein")

        await name_handler(msg, Mock(args="two words"), store=self.store)
        self.assertIn("❌", msg.answer.await_args.args[0])
