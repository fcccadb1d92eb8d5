import os
import tempfile
import unittest

import config


class ConfigTest(unittest.TestCase):
    def test_missing_yaml_gives_empty_config(self):
        self.assertEqual(config.load_yaml("/definitely/not/here.yml"), {})

    def test_yaml_is_parsed(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.yml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("admin_ids: [1, 2]\nfeed_page_size: 5\n")
            self.assertEqual(config.load_yaml(path), {"admin_ids": [1, 2], "feed_page_size": 5})

    def test_defaults(self):
        self.assertTrue(config.DB_PATH)
        self.assertGreater(config.FEED_PAGE_SIZE, 0)
        self.assertGreater(config.MAX_TEXT_LENGTH, 0)
