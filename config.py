import os
import yaml
from dotenv import load_dotenv

load_dotenv()

# Charge fichier YAML (optionnel)
CONFIG_PATH = os.getenv("CONFIG_PATH", "config.yml")


def load_yaml(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


cfg = load_yaml(CONFIG_PATH)

# Secrets et connexions
TOKEN = os.getenv("TELEGRAM_TOKEN")
DB_PATH = os.getenv("DB_PATH", "sqlite+aiosqlite:///db.sqlite3")
REVALIDATE_URL = os.getenv("REVALIDATE_URL") or cfg.get("revalidate_url")

# IDs Telegram
ADMINS = set(cfg.get("admin_ids", []))

# Constantes métier
FEED_PAGE_SIZE = int(cfg.get("feed_page_size", 20))
MAX_TEXT_LENGTH = int(cfg.get("max_text_length", 500))
FEED_PATH = cfg.get("feed_path", "/")
REPAIR_CRON = cfg.get("repair_cron", "15 3 * * *")
LOG_LEVEL = os.getenv("LOG_LEVEL", cfg.get("log_level", "INFO"))
