# create_db.py
import asyncio

from config import DB_PATH
from database.database import init_db, make_engine


async def create() -> None:
    """Crée toutes les tables de la base (SQLite ou autre)."""
    engine = make_engine(DB_PATH)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()
    print("✅ Base de données initialisée avec succès.")

if __name__ == "__main__":
    asyncio.run(create())
