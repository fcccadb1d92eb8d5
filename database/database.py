# database/database.py
from sqlalchemy import Integer
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# 1. Créer Base tout de suite
Base = declarative_base()


class ThreadRefMixin:
    """
    Une ligne = une entrée de liste d'ids de threads (push = INSERT, pull = DELETE).
    `pos` donne l'ordre d'insertion, les doublons sont permis.
    """

    pos:       Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id:  Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    thread_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


# 2. Engine + sessions : créés une seule fois par le process (bot.main / create_db)
def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# 3. Importer les modèles APRÈS (ils verront déjà Base)
from database import user, group, thread   # noqa: E402,F401


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
