from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.database import Base, ThreadRefMixin


class UserThread(ThreadRefMixin, Base):
    __tablename__ = "user_threads"


class User(Base):
    """Auteurs des threads."""

    __tablename__ = "users"

    id:            Mapped[int]  = mapped_column(Integer, primary_key=True, autoincrement=True)
    # BigInteger pour couvrir tous les Telegram IDs
    telegram_id:   Mapped[int]  = mapped_column(BigInteger, unique=True, nullable=False)

    # профиль
    pseudo:        Mapped[str | None] = mapped_column(String(30), nullable=True)
    created_at                      = Column(DateTime(timezone=True), server_default=func.now())

    # posts publiés (ordre d'insertion, doublons tolérés)
    thread_refs:   Mapped[list[UserThread]] = relationship(
        primaryjoin="User.id == foreign(UserThread.owner_id)",
        order_by="UserThread.pos", lazy="selectin", viewonly=True,
    )

    __arrays__ = {"threads": UserThread}

    @property
    def threads(self) -> list[int]:
        return [r.thread_id for r in self.thread_refs]
