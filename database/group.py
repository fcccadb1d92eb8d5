# database/group.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.database import Base, ThreadRefMixin


class GroupThread(ThreadRefMixin, Base):
    __tablename__ = "group_threads"


class Group(Base):
    __tablename__ = "groups"

    id:      Mapped[int]        = mapped_column(Integer, primary_key=True, autoincrement=True)
    code:    Mapped[str]        = mapped_column(String(64), unique=True, nullable=False)   # code externe (#code)
    name:    Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at                  = Column(DateTime(timezone=True), server_default=func.now())

    thread_refs: Mapped[list[GroupThread]] = relationship(
        primaryjoin="Group.id == foreign(GroupThread.owner_id)",
        order_by="GroupThread.pos", lazy="selectin", viewonly=True,
    )

    __arrays__ = {"threads": GroupThread}

    @property
    def threads(self) -> list[int]:
        return [r.thread_id for r in self.thread_refs]
