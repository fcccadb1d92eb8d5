# database/thread.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database.database import Base, ThreadRefMixin


class ThreadChild(ThreadRefMixin, Base):
    __tablename__ = "thread_children"


class Thread(Base):
    """Un nœud de la forêt de discussions : post racine ou réponse."""

    __tablename__ = "threads"

    id:         Mapped[int]        = mapped_column(Integer, primary_key=True, autoincrement=True)
    text:       Mapped[str]        = mapped_column(Text, nullable=False)
    author_id:  Mapped[int]        = mapped_column(Integer, nullable=False, index=True)
    # références « molles » : pas de ForeignKey, une id morte = absente
    group_id:   Mapped[int | None] = mapped_column(Integer, nullable=True)
    parent_id:  Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)   # None = post racine
    created_at: Mapped[datetime]   = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    # ordre des réponses, modifié uniquement par l'ajout d'une réponse
    child_refs: Mapped[list[ThreadChild]] = relationship(
        primaryjoin="Thread.id == foreign(ThreadChild.owner_id)",
        order_by="ThreadChild.pos", lazy="selectin", viewonly=True,
    )

    __arrays__ = {"children": ThreadChild}

    @property
    def children(self) -> list[int]:
        return [r.thread_id for r in self.child_refs]

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def __repr__(self) -> str:
        return f"<Thread #{self.id} parent={self.parent_id} author={self.author_id}>"
