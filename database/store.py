# database/store.py
"""
Frontière de persistance : un petit contrat « document » au-dessus de SQLAlchemy async.

Filtres : dict {champ: valeur}
- None                  -> champ IS NULL
- set / list / tuple    -> champ IN (...)
- autre                 -> champ == valeur
Tri : liste de (champ, "asc" | "desc").

Les listes d'ids (`User.threads`, `Group.threads`, `Thread.children`) vivent dans des
tables de liens déclarées par `model.__arrays__` : un push est un seul INSERT, un pull
un seul DELETE, jamais un lire-modifier-réécrire.

Toute panne du driver remonte en StoreUnavailable.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Iterable, Sequence

from sqlalchemy import Integer, delete, exists, func, insert, literal, select, update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.errors import StoreUnavailable

logger = logging.getLogger(__name__)

_UNAVAILABLE = (OperationalError, InterfaceError, PoolTimeoutError, OSError, asyncio.TimeoutError)


def _where(model, filt: dict[str, Any] | None) -> list:
    clauses = []
    for field, value in (filt or {}).items():
        col = getattr(model, field)
        if value is None:
            clauses.append(col.is_(None))
        elif isinstance(value, (set, frozenset, list, tuple)):
            clauses.append(col.in_(list(value)))
        else:
            clauses.append(col == value)
    return clauses


class RecordStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ───────────────────────────────  SESSION  ────────────────────────────────
    @asynccontextmanager
    async def session(self, op: str = "store"):
        try:
            async with self._session_factory() as ses:
                yield ses
        except _UNAVAILABLE as e:
            logger.warning("Store call %s failed: %s", op, e)
            raise StoreUnavailable(f"{op}: {e}") from e

    # ───────────────────────────────  ÉCRITURE  ───────────────────────────────
    async def insert(self, model, **fields):
        async with self.session("insert") as ses:
            obj = model(**fields)
            ses.add(obj)
            await ses.commit()
            # charge les défauts serveur et les listes (vides) avant de détacher l'objet
            await ses.refresh(obj)
            return obj

    async def update_one(self, model, obj_id: int, **values) -> bool:
        async with self.session("update_one") as ses:
            res = await ses.execute(update(model).where(model.id == obj_id).values(**values))
            await ses.commit()
            return res.rowcount > 0

    @staticmethod
    def _array(model, field: str):
        try:
            return model.__arrays__[field]
        except (AttributeError, KeyError):
            raise ValueError(f"{model.__name__}.{field} is not an id list") from None

    async def append_to_array(self, model, obj_id: int, field: str, value: Any) -> bool:
        """
        Ajoute `value` en fin de liste, en un seul INSERT … SELECT … WHERE EXISTS.
        False si le document n'existe pas.
        """
        ref = self._array(model, field)
        src = select(literal(obj_id, Integer), literal(value, Integer)).where(
            exists().where(model.id == obj_id)
        )
        async with self.session("append_to_array") as ses:
            res = await ses.execute(insert(ref).from_select(["owner_id", "thread_id"], src))
            await ses.commit()
            return res.rowcount > 0

    async def delete_many(self, model, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        async with self.session("delete_many") as ses:
            res = await ses.execute(delete(model).where(model.id.in_(ids)))
            # les listes possédées par les documents supprimés partent avec eux
            for ref in getattr(model, "__arrays__", {}).values():
                await ses.execute(delete(ref).where(ref.owner_id.in_(ids)))
            await ses.commit()
            return res.rowcount

    async def bulk_pull_from_array(self, model, ids: Iterable[int], field: str,
                                   values: Iterable[Any]) -> int:
        """
        Retire toutes les occurrences de `values` de la liste `field` des documents `ids`,
        en un seul DELETE. Les documents absents sont ignorés.
        Retourne le nombre de documents touchés.
        """
        ids, drop = list(ids), list(set(values))
        if not ids or not drop:
            return 0
        ref = self._array(model, field)
        async with self.session("bulk_pull_from_array") as ses:
            hit = (ref.owner_id.in_(ids), ref.thread_id.in_(drop))
            owners = set((await ses.scalars(select(ref.owner_id).distinct().where(*hit))).all())
            await ses.execute(delete(ref).where(*hit))
            await ses.commit()
        logger.debug("Pulled %d ids from %d %s", len(drop), len(owners), model.__tablename__)
        return len(owners)

    # ───────────────────────────────  LECTURE  ────────────────────────────────
    async def find_by_id(self, model, obj_id: int):
        async with self.session("find_by_id") as ses:
            return await ses.get(model, obj_id)

    async def find(self, model, filt: dict[str, Any] | None = None,
                   sort: Sequence[tuple[str, str]] = (),
                   skip: int = 0, limit: int | None = None) -> list:
        stmt = select(model).where(*_where(model, filt))
        for field, direction in sort:
            col = getattr(model, field)
            stmt = stmt.order_by(col.desc() if direction == "desc" else col.asc())
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self.session("find") as ses:
            return list((await ses.scalars(stmt)).all())

    async def find_one(self, model, filt: dict[str, Any] | None = None):
        rows = await self.find(model, filt, limit=1)
        return rows[0] if rows else None

    async def count(self, model, filt: dict[str, Any] | None = None) -> int:
        stmt = select(func.count()).select_from(model).where(*_where(model, filt))
        async with self.session("count") as ses:
            return (await ses.scalar(stmt)) or 0
