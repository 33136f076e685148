"""
Repository base: one short-lived transaction per operation.

Key patterns:
1. Every public method opens its own transaction and commits before returning
2. Read misses return None, never raise
3. update() is an upsert; passing expected_version turns it into a
   compare-and-set that raises ConflictError on mismatch
4. Key collisions surface as DuplicateKeyError; every other storage failure,
   other constraint violations included, as StoreConnectionError
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import ClassVar, Generic, TypeVar

from sqlalchemy import inspect, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edunexus.db.base import Base
from edunexus.errors import ConflictError, DuplicateKeyError, StoreConnectionError
from edunexus.services.feed import ChangeFeed

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _is_key_collision(error: IntegrityError) -> bool:
    """UNIQUE or PRIMARY KEY violation, as opposed to NOT NULL, CHECK or FOREIGN KEY."""
    message = str(error.orig).upper()
    return "UNIQUE" in message or "PRIMARY KEY" in message


class Repository(Generic[ModelT]):
    """CRUD over one collection."""

    model: ClassVar[type[Base]]
    # Columns never written by update() (surrogate keys, etc.)
    immutable_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, sessions: async_sessionmaker[AsyncSession], feed: ChangeFeed | None = None):
        self._sessions = sessions
        self._feed = feed

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Open a session, commit on success, translate driver failures."""
        try:
            async with self._sessions.begin() as db:
                yield db
        except IntegrityError as e:
            if _is_key_collision(e):
                raise DuplicateKeyError(f"{self.model.__tablename__}: key already exists") from e
            logger.exception("Constraint violation on %s", self.model.__tablename__)
            raise StoreConnectionError() from e
        except SQLAlchemyError as e:
            logger.exception("Store operation on %s failed", self.model.__tablename__)
            raise StoreConnectionError() from e

    def _select(self):
        return select(self.model)

    def _changed(self, record: ModelT) -> None:
        """Hook: notify listeners about a write to ``record``."""

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    async def create(self, record: ModelT) -> ModelT:
        """Insert a new record; DuplicateKeyError if its key is taken."""
        async with self.transaction() as db:
            db.add(record)
        self._changed(record)
        return record

    async def read(self, key: str) -> ModelT | None:
        async with self.transaction() as db:
            result = await db.execute(self._select().where(self.model.id == key))
            return result.scalar_one_or_none()

    async def read_all(self) -> list[ModelT]:
        async with self.transaction() as db:
            result = await db.execute(self._select())
            return list(result.scalars())

    async def update(self, record: ModelT, *, expected_version: int | None = None) -> ModelT:
        """
        Write ``record`` over the stored copy, or insert it if missing.

        Without ``expected_version`` this is an unconditional upsert: the last
        writer wins. With it, the write only applies when the stored version
        still matches; otherwise ConflictError is raised and nothing changes.
        """
        values = self._column_values(record)
        async with self.transaction() as db:
            stmt = update(self.model).where(self.model.id == record.id)
            if expected_version is not None:
                stmt = stmt.where(self.model.version == expected_version)
            stmt = stmt.values(**values, version=self.model.version + 1).execution_options(
                synchronize_session=False
            )
            result = await db.execute(stmt)

            if result.rowcount == 0:
                if expected_version is not None:
                    raise ConflictError()
                db.add(self.model(**values, version=1))
                await db.flush()

            stored = await db.execute(self._select().where(self.model.id == record.id))
            saved = stored.scalar_one()

        self._changed(saved)
        return saved

    async def delete(self, key: str) -> None:
        """Remove a record; deleting a missing key is not an error."""
        async with self.transaction() as db:
            result = await db.execute(self._select().where(self.model.id == key))
            record = result.scalar_one_or_none()
            if record is None:
                return
            await db.delete(record)
        self._changed(record)

    def _column_values(self, record: ModelT) -> dict:
        """Columns set on ``record``; unset ones keep their stored value or default."""
        skip = {"version", *self.immutable_fields}
        present = inspect(record).dict
        return {
            attr.key: present[attr.key]
            for attr in inspect(self.model).column_attrs
            if attr.key in present and attr.key not in skip
        }
