from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import aiosqlite

from ..errors import StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class SqliteEventBackend:
    """Async SQLite connection shared by the event store and the chat transcript."""

    db_path: Path
    _db: Optional[aiosqlite.Connection] = field(default=None, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self._db is not None

    async def open(self) -> None:
        if self._db is not None:
            return
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(str(self.db_path))
            self._db.row_factory = aiosqlite.Row
        except (aiosqlite.Error, OSError) as exc:
            self._db = None
            raise StorageUnavailableError(f"Cannot open database {self.db_path}: {exc}") from exc
        logger.info("SQLite backend opened: %s", self.db_path)

    async def close(self) -> None:
        if self._db is None:
            return
        await self._db.close()
        self._db = None
        logger.info("SQLite backend closed: %s", self.db_path)

    def connection(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StorageUnavailableError("SQLite backend has not been opened. Call open() first.")
        return self._db

    async def execute_schema(self, ddl: str) -> None:
        db = self.connection()
        try:
            await db.executescript(ddl)
            await db.commit()
        except aiosqlite.Error as exc:
            raise StorageUnavailableError(f"Cannot create schema in {self.db_path}: {exc}") from exc

    async def read_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        async with self.connection().execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def write(self, statement: str, params: Sequence[Any] = ()) -> None:
        db = self.connection()
        await db.execute(statement, params)
        await db.commit()
