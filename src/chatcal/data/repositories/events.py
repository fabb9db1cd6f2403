from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ...domain import Event
from ..backend import SqliteEventBackend

EVENTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id TEXT PRIMARY KEY NOT NULL,
    title TEXT NOT NULL,
    startTime INTEGER NOT NULL,
    endTime INTEGER NOT NULL,
    description TEXT
);
"""


@dataclass(slots=True)
class EventRepository:
    backend: SqliteEventBackend

    async def ensure_schema(self) -> None:
        await self.backend.open()
        await self.backend.execute_schema(EVENTS_SCHEMA)

    async def fetch_all(self) -> List[Event]:
        rows = await self.backend.read_all("SELECT * FROM events ORDER BY rowid")
        return [Event.from_record(row) for row in rows]

    async def insert(self, event: Event) -> None:
        record = event.to_record()
        await self.backend.write(
            "INSERT INTO events (id, title, startTime, endTime, description) VALUES (?, ?, ?, ?, ?)",
            (record["id"], record["title"], record["startTime"], record["endTime"], record["description"]),
        )

    async def update(self, event: Event) -> None:
        record = event.to_record()
        await self.backend.write(
            "UPDATE events SET title = ?, startTime = ?, endTime = ?, description = ? WHERE id = ?",
            (record["title"], record["startTime"], record["endTime"], record["description"], record["id"]),
        )

    async def delete(self, event_id: str) -> None:
        await self.backend.write("DELETE FROM events WHERE id = ?", (event_id,))
