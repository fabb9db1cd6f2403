from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import ChatTranscript, EventRepository, SqliteEventBackend
from .event_store import EventStore


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, the database and the store."""

    settings: AppSettings = field(default_factory=get_settings)
    backend: SqliteEventBackend = field(init=False)
    events: EventRepository = field(init=False)
    store: EventStore = field(init=False)
    transcript: ChatTranscript = field(init=False)

    def __post_init__(self) -> None:
        self.backend = SqliteEventBackend(self.settings.storage.database_path)
        self.events = EventRepository(backend=self.backend)
        self.store = EventStore(self.events)
        self.transcript = ChatTranscript(backend=self.backend)

    async def start(self) -> None:
        await self.store.initialize()
        await self.transcript.initialize()

    async def close(self) -> None:
        await self.store.close()
