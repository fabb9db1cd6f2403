from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Set, Union

from ..data import EventRepository, EventSnapshot
from ..domain import Event, StoreState, parse_timestamp
from ..errors import StorageUnavailableError

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class EventStore:
    """Single source of truth for events while the process runs.

    Mutations are applied to the in-memory snapshot and announced to
    listeners before the matching SQLite write is scheduled on the running
    event loop. Writes are never awaited by the caller; a failed write is
    logged and the snapshot keeps the change.
    """

    def __init__(self, repository: EventRepository) -> None:
        self._repository = repository
        self._snapshot = EventSnapshot()
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task[None]] = set()
        self._write_lock = asyncio.Lock()
        self._state = StoreState.UNINITIALIZED
        self._last_id = 0

    @property
    def state(self) -> StoreState:
        return self._state

    async def initialize(self) -> None:
        """Open the database, create the schema and load every stored event."""

        self._state = StoreState.LOADING
        try:
            await self._repository.ensure_schema()
            events = await self._repository.fetch_all()
        except StorageUnavailableError:
            self._state = StoreState.FAILED
            logger.exception("Event store could not be initialized")
            await self._repository.backend.close()
            raise
        except Exception as exc:  # noqa: BLE001
            self._state = StoreState.FAILED
            logger.exception("Event store could not load events")
            await self._repository.backend.close()
            raise StorageUnavailableError(f"Cannot load events: {exc}") from exc

        self._snapshot.hydrate(events)
        self._last_id = max((_numeric_id(event.id) for event in events), default=0)
        self._state = StoreState.READY
        logger.info("Event store ready with %d events", len(events))
        self._notify()

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""

        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def close(self) -> None:
        await self.flush()
        await self._repository.backend.close()

    # ------------------------------------------------------------------ listeners

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners = [registered for registered in self._listeners if registered is not listener]

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:  # noqa: BLE001
                logger.exception("Event store listener %r failed", listener)

    # ------------------------------------------------------------------ queries

    def get_all(self) -> List[Event]:
        return self._snapshot.all()

    def get_for_date(self, target: Union[date, datetime]) -> List[Event]:
        """Return events starting on the local calendar day of ``target``."""

        if isinstance(target, datetime):
            target = parse_timestamp(target).astimezone().date()
        return self._snapshot.events_for_day(target)

    def find_by_title_substring(self, query: str) -> List[Event]:
        lowered = query.lower()
        return [event for event in self._snapshot.all() if lowered in event.title.lower()]

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self._snapshot.get(event_id)

    # ------------------------------------------------------------------ mutations

    def create(
        self,
        title: str,
        start_time: Union[str, datetime],
        end_time: Union[str, datetime],
        description: Optional[str] = None,
    ) -> Event:
        self._ensure_usable()
        event = Event(
            id=self._next_id(),
            title=title,
            start_time=parse_timestamp(start_time),
            end_time=parse_timestamp(end_time),
            description=description,
        )
        self._snapshot.append(event)
        self._notify()
        self._persist(f"create {event.id}", lambda: self._repository.insert(event))
        return event

    def update_by_id(self, event_id: str, changes: Mapping[str, Any]) -> Optional[Event]:
        self._ensure_usable()
        event = self._snapshot.get(event_id)
        if event is None:
            return None
        event.apply_changes(changes)
        self._snapshot.reindex(event_id)
        self._notify()
        persisted = replace(event)
        self._persist(f"update {event_id}", lambda: self._repository.update(persisted))
        return event

    def update_first_by_title_substring(self, query: str, changes: Mapping[str, Any]) -> Optional[Event]:
        matches = self.find_by_title_substring(query)
        if not matches:
            return None
        return self.update_by_id(matches[0].id, changes)

    def delete_by_id(self, event_id: str) -> bool:
        self._ensure_usable()
        if not self._snapshot.remove(event_id):
            return False
        self._notify()
        self._persist(f"delete {event_id}", lambda: self._repository.delete(event_id))
        return True

    def delete_first_by_title_substring(self, query: str) -> bool:
        matches = self.find_by_title_substring(query)
        if not matches:
            return False
        return self.delete_by_id(matches[0].id)

    # ------------------------------------------------------------------ internals

    def _ensure_usable(self) -> None:
        if self._state is StoreState.FAILED:
            raise StorageUnavailableError("Event store failed to initialize; changes cannot be saved.")

    def _next_id(self) -> str:
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        while str(candidate) in self._snapshot:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    def _persist(self, action: str, operation: Callable[[], Awaitable[None]]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("No running event loop; %s was not persisted", action)
            return
        task = loop.create_task(self._write(action, operation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, action: str, operation: Callable[[], Awaitable[None]]) -> None:
        async with self._write_lock:
            try:
                await operation()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to persist %s", action)


def _numeric_id(event_id: str) -> int:
    try:
        return int(event_id)
    except ValueError:
        return 0


__all__ = ["EventStore", "Listener"]
