from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from ...domain import Event


def local_day(event: Event) -> date:
    return event.start_time.astimezone().date()


@dataclass
class EventSnapshot:
    """Insertion-ordered in-memory copy of every event, indexed by local start day."""

    events_by_id: Dict[str, Event] = field(default_factory=dict)
    days_index: Dict[date, List[str]] = field(default_factory=dict)
    _indexed_day: Dict[str, date] = field(default_factory=dict)
    _order: Dict[str, int] = field(default_factory=dict)
    _sequence: int = 0

    def __len__(self) -> int:
        return len(self.events_by_id)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self.events_by_id

    def hydrate(self, events: Iterable[Event]) -> None:
        self.clear()
        for event in events:
            self.append(event)

    def append(self, event: Event) -> None:
        self.events_by_id[event.id] = event
        self._order[event.id] = self._sequence
        self._sequence += 1
        self._index_event(event)

    def _index_event(self, event: Event) -> None:
        day = local_day(event)
        ids = self.days_index.setdefault(day, [])
        ids.append(event.id)
        # keep each day in snapshot order
        ids.sort(key=self._order.__getitem__)
        self._indexed_day[event.id] = day

    def _unindex_event(self, event_id: str) -> None:
        day = self._indexed_day.pop(event_id, None)
        if day is None:
            return
        ids = self.days_index.get(day, [])
        if event_id in ids:
            ids.remove(event_id)
        if not ids:
            self.days_index.pop(day, None)

    def reindex(self, event_id: str) -> None:
        """Refresh the day index after an event was modified in place."""

        event = self.events_by_id.get(event_id)
        if event is None:
            return
        if self._indexed_day.get(event_id) == local_day(event):
            return
        self._unindex_event(event_id)
        self._index_event(event)

    def remove(self, event_id: str) -> bool:
        if event_id not in self.events_by_id:
            return False
        self._unindex_event(event_id)
        del self.events_by_id[event_id]
        del self._order[event_id]
        return True

    def get(self, event_id: str) -> Optional[Event]:
        return self.events_by_id.get(event_id)

    def all(self) -> List[Event]:
        return list(self.events_by_id.values())

    def events_for_day(self, target_day: date) -> List[Event]:
        identifiers = self.days_index.get(target_day, [])
        return [self.events_by_id[event_id] for event_id in identifiers]

    def clear(self) -> None:
        self.events_by_id.clear()
        self.days_index.clear()
        self._indexed_day.clear()
        self._order.clear()
        self._sequence = 0
