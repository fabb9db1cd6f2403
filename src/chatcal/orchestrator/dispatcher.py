from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping

import orjson
from pydantic import ValidationError

from ..api.models import EventUpdatePayload
from ..domain import Command, CommandName, CommandResult, parse_timestamp
from ..services import EventStore

logger = logging.getLogger(__name__)

Params = Mapping[str, str]

CREATE_REQUIRED = ("title", "startTime", "endTime")


def not_found_message(query: str) -> str:
    return f"Could not find an event with the title '{query}'."


class CommandDispatcher:
    """Execute parsed commands against the event store.

    Every outcome, including bad parameters, is returned as the result value:
    either a status string or the list of matching events.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store
        self._handlers: Dict[CommandName, Callable[[Params], CommandResult]] = {
            CommandName.CREATE_EVENT: self._create_event,
            CommandName.READ_EVENTS: self._read_events,
            CommandName.UPDATE_EVENT: self._update_event,
            CommandName.DELETE_EVENT: self._delete_event,
        }

    def dispatch(self, command: Command) -> CommandResult:
        kind = command.kind
        if kind is None:
            logger.warning("Unknown command received: %s", command.name)
            return f"Unknown command: {command.name}"
        logger.debug("Dispatching %s with %s", kind.value, sorted(command.params))
        return self._handlers[kind](command.params)

    def _create_event(self, params: Params) -> CommandResult:
        missing = [name for name in CREATE_REQUIRED if not params.get(name)]
        if missing:
            return f"Create event failed: Missing required parameters: {', '.join(missing)}."
        try:
            start_time = parse_timestamp(params["startTime"])
            end_time = parse_timestamp(params["endTime"])
        except ValueError as exc:
            logger.warning("Rejected CREATE_EVENT timestamps: %s", exc)
            return "Create event failed: startTime and endTime must be dates like YYYY-MM-DDTHH:mm:ss."
        self.store.create(params["title"], start_time, end_time, params.get("description") or None)
        return "Event created successfully."

    def _read_events(self, params: Params) -> CommandResult:
        title = params.get("title")
        if title:
            return self.store.find_by_title_substring(title)
        return self.store.get_all()

    def _update_event(self, params: Params) -> CommandResult:
        title = params.get("title")
        updates = params.get("updates")
        if not title or not updates:
            return "Update failed: Missing title or update information."
        try:
            payload = orjson.loads(updates)
            if not isinstance(payload, dict):
                raise ValueError("updates must be a JSON object")
            changes = EventUpdatePayload.model_validate(payload).to_changes()
        except (ValidationError, ValueError) as exc:
            logger.warning("Rejected UPDATE_EVENT payload %r: %s", updates, exc)
            return "There was an error updating the event. The update details were not formatted correctly."
        updated = self.store.update_first_by_title_substring(title, changes)
        if updated is None:
            return not_found_message(title)
        return f"Event '{title}' updated successfully."

    def _delete_event(self, params: Params) -> CommandResult:
        title = params.get("title")
        if not title:
            return "Delete failed: Missing title information."
        if self.store.delete_first_by_title_substring(title):
            return f"Event '{title}' deleted successfully."
        return not_found_message(title)


__all__ = ["CommandDispatcher", "not_found_message"]
