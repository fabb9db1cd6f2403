from __future__ import annotations

from typing import Any, Dict, List, Union

import orjson

from ..domain import CommandResult, Event
from .models import EventPayload


def serialize_event(event: Event) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump(by_alias=True)


def serialize_result(result: CommandResult) -> Union[str, List[Dict[str, Any]]]:
    if isinstance(result, str):
        return result
    return [serialize_event(event) for event in result]


def dumps(payload: Any) -> str:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8")
