from __future__ import annotations

from enum import Enum


class CommandName(str, Enum):
    CREATE_EVENT = "CREATE_EVENT"
    READ_EVENTS = "READ_EVENTS"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
