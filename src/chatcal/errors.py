from __future__ import annotations


class ChatcalError(Exception):
    """Base class for errors raised by chatcal."""


class StorageUnavailableError(ChatcalError):
    """Raised when the event database cannot be opened or migrated."""


class LlmNotConfiguredError(ChatcalError):
    """Raised when a model request is attempted without credentials."""


__all__ = ["ChatcalError", "LlmNotConfiguredError", "StorageUnavailableError"]
