"""Command grammar, dispatch and the chat loop built on top of them."""

from __future__ import annotations

from .chat import ChatSession, ChatTurn
from .dispatcher import CommandDispatcher
from .parser import parse_command

__all__ = ["ChatSession", "ChatTurn", "CommandDispatcher", "parse_command"]
