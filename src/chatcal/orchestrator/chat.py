from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..data import ChatTranscript
from ..domain import ChatRole, Command, CommandResult
from .dispatcher import CommandDispatcher
from .parser import parse_command

logger = logging.getLogger(__name__)


class TextModel(Protocol):
    async def complete(self, message: str) -> str: ...


@dataclass
class ChatTurn:
    user_message: str
    model_text: str
    command: Optional[Command]
    reply: CommandResult

    @property
    def has_command(self) -> bool:
        return self.command is not None


class ChatSession:
    """One conversation: model text is parsed and, when it holds an action, dispatched."""

    def __init__(
        self,
        model: TextModel,
        dispatcher: CommandDispatcher,
        transcript: Optional[ChatTranscript] = None,
    ) -> None:
        self.model = model
        self.dispatcher = dispatcher
        self.transcript = transcript

    async def handle(self, user_message: str) -> ChatTurn:
        await self._record(ChatRole.USER, user_message)
        model_text = await self.model.complete(user_message)
        command = parse_command(model_text)
        if command is None:
            reply: CommandResult = model_text
        else:
            logger.info("Model requested %s", command.name)
            reply = self.dispatcher.dispatch(command)
        await self._record(ChatRole.ASSISTANT, reply)
        return ChatTurn(user_message=user_message, model_text=model_text, command=command, reply=reply)

    async def _record(self, role: ChatRole, content: CommandResult) -> None:
        if self.transcript is None:
            return
        await self.transcript.save_message(role, content)
