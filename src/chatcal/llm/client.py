from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from ..config import LlmSettings
from ..errors import LlmNotConfiguredError
from ..orchestrator.prompts import build_system_prompt

logger = logging.getLogger(__name__)

EMPTY_REPLY = "Sorry, I did not understand."
FAILURE_REPLY = "Error: Could not generate a response from the language model."


class CommandModel:
    """Ask the chat model to turn one user message into an ``ACTION:`` line."""

    def __init__(self, settings: LlmSettings, *, client: Optional[AsyncOpenAI] = None) -> None:
        self.settings = settings
        self._client = client

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise LlmNotConfiguredError(f"Language model is not configured. Missing: {missing}")
        self._client = AsyncOpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url,
            organization=self.settings.organization,
            project=self.settings.project,
        )
        return self._client

    async def complete(self, message: str, *, today: Optional[date] = None) -> str:
        client = self._ensure_client()
        system_prompt = build_system_prompt(today or date.today())
        try:
            completion = await client.chat.completions.create(
                model=self.settings.model,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": message},
                ],
            )
        except OpenAIError:
            logger.exception("Chat completion request failed")
            return FAILURE_REPLY

        content = completion.choices[0].message.content or ""
        text = content.strip()
        return text or EMPTY_REPLY


__all__ = ["CommandModel", "EMPTY_REPLY", "FAILURE_REPLY"]
