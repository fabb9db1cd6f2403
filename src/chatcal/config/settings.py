from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "chatcal"
APP_AUTHOR = "Chatcal"


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    organization: Optional[str]
    project: Optional[str]
    temperature: float
    max_tokens: int

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    data_dir: Path
    database_path: Path


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    log_dir: Path


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    storage: StorageSettings
    logging: LoggingSettings


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        organization=os.getenv("OPENAI_ORG"),
        project=os.getenv("OPENAI_PROJECT"),
        temperature=_float_from_env("CHATCAL_LLM_TEMPERATURE", 0.2),
        max_tokens=_int_from_env("CHATCAL_LLM_MAX_TOKENS", 256),
    )

    data_dir = Path(os.getenv("CHATCAL_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
    database = Path(os.getenv("CHATCAL_DATABASE", "calendar.db"))
    storage = StorageSettings(
        data_dir=data_dir,
        database_path=database if database.is_absolute() else data_dir / database,
    )

    logging_settings = LoggingSettings(
        level=os.getenv("CHATCAL_LOG_LEVEL", "INFO").upper(),
        log_dir=Path(os.getenv("CHATCAL_LOG_DIR") or data_dir / "logs"),
    )

    return AppSettings(llm=llm, storage=storage, logging=logging_settings)
