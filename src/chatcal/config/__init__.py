"""Configuration models and helpers."""

from __future__ import annotations

from .settings import AppSettings, LlmSettings, LoggingSettings, StorageSettings, get_settings

__all__ = ["AppSettings", "LlmSettings", "LoggingSettings", "StorageSettings", "get_settings"]
