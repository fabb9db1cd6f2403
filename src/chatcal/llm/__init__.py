"""Language model access."""

from __future__ import annotations

from .client import CommandModel

__all__ = ["CommandModel"]
