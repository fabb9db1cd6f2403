from __future__ import annotations

from .snapshot import EventSnapshot

__all__ = ["EventSnapshot"]
