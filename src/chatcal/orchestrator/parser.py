from __future__ import annotations

import re
from typing import Dict, Optional

from ..domain import Command

# ``.*`` is greedy, so the argument list runs to the last closing parenthesis.
ACTION_PATTERN = re.compile(r"ACTION:(\w+)\((.*)\)", re.DOTALL)
PARAM_PATTERN = re.compile(r'(\w+)="((?:\\"|[^"])*)"')


def parse_params(raw: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for match in PARAM_PATTERN.finditer(raw):
        params[match.group(1)] = match.group(2).replace('\\"', '"')
    return params


def parse_command(text: str) -> Optional[Command]:
    """Extract the first ``ACTION:<NAME>(key="value", ...)`` from ``text``.

    Returns ``None`` when the text holds no action, in which case it should be
    shown to the user as an ordinary reply. Keys and command names are not
    validated here.
    """

    if not text:
        return None
    match = ACTION_PATTERN.search(text)
    if match is None:
        return None
    name, raw_params = match.groups()
    return Command(name=name, params=parse_params(raw_params))


__all__ = ["ACTION_PATTERN", "PARAM_PATTERN", "parse_command", "parse_params"]
