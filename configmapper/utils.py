"""Helpers for configuration key names."""

from __future__ import annotations

import logging
import re

ARRAY_KEY_PATTERN = re.compile(r"(.+)\[([0-9]+)\]")

_MAX_INDEX = 2**63 - 1
_log = logging.getLogger(__name__)


def check_name_is_array_and_get_index(key: str) -> tuple[str, int] | None:
    """Split a key such as ``NAME[3]`` into ``("NAME", 3)``; return None for other keys."""
    match = ARRAY_KEY_PATTERN.fullmatch(key)
    if match is None:
        return None
    name, digits = match.groups()
    index = int(digits)
    if index > _MAX_INDEX:
        _log.warning(
            "failed to parse array key name, the value [%s] must be an uint value", name
        )
        return None
    return name, index