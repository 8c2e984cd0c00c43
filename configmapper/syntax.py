"""Markers that select how a raw configuration string is preprocessed."""

from __future__ import annotations

from enum import Enum


class Syntax(str, Enum):
    """A prefix written in front of a raw value, such as ``base64.decode::``."""

    ARRAY_INT = "array.int::"
    ARRAY_FLOAT = "array.float::"
    ARRAY_STR = "array.string::"
    JSON_OBJECT = "json.object::"
    BASE64_ENCODE = "base64.encode::"
    BASE64_DECODE = "base64.decode::"
    TIME_DURATION = "time.duration::"
    DATA_SIZE = "data.size::"
    URL_ENCODE = "url.encode::"
    URL_DECODE = "url.decode::"
    URL_PARSE = "url::"

    def matches(self, value: str) -> bool:
        """Tell whether ``value`` starts with this marker."""
        return value.startswith(self.value)

    def strip(self, value: str) -> str:
        """Remove the first occurrence of this marker from ``value``."""
        return value.replace(self.value, "", 1)