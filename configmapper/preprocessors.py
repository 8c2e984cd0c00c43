"""Decoding of raw configuration strings marked with a syntax prefix."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from urllib.parse import SplitResult, quote_plus, unquote_plus, urlsplit

from .syntax import Syntax
from .validators import VD_PROTOCOLS, ValidationError, _parse_float, parse_duration

_log = logging.getLogger(__name__)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_DATA_SIZE_RE = re.compile(r"([0-9]*)(.*)", re.DOTALL)
_MAX_UINT64 = 2**64 - 1
_BIT_UNITS = frozenset({"Kb", "Mb", "Gb", "Tb", "Pb", "Eb"})
_UNIT_POWERS = {
    **dict.fromkeys(("", "b", "byte"), 0),
    **dict.fromkeys(("k", "kb", "kilo", "kilobyte", "kilobytes"), 1),
    **dict.fromkeys(("m", "mb", "mega", "megabyte", "megabytes"), 2),
    **dict.fromkeys(("g", "gb", "giga", "gigabyte", "gigabytes"), 3),
    **dict.fromkeys(("t", "tb", "tera", "terabyte", "terabytes"), 4),
    **dict.fromkeys(("p", "pb", "peta", "petabyte", "petabytes"), 5),
    **dict.fromkeys(("e", "eb"), 6),
}


def base64_decode(value: str) -> str:
    """Decode standard, padded base64 text into a string."""
    cleaned = value.replace("\r", "").replace("\n", "")
    try:
        raw = base64.b64decode(cleaned, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"illegal base64 data: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def base64_encode(value: str) -> str:
    """Encode a string as standard, padded base64."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def url_encode(value: str) -> str:
    """Escape a string for use in a URL query."""
    return quote_plus(value, safe="")


def url_decode(value: str) -> str:
    """Undo query escaping; raise ValueError on a malformed escape."""
    match = _BAD_ESCAPE.search(value)
    if match is not None:
        bad = value[match.start() : match.start() + 3]
        raise ValueError(f'invalid URL escape "{bad}"')
    return unquote_plus(value)


def url_parse(value: str, rules: Mapping[str, str]) -> SplitResult:
    """Parse a URL and check its scheme against a ``protocols`` rule, if any."""
    try:
        parsed = urlsplit(value)
        parsed.port  # noqa: B018 - raises on a malformed port
    except ValueError as exc:
        raise ValueError(f"{value} is not a correct URL, got parsing error: {exc}") from exc
    allowed = rules.get(VD_PROTOCOLS)
    if allowed is None or value == "":
        return parsed
    if parsed.scheme in allowed.split(","):
        return parsed
    raise ValidationError(
        f"{VD_PROTOCOLS}: url {value} is not among allowed protocols {allowed}"
    )


def time_duration_parse(value: str) -> timedelta:
    """Parse a duration, giving zero when the text is not a valid duration."""
    try:
        return parse_duration(value)
    except ValueError:
        return timedelta(0)


def is_data_size(value: str) -> bool:
    """Tell whether the data-size marker appears anywhere in ``value``."""
    return Syntax.DATA_SIZE.value in value


def parse_data_size(text: str) -> int:
    """Parse a size such as ``20kb`` or ``3 MB`` into bytes, using powers of 1024."""
    match = _DATA_SIZE_RE.fullmatch(text)
    digits, rest = match.groups() if match else ("", text)
    if not digits and text:
        raise ValueError(f'datasize: invalid syntax "{text}"')
    amount = int(digits) if digits else 0
    if amount > _MAX_UINT64:
        raise ValueError(f'datasize: value overflow "{text}"')
    unit = rest.strip()
    if unit in _BIT_UNITS:
        raise ValueError(f'datasize: use bytes, not bits "{text}"')
    power = _UNIT_POWERS.get(unit.lower())
    if power is None:
        raise ValueError(f'datasize: invalid syntax "{text}"')
    size = amount * 1024**power
    if size > _MAX_UINT64:
        raise ValueError(f'datasize: value overflow "{text}"')
    return size


def _parse_int64(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f'invalid integer "{text}"')
    number = int(text)
    if not -(2**63) <= number < 2**63:
        raise ValueError(f'integer "{text}" is out of range')
    return number


@dataclass
class Preprocessors:
    """Applies syntax markers to raw values; does nothing while disabled."""

    enabled: bool = False

    def _active(self, syntax: Syntax, value: str) -> bool:
        return self.enabled and syntax.matches(value)

    def check_string(self, value: str, rules: Mapping[str, str]) -> tuple[str, Syntax | None]:
        """Decode a string marker and return the new value with the marker used.

        A value that fails to decode comes back unchanged with no marker; a URL
        outside its allowed protocols raises ValidationError.
        """
        if self._active(Syntax.BASE64_DECODE, value):
            stripped = Syntax.BASE64_DECODE.strip(value)
            try:
                return base64_decode(stripped), Syntax.BASE64_DECODE
            except ValueError:
                return stripped, None
        if self._active(Syntax.BASE64_ENCODE, value):
            return base64_encode(Syntax.BASE64_ENCODE.strip(value)), Syntax.BASE64_ENCODE
        if self._active(Syntax.URL_ENCODE, value):
            return url_encode(Syntax.URL_ENCODE.strip(value)), Syntax.URL_ENCODE
        if self._active(Syntax.URL_DECODE, value):
            try:
                return url_decode(Syntax.URL_DECODE.strip(value)), Syntax.URL_DECODE
            except ValueError:
                return value, None
        if self._active(Syntax.URL_PARSE, value):
            raw_url = Syntax.URL_PARSE.strip(value)
            try:
                url_parse(raw_url, rules)
            except ValidationError:
                raise
            except ValueError:
                return value, None
            return raw_url, Syntax.URL_PARSE
        return value, None

    def check_time_duration(self, value: str) -> timedelta:
        """Return the marked duration, or zero when there is none."""
        if self._active(Syntax.TIME_DURATION, value):
            return time_duration_parse(Syntax.TIME_DURATION.strip(value))
        return timedelta(0)

    def check_data_size(self, value: str) -> int:
        """Return the marked size in bytes; raise ValueError when there is none."""
        if self._active(Syntax.DATA_SIZE, value):
            try:
                return parse_data_size(Syntax.DATA_SIZE.strip(value))
            except ValueError:
                pass
        raise ValueError("no data-size string found")

    def check_object(self, value: str) -> Any:
        """Decode a marked JSON document; return None for unmarked values."""
        if self._active(Syntax.JSON_OBJECT, value):
            return json.loads(Syntax.JSON_OBJECT.strip(value))
        return None

    def check_int_array(self, value: str) -> list[int] | None:
        """Read a marked comma separated list of integers, skipping bad items."""
        if not self._active(Syntax.ARRAY_INT, value):
            return None
        numbers = []
        for item in Syntax.ARRAY_INT.strip(value).split(","):
            try:
                numbers.append(_parse_int64(item.strip(" ")))
            except ValueError:
                _log.warning("config error: failed to cast str value %s to int", item)
        return numbers

    def check_float_array(self, value: str) -> list[float] | None:
        """Read a marked comma separated list of numbers, skipping bad items."""
        if not self._active(Syntax.ARRAY_FLOAT, value):
            return None
        numbers = []
        for item in Syntax.ARRAY_FLOAT.strip(value).split(","):
            try:
                numbers.append(_parse_float(item.strip(" ")))
            except ValueError:
                _log.warning("config error: failed to cast str value %s to float", item)
        return numbers

    def check_str_array(self, value: str) -> list[str] | None:
        """Split a marked comma separated list of strings."""
        if not self._active(Syntax.ARRAY_STR, value):
            return None
        return Syntax.ARRAY_STR.strip(value).split(",")