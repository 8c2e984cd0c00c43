"""Validation rules applied to configuration values, and duration parsing."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal
from typing import Any

VD_RANGE = "range"
VD_SET = "set"
VD_GT = "greaterThan"
VD_LT = "lessThan"
VD_REQUIRED = "required"
VD_PROTOCOLS = "protocols"

VALIDATION_TAGS = (VD_SET, VD_RANGE, VD_GT, VD_LT, VD_REQUIRED, VD_PROTOCOLS)


class NotFoundError(LookupError):
    """Raised when no input provides a value for a key."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message)


class ValidationError(ValueError):
    """Raised when a value breaks one of its validation rules."""


_HEX_PREFIX = re.compile(r"[+-]?0[xX]")


def _parse_float(text: str) -> float:
    """Parse a number the strict way: no surrounding spaces, no underscores."""
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f'invalid number "{text}"')
    try:
        value = float.fromhex(text) if _HEX_PREFIX.match(text) else float(text)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f'invalid number "{text}"') from exc
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f'number "{text}" is out of range')
    return value


def _try_parse_float(text: str) -> float | None:
    try:
        return _parse_float(text)
    except ValueError:
        return None


_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_UNITS = "ns|us|µs|μs|ms|s|m|h"
_NUMBER = r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)"
_DURATION_RE = re.compile(rf"[+-]?(?:0|(?:{_NUMBER}(?:{_UNITS}))+)")
_PART_RE = re.compile(rf"({_NUMBER})({_UNITS})")
_MAX_NANOS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``300s``, ``1h30m`` or ``-1.5ms``."""
    if not _DURATION_RE.fullmatch(text):
        raise ValueError(f'time: invalid duration "{text}"')
    total = sum(
        (Decimal(number) * _NANOS_PER_UNIT[unit] for number, unit in _PART_RE.findall(text)),
        Decimal(0),
    )
    nanoseconds = int(total)
    if nanoseconds > _MAX_NANOS:
        raise ValueError(f'time: invalid duration "{text}"')
    if text.startswith("-"):
        nanoseconds = -nanoseconds
    return timedelta(microseconds=round(Decimal(nanoseconds) / 1000))


def _duration_nanos(value: timedelta) -> int:
    return ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000


def _format_fraction(value: int, scale: int) -> str:
    whole, fraction = divmod(value, scale)
    if not fraction:
        return str(whole)
    digits = str(fraction).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(value: timedelta) -> str:
    nanos = _duration_nanos(value)
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos == 0:
        return "0s"
    if nanos < 1_000:
        return f"{sign}{nanos}ns"
    if nanos < 1_000_000:
        return f"{sign}{_format_fraction(nanos, 1_000)}µs"
    if nanos < 1_000_000_000:
        return f"{sign}{_format_fraction(nanos, 1_000_000)}ms"
    hours, rest = divmod(nanos, _NANOS_PER_UNIT["h"])
    minutes, rest = divmod(rest, _NANOS_PER_UNIT["m"])
    seconds = _format_fraction(rest, 1_000_000_000) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


def _format_number(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    number = Decimal(repr(value)).normalize()
    sign, digits, exponent = number.as_tuple()
    power = len(digits) + exponent - 1
    if -4 <= power < 6:
        return format(number, "f")
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(map(str, digits[1:]))
    prefix = "-" if sign else ""
    return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{abs(power):02d}"


def _format_value(value: Any) -> str:
    if isinstance(value, timedelta):
        return _format_duration(value)
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return _format_number(value)
    return str(value)


def _coerce(value: float, bound: float) -> float:
    """Bring a bound to the value's type: integer values compare with truncated bounds."""
    if isinstance(value, int) and math.isfinite(bound):
        return int(bound)
    return bound


def _split_range(rule: str) -> tuple[str, str]:
    if ".." not in rule:
        raise ValidationError(f"incorrect range value {rule}")
    parts = rule.split("..")
    if len(parts) != 2:
        raise ValidationError(
            f"range value ({rule}) is incorrect, it should be separated by .. (two dots)"
        )
    return parts[0], parts[1]


def validate_range_numbers(value: float, range_rule: str) -> float:
    """Check that ``value`` lies within ``start..end``; return the value."""
    if not range_rule:
        return value
    start_text, end_text = _split_range(range_rule)
    start = _try_parse_float(start_text)
    if start is None:
        raise ValidationError(f"range start value ({start_text}) is not a number")
    end = _try_parse_float(end_text)
    if end is None:
        raise ValidationError(f"range end value ({end_text}) is not a number")
    if value < _coerce(value, start) or value > _coerce(value, end):
        raise ValidationError(
            f"number {_format_number(value)} is outside of the range {range_rule}"
        )
    return value


def validate_range_time_duration(value: timedelta, rule: str) -> timedelta:
    """Check that a duration lies within ``start..end``; return the duration."""
    if not rule:
        return value
    start_text, end_text = _split_range(rule)
    try:
        start = parse_duration(start_text)
    except ValueError:
        raise ValidationError(
            f"range start value ({start_text}) is not a time.Duration parseable value"
        ) from None
    try:
        end = parse_duration(end_text)
    except ValueError:
        raise ValidationError(
            f"range end value ({end_text}) is not a time.Duration parseable value"
        ) from None
    if value < start or value > end:
        raise ValidationError(
            f"time.Duration {_format_duration(value)} is outside of the range {rule}"
        )
    return value


def validate_greater_than(value: Any, rule: Any) -> Any:
    """Check that ``value`` is strictly greater than ``rule``; return the value."""
    if value > rule:
        return value
    raise ValidationError(
        f"value {_format_value(value)} must be greater than {_format_value(rule)}"
    )


def validate_less_than(value: Any, rule: Any) -> Any:
    """Check that ``value`` is strictly less than ``rule``; return the value."""
    if value < rule:
        return value
    raise ValidationError(
        f"value {_format_value(value)} must be greater than {_format_value(rule)}"
    )


def validate_greater_than_time_duration(value: timedelta, rule: str) -> timedelta:
    """Check that a duration exceeds the duration written in ``rule``."""
    try:
        limit = parse_duration(rule)
    except ValueError:
        raise ValidationError(f"GreaterThan rule for time.Duration {rule} is incorrect") from None
    if value > limit:
        return value
    raise ValidationError(f"value {_format_duration(value)} must be greater than {rule}")


def validate_less_than_time_duration(value: timedelta, rule: str) -> timedelta:
    """Check that a duration is below the duration written in ``rule``."""
    try:
        limit = parse_duration(rule)
    except ValueError:
        raise ValidationError(f"LessThan rule for time.Duration {rule} is incorrect") from None
    if value < limit:
        return value
    raise ValidationError(f"value {_format_duration(value)} must be less than {rule}")


def validate_numbers_set(value: float, set_rule: str) -> float:
    """Check that a number is in a comma separated set; unparsable members are ignored."""
    if not set_rule:
        return value
    parsed = (_try_parse_float(item) for item in set_rule.split(","))
    allowed = [_coerce(value, number) for number in parsed if number is not None]
    if not allowed or value in allowed:
        return value
    raise ValidationError("the given value is not among the allowed set")


def validate_string_set(value: str, set_rule: str) -> str:
    """Check that a string is one of a comma separated set."""
    if not set_rule or value in set_rule.split(","):
        return value
    raise ValidationError(f"the given value {value} is not among the allowed set")


def validate_numbers(value: float, rules: Mapping[str, str]) -> float:
    """Apply the first matching numeric rule: set, range, greaterThan, lessThan."""
    if VD_SET in rules:
        return validate_numbers_set(value, rules[VD_SET])
    # greaterThan and lessThan on numbers are read as range expressions.
    for key in (VD_RANGE, VD_GT, VD_LT):
        if key in rules:
            return validate_range_numbers(value, rules[key])
    return value


def validate_strings(value: str, rules: Mapping[str, str]) -> str:
    """Apply the first matching string rule: set, greaterThan, lessThan."""
    if VD_SET in rules:
        return validate_string_set(value, rules[VD_SET])
    if VD_GT in rules:
        return validate_greater_than(value, rules[VD_GT])
    if VD_LT in rules:
        return validate_less_than(value, rules[VD_LT])
    return value


def validate_time_durations(value: timedelta, rules: Mapping[str, str]) -> timedelta:
    """Apply the first matching duration rule: range, greaterThan, lessThan."""
    if VD_RANGE in rules:
        return validate_range_time_duration(value, rules[VD_RANGE])
    if VD_GT in rules:
        return validate_greater_than_time_duration(value, rules[VD_GT])
    if VD_LT in rules:
        return validate_less_than_time_duration(value, rules[VD_LT])
    return value