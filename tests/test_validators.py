from datetime import timedelta

import pytest

from configmapper.validators import (
    NotFoundError,
    ValidationError,
    parse_duration,
    validate_greater_than,
    validate_greater_than_time_duration,
    validate_less_than,
    validate_less_than_time_duration,
    validate_numbers,
    validate_numbers_set,
    validate_range_numbers,
    validate_range_time_duration,
    validate_string_set,
    validate_strings,
    validate_time_durations,
)


@pytest.mark.parametrize(
    "value, rule",
    [(2, "2..4"), (-2, "-2..4"), (-2.000007, "-2.001..-1")],
)
def test_validate_range_accepts(value, rule):
    assert validate_range_numbers(value, rule) == value


def test_validate_range_rejects():
    with pytest.raises(ValidationError, match=r"number 2 is outside of the range 3\.\.7"):
        validate_range_numbers(2, "3..7")


def test_validate_range_empty_rule_passes():
    assert validate_range_numbers(123, "") == 123


def test_validate_range_malformed_rules():
    with pytest.raises(ValidationError, match="incorrect range value 5"):
        validate_range_numbers(5, "5")
    with pytest.raises(ValidationError, match="two dots"):
        validate_range_numbers(5, "1..2..3")
    with pytest.raises(ValidationError, match=r"range start value \(a\) is not a number"):
        validate_range_numbers(5, "a..3")
    with pytest.raises(ValidationError, match=r"range end value \(b\) is not a number"):
        validate_range_numbers(5, "1..b")


def test_validate_range_integer_values_use_truncated_bounds():
    assert validate_range_numbers(1, "1.5..3") == 1
    with pytest.raises(ValidationError):
        validate_range_numbers(1.0, "1.5..3")


def test_validate_range_float_message():
    with pytest.raises(ValidationError, match=r"number 1\.5 is outside"):
        validate_range_numbers(1.5, "2..4")


@pytest.mark.parametrize(
    "value, rule",
    [
        (590, "100,200,300,500,590,600,620"),
        (500.000001, "500.000001,600"),
        (-700000, "-700000,600"),
        (200, "600,200,0,-1"),
    ],
)
def test_validate_numbers_set_accepts(value, rule):
    assert validate_numbers_set(value, rule) == value


def test_validate_numbers_set_rejects():
    with pytest.raises(ValidationError, match="not among the allowed set"):
        validate_numbers_set(500.000001, "500,600")


def test_validate_numbers_set_ignores_unparsable_members():
    assert validate_numbers_set(7, "x,y") == 7
    assert validate_numbers_set(3, "a,3") == 3
    with pytest.raises(ValidationError):
        validate_numbers_set(4, "a,3")


def test_validate_string_set():
    with pytest.raises(ValidationError, match="the given value a is not among the allowed set"):
        validate_string_set("a", "john,bob, bryan ,stephan")
    assert validate_string_set("a", "john,bob,a,stephan") == "a"
    assert validate_string_set("anything", "") == "anything"


def test_validate_greater_and_less_than():
    assert validate_greater_than("b", "a") == "b"
    assert validate_less_than(1, 2) == 1
    with pytest.raises(ValidationError, match="value a must be greater than b"):
        validate_greater_than("a", "b")
    with pytest.raises(ValidationError):
        validate_less_than(2, 2)


def test_validate_numbers_precedence_and_rules():
    assert validate_numbers(3, {"set": "1,3,11", "range": "0..1"}) == 3
    assert validate_numbers(2, {"range": "-100..100"}) == 2
    with pytest.raises(ValidationError):
        validate_numbers(-2.5, {"range": "0..100"})
    assert validate_numbers(99, {}) == 99


def test_validate_numbers_comparison_rules_are_read_as_ranges():
    with pytest.raises(ValidationError, match="incorrect range value 100"):
        validate_numbers(64, {"greaterThan": "100"})
    with pytest.raises(ValidationError, match="incorrect range value 0"):
        validate_numbers(-100, {"lessThan": "0"})


def test_validate_strings():
    assert validate_strings("foo", {"set": "foo,bar"}) == "foo"
    assert validate_strings("b", {"greaterThan": "a"}) == "b"
    with pytest.raises(ValidationError):
        validate_strings("a", {"lessThan": "a"})
    assert validate_strings("free", {"required": ""}) == "free"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("300s", timedelta(seconds=300)),
        ("25s", timedelta(seconds=25)),
        ("1m", timedelta(minutes=1)),
        ("20ms", timedelta(milliseconds=20)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("0", timedelta(0)),
        ("-0", timedelta(0)),
        (".5ms", timedelta(microseconds=500)),
        ("-1.5s", -timedelta(seconds=1.5)),
        ("2µs", timedelta(microseconds=2)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


def test_parse_duration_equivalent_spellings():
    assert parse_duration("1500us") == parse_duration("1.5ms")
    assert parse_duration("90s") == parse_duration("1m30s")


@pytest.mark.parametrize("text", ["", "1", "abc", "1x", "+", "00", ".s", " 1s"])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_validate_range_time_duration():
    assert validate_range_time_duration(timedelta(seconds=25), "2s..1m") == timedelta(seconds=25)
    with pytest.raises(ValidationError, match=r"time\.Duration 1ms is outside of the range 2s\.\.1m"):
        validate_range_time_duration(timedelta(milliseconds=1), "2s..1m")
    with pytest.raises(ValidationError, match=r"time\.Duration 1m30s is outside"):
        validate_range_time_duration(timedelta(seconds=90), "2s..1m")
    with pytest.raises(ValidationError, match="not a time.Duration parseable value"):
        validate_range_time_duration(timedelta(seconds=1), "x..1m")


def test_validate_duration_comparisons():
    with pytest.raises(ValidationError, match="value 999ms must be greater than 1000ms"):
        validate_greater_than_time_duration(timedelta(milliseconds=999), "1000ms")
    assert validate_less_than_time_duration(
        timedelta(milliseconds=19), "20ms"
    ) == timedelta(milliseconds=19)
    with pytest.raises(ValidationError, match="LessThan rule for time.Duration bad is incorrect"):
        validate_less_than_time_duration(timedelta(0), "bad")
    with pytest.raises(ValidationError, match="GreaterThan rule"):
        validate_greater_than_time_duration(timedelta(0), "bad")


def test_validate_time_durations_dispatch():
    rules = {"greaterThan": "1000ms"}
    with pytest.raises(ValidationError):
        validate_time_durations(timedelta(milliseconds=999), rules)
    assert validate_time_durations(timedelta(seconds=2), rules) == timedelta(seconds=2)
    assert validate_time_durations(timedelta(milliseconds=19), {"lessThan": "20ms"}) == timedelta(
        milliseconds=19
    )
    assert validate_time_durations(timedelta(seconds=3), {}) == timedelta(seconds=3)


def test_not_found_error_message():
    error = NotFoundError()
    assert "not found" in str(error)
    assert issubclass(NotFoundError, LookupError)