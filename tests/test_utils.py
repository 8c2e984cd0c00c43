import pytest

from configmapper.utils import check_name_is_array_and_get_index


def test_single_digit_index():
    assert check_name_is_array_and_get_index("USERS_IDS[1]") == ("USERS_IDS", 1)


def test_multi_digit_index():
    assert check_name_is_array_and_get_index("USERS_IDS[1000]") == ("USERS_IDS", 1000)


@pytest.mark.parametrize(
    "key",
    ["USERS_IDS[1000]A", "USERS_IDS", "USERS_IDS[-1]", "[3]", "USERS_IDS[]", "USERS_IDS[1]\n"],
)
def test_not_an_array_key(key):
    assert check_name_is_array_and_get_index(key) is None


def test_index_too_large_is_rejected():
    assert check_name_is_array_and_get_index("A[99999999999999999999]") is None


def test_nested_brackets_take_last_index():
    assert check_name_is_array_and_get_index("A[1][2]") == ("A[1]", 2)