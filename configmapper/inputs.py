"""Sources that configuration values are read from."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from .validators import _parse_float

INPUT_ENV_NAME = "env"
INPUT_MOCK_NAME = "mock"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(text: str) -> bool:
    """Parse the usual spellings of true and false; raise ValueError otherwise."""
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f'invalid boolean "{text}"')


class KeyNotFoundError(LookupError):
    """Raised when an input has no value for a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"key {key} is not found")
        self.key = key


class ValueInput(ABC):
    """A named source of typed configuration values."""

    name: ClassVar[str]

    @abstractmethod
    def get_boolean(self, key: str) -> bool:
        """Return the boolean stored under ``key``."""

    @abstractmethod
    def get_number(self, key: str) -> float:
        """Return the number stored under ``key``."""

    @abstractmethod
    def get_string(self, key: str) -> str:
        """Return the string stored under ``key``."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Tell whether ``key`` is present."""

    @abstractmethod
    def can_refresh(self) -> bool:
        """Tell whether the input can reload its values at runtime."""

    @abstractmethod
    def reload(self) -> None:
        """Fetch the values again."""


class OsEnvInput(ValueInput):
    """Reads values from environment variables."""

    name = INPUT_ENV_NAME

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def _lookup(self, key: str) -> str:
        try:
            return self._environ[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def get_boolean(self, key: str) -> bool:
        return parse_bool(self._lookup(key))

    def get_number(self, key: str) -> float:
        return _parse_float(self._lookup(key))

    def get_string(self, key: str) -> str:
        return self._lookup(key)

    def has(self, key: str) -> bool:
        return key in self._environ

    def can_refresh(self) -> bool:
        return False

    def reload(self) -> None:
        raise RuntimeError("the environment input cannot be reloaded")


@dataclass
class InputMock(ValueInput):
    """An in-memory input whose values and failures are set by hand."""

    keys_bool: dict[str, bool] = field(default_factory=dict)
    keys_number: dict[str, float] = field(default_factory=dict)
    keys_str: dict[str, str] = field(default_factory=dict)
    should_err: dict[str, Exception] = field(default_factory=dict)

    name: ClassVar[str] = INPUT_MOCK_NAME

    def _lookup(self, key: str, values: Mapping[str, object]):
        if key in self.should_err:
            raise self.should_err[key]
        try:
            return values[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def has(self, key: str) -> bool:
        if key in self.should_err:
            return False
        return key in self.keys_str

    def get_boolean(self, key: str) -> bool:
        return self._lookup(key, self.keys_bool)

    def get_number(self, key: str) -> float:
        return self._lookup(key, self.keys_number)

    def get_string(self, key: str) -> str:
        return self._lookup(key, self.keys_str)

    def should_error(self, key_name: str, error: Exception) -> InputMock:
        """Make every lookup of ``key_name`` raise ``error``."""
        self.should_err[key_name] = error
        return self

    def should_return(self, key_name: str) -> InputMock:
        """Undo an earlier :meth:`should_error` for ``key_name``."""
        self.should_err.pop(key_name, None)
        return self

    def can_refresh(self) -> bool:
        return False

    def reload(self) -> None:
        raise RuntimeError("the mock input cannot be reloaded")