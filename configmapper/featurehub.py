"""An input that reads feature values from a feature-hub server."""

from __future__ import annotations

import json
import logging
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from .inputs import KeyNotFoundError, ValueInput

INPUT_FH_NAME = "feature-hub"

_DEFAULT_REFRESH_SECONDS = 30.0
_log = logging.getLogger(__name__)


def _field(obj: dict, name: str) -> Any:
    if name in obj:
        return obj[name]
    lowered = name.lower()
    return next((value for key, value in obj.items() if key.lower() == lowered), None)


def _typed(obj: dict, name: str, kind: type, default: Any) -> Any:
    value = _field(obj, name)
    if value is None:
        return default
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
            raise ValueError(f"feature-hub field {name} must be an integer")
        return int(value)
    if not isinstance(value, kind):
        raise ValueError(f"feature-hub field {name} must be of type {kind.__name__}")
    return value


@dataclass(frozen=True)
class FHValue:
    """One feature as the server reports it."""

    id: str = ""
    key: str = ""
    locked: bool = False
    version: int = 0
    type: str = ""
    value: Any = None

    @classmethod
    def from_json(cls, obj: Any) -> FHValue:
        """Build a feature from its decoded JSON object."""
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise ValueError("feature-hub feature must be a JSON object")
        return cls(
            id=_typed(obj, "id", str, ""),
            key=_typed(obj, "key", str, ""),
            locked=_typed(obj, "l", bool, False),
            version=_typed(obj, "version", int, 0),
            type=_typed(obj, "type", str, ""),
            value=_field(obj, "value"),
        )


@dataclass(frozen=True)
class FeatureHubEnvironment:
    """An environment and its features; ``features`` is None when absent."""

    id: str = ""
    features: list[FHValue] | None = None

    @classmethod
    def from_json(cls, obj: Any) -> FeatureHubEnvironment:
        """Build an environment from its decoded JSON object."""
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise ValueError("feature-hub environment must be a JSON object")
        features = _field(obj, "features")
        if features is not None and not isinstance(features, list):
            raise ValueError("feature-hub features must be a JSON array")
        return cls(
            id=_typed(obj, "id", str, ""),
            features=None if features is None else [FHValue.from_json(f) for f in features],
        )


def parse_features(data: bytes | str | None) -> dict[str, FHValue]:
    """Map the features of the first environment in a server response by key."""
    if data is None:
        raise ValueError("incoming byte is nil, no config can be created")
    try:
        document = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"invalid feature-hub response: {exc}") from exc
    if document is None:
        environments: list[FeatureHubEnvironment] = []
    elif isinstance(document, list):
        environments = [FeatureHubEnvironment.from_json(item) for item in document]
    else:
        raise ValueError("feature-hub response must be a JSON array")
    if not environments:
        raise ValueError(
            "no config found, though no json parsing error neither, check server or connection"
        )
    first = environments[0]
    if not first.id:
        raise ValueError("no environment ID found in parsed feature-hub config")
    if first.features is None:
        raise ValueError("no features found in response")
    return {feature.key: feature for feature in first.features}


class FHInput(ValueInput):
    """Reads typed feature values fetched from a feature-hub server."""

    name = INPUT_FH_NAME

    def __init__(self, addr: str, api_key: str, *, timeout: float = 10.0) -> None:
        if not addr or not api_key:
            raise ValueError("addr and apiKey cannot be empty")
        self._server = addr
        self._api_key = api_key
        self._timeout = timeout
        self._lock = threading.Lock()
        self._features: dict[str, FHValue] = {}
        self._stop_event = threading.Event()
        self._refresher: threading.Thread | None = None
        self.refresh_count = 0
        self._fetch()

    @property
    def url(self) -> str:
        """The address the features are fetched from."""
        return f"{self._server}/features/?apiKey={self._api_key}"

    def __len__(self) -> int:
        with self._lock:
            return len(self._features)

    def _fetch(self) -> None:
        opener = urllib.request.build_opener()
        try:
            with opener.open(self.url, timeout=self._timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            exc.close()
            raise ConnectionError(
                f"non-200 status code from feature-hub server: {exc.code}"
            ) from exc
        if status != 200:
            raise ConnectionError(f"non-200 status code from feature-hub server: {status}")
        try:
            features = parse_features(body)
        except ValueError:
            with self._lock:
                self._features = {}
            raise
        with self._lock:
            self._features = features

    def auto_refreshing(self, enable: bool, interval: float | timedelta = 0.0) -> FHInput:
        """Start fetching in the background every ``interval`` (30 seconds if zero).

        Meant for direct use and tests; an input controller reloads through
        :meth:`reload` instead.
        """
        if not enable:
            return self
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds == 0:
            seconds = _DEFAULT_REFRESH_SECONDS
        self.stop()
        self._stop_event = threading.Event()
        self._refresher = threading.Thread(
            target=self._refresh_loop,
            args=(seconds, self._stop_event),
            name="feature-hub-refresh",
            daemon=True,
        )
        self._refresher.start()
        return self

    def _refresh_loop(self, seconds: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(seconds):
            try:
                self._fetch()
            except (OSError, ValueError) as exc:
                _log.warning("[feature-hub] -> error in auto-refreshing, skipped this round: %s", exc)
            else:
                with self._lock:
                    self.refresh_count += 1

    def stop(self) -> None:
        """Stop background refreshing, if it runs."""
        self._stop_event.set()
        refresher, self._refresher = self._refresher, None
        if refresher is not None and refresher is not threading.current_thread():
            refresher.join()

    def _feature(self, key: str) -> FHValue:
        with self._lock:
            try:
                return self._features[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def get_string(self, key: str) -> str:
        feature = self._feature(key)
        if feature.type == "STRING" and isinstance(feature.value, str):
            return feature.value
        raise TypeError(f"incompatible type for key={key}")

    def get_number(self, key: str) -> float:
        feature = self._feature(key)
        value = feature.value
        if feature.type == "NUMBER" and isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise TypeError(f"incompatible type for key={key}")

    def get_boolean(self, key: str) -> bool:
        feature = self._feature(key)
        if feature.type == "BOOLEAN" and isinstance(feature.value, bool):
            return feature.value
        raise TypeError(f"incompatible type for key={key}")

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._features

    def can_refresh(self) -> bool:
        return True

    def reload(self) -> None:
        try:
            self._fetch()
        except (OSError, ValueError) as exc:
            raise RuntimeError(f"failed to reload: {exc}") from exc