"""Agent-scoped key/value state."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from agentcore.errors import InvalidKeyError


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key.strip():
        raise InvalidKeyError(f"State key must be a non-empty string, got {key!r}")
    return key


class StateStore:
    """Key/value mapping owned by a single agent.

    Updates never modify the current mapping in place: each ``set`` builds a
    new dict and swaps it in, so a ``snapshot()`` taken earlier keeps the
    values it had. Last write wins; nothing expires.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        data = dict(initial or {})
        for key in data:
            _check_key(key)
        self._data: dict[str, Any] = data
        self._lock = threading.Lock()

    def set(self, key: str, value: Any) -> None:
        _check_key(key)
        with self._lock:
            self._data = {**self._data, key: value}

    def get(self, key: str, default: Any = None) -> Any:
        _check_key(key)
        return self._data.get(key, default)

    def update(self, values: Mapping[str, Any]) -> None:
        """Set several keys in one step."""
        for key in values:
            _check_key(key)
        with self._lock:
            self._data = {**self._data, **values}

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view of the state as of this call."""
        return MappingProxyType(self._data)

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
