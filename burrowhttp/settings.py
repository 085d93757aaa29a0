"""Hierarchical, case-insensitive configuration store addressed by dotted keys."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

_MISSING = object()
_TRUE_WORDS = frozenset({"1", "t", "true"})


def _split_key(key: str) -> list[str]:
    key = key.strip().lower()
    return key.split(".") if key else []


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k).lower(): _normalize(v) for k, v in value.items()}
    return value


def _lookup(tree: dict, parts: list[str]) -> Any:
    node: Any = tree
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _assign(tree: dict, parts: list[str], value: Any) -> None:
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _merge(base: Any, over: Any) -> Any:
    if isinstance(base, dict) and isinstance(over, dict):
        merged = copy.deepcopy(base)
        for name, value in over.items():
            merged[name] = _merge(base[name], value) if name in base else copy.deepcopy(value)
        return merged
    return copy.deepcopy(over)


class Settings:
    """Configuration values with defaults, read with type coercion."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._defaults: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Set an explicit value, overriding any default."""
        parts = _split_key(key)
        if not parts:
            raise ValueError("configuration key must not be empty")
        _assign(self._values, parts, _normalize(value))

    def set_default(self, key: str, value: Any) -> None:
        """Set the value used when nothing explicit is set for the key."""
        parts = _split_key(key)
        if not parts:
            raise ValueError("configuration key must not be empty")
        _assign(self._defaults, parts, _normalize(value))

    def is_set(self, key: str) -> bool:
        parts = _split_key(key)
        if not parts:
            return False
        return (
            _lookup(self._values, parts) is not _MISSING
            or _lookup(self._defaults, parts) is not _MISSING
        )

    def get(self, key: str) -> Any:
        """Return a copy of the value at the key, or None when it is not set."""
        parts = _split_key(key)
        explicit = _lookup(self._values, parts)
        default = _lookup(self._defaults, parts)
        if explicit is _MISSING:
            return None if default is _MISSING else copy.deepcopy(default)
        if default is _MISSING:
            return copy.deepcopy(explicit)
        return _merge(default, explicit)

    def get_string(self, key: str) -> str:
        return _to_string(self.get(key))

    def get_int(self, key: str) -> int:
        value = self.get(key)
        if value is None:
            return 0
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text, 0)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                return 0
            return int(number) if number.is_integer() else 0
        return 0

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_WORDS
        return False

    def get_string_list(self, key: str) -> list[str]:
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        if isinstance(value, (list, tuple)):
            return [_to_string(item) for item in value]
        return [_to_string(value)]

    def get_string_map(self, key: str) -> dict[str, Any]:
        value = self.get(key)
        return dict(value) if isinstance(value, dict) else {}

    def children(self, key: str) -> list[str]:
        """Names of the entries directly below the key, sorted."""
        return sorted(self.get_string_map(key))

    def reset(self) -> None:
        self._values.clear()
        self._defaults.clear()


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)