"""Fallible accessors for untyped server payloads.

Server responses arrive as loosely shaped JSON.  Every accessor here
returns a default instead of raising when a field is missing or has the
wrong shape, so one bad field never poisons a whole snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    """Return *value* if it is a mapping, else ``None``."""
    if isinstance(value, Mapping):
        return value
    return None


def get_mapping(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    return dict(value) if (value := as_mapping(data.get(key))) is not None else {}


def get_str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def get_bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def get_str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def get_exposures(data: Mapping[str, Any], key: str) -> tuple[Mapping[str, str], ...]:
    """Read a list of ``{str: str}`` exposure records, dropping malformed ones."""
    value = data.get(key)
    if not isinstance(value, list):
        return ()
    exposures = []
    for item in value:
        if isinstance(item, Mapping) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in item.items()
        ):
            exposures.append(MappingProxyType(dict(item)))
    return tuple(exposures)


def matches_default(value: Any, default: Any) -> bool:
    """Return ``True`` if *value* can stand in for *default*.

    ``None`` accepts anything.  Booleans only match booleans, and numbers
    match any non-boolean number, so ``1`` never satisfies ``False``.
    """
    if default is None:
        return value is not None
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(value, bool) and isinstance(default, bool)
    if isinstance(default, int | float):
        return isinstance(value, int | float)
    if isinstance(default, Mapping):
        return isinstance(value, Mapping)
    return isinstance(value, type(default))


def freeze(value: Any) -> Any:
    """Return a deeply read-only copy of a JSON-like value.

    Mappings become ``MappingProxyType`` views over fresh dicts and lists
    become tuples, so nothing reachable from the result aliases *value*.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: a fresh plain ``dict``/``list`` copy."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [thaw(item) for item in value]
    return value
