"""ValueSet — one user's snapshot of evaluated gates, configs and layers."""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from flag_cache._internal.clock import Clock, SystemClock, epoch_seconds
from flag_cache._internal.hashing import sha256_base64
from flag_cache._internal.payload import as_mapping, freeze, get_mapping
from flag_cache.result import ConfigResult, GateResult, LayerResult

_R = TypeVar("_R")


def _build_entries(
    payload: Mapping[str, Any],
    section: str,
    factory: Callable[[str, Mapping[str, Any]], _R],
) -> dict[str, _R]:
    entries: dict[str, _R] = {}
    for name, record in get_mapping(payload, section).items():
        if isinstance(name, str) and (record := as_mapping(record)) is not None:
            entries[name] = factory(name, record)
    return entries


def _lookup(entries: Mapping[str, _R], name: str) -> _R | None:
    """Find *name* by its hash first, then as given."""
    name_hash = sha256_base64(name)
    if name_hash is None:
        return None
    if name_hash in entries:
        return entries[name_hash]
    return entries.get(name)


class ValueSet:
    """Immutable snapshot of everything fetched for one user at one time.

    The server payload is kept verbatim so it can be persisted and the
    derived lookup tables rebuilt on load.  Payload sections that are
    missing or malformed simply produce empty tables.

    Parameters:
        raw_data: The untyped server response for one user.
        clock:    Injectable clock for testing.  Sets ``creation_time``.
    """

    __slots__ = ("_configs", "_creation_time", "_gates", "_layers", "_raw_data")

    def __init__(self, raw_data: Mapping[str, Any], *, clock: Clock | None = None) -> None:
        payload = as_mapping(raw_data)
        self._raw_data: dict[str, Any] = copy.deepcopy(dict(payload)) if payload else {}
        self._creation_time = epoch_seconds(clock or SystemClock())
        self._gates = _build_entries(self._raw_data, "feature_gates", GateResult.from_record)
        self._configs = _build_entries(
            self._raw_data, "dynamic_configs", ConfigResult.from_record
        )
        self._layers = _build_entries(self._raw_data, "layer_configs", LayerResult.from_record)

    # ── snapshot data ────────────────────────────────────────

    @property
    def raw_data(self) -> Mapping[str, Any]:
        """Deeply read-only copy of the server payload."""
        return freeze(self._raw_data)

    @property
    def creation_time(self) -> float:
        """Seconds since the epoch when this snapshot was built."""
        return self._creation_time

    @property
    def gates(self) -> Mapping[str, GateResult]:
        return MappingProxyType(self._gates)

    @property
    def configs(self) -> Mapping[str, ConfigResult]:
        return MappingProxyType(self._configs)

    @property
    def layers(self) -> Mapping[str, LayerResult]:
        return MappingProxyType(self._layers)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible copy of the server payload for persistence."""
        return copy.deepcopy(self._raw_data)

    # ── lookups ──────────────────────────────────────────────

    def check_gate(self, name: str) -> GateResult | None:
        return _lookup(self._gates, name)

    def get_config(self, name: str) -> ConfigResult | None:
        return _lookup(self._configs, name)

    def get_layer(self, name: str) -> LayerResult | None:
        return _lookup(self._layers, name)

    # ── dunder ───────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueSet):
            return NotImplemented
        return self._raw_data == other._raw_data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"ValueSet(gates={len(self._gates)}, configs={len(self._configs)}, "
            f"layers={len(self._layers)}, creation_time={self._creation_time})"
        )
