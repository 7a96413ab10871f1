"""Evaluation results for gates, configs and layers.

Each result is built from one server record and is immutable.  Lookups
that find nothing return ``None`` instead of a result.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

from flag_cache._internal.payload import (
    freeze,
    get_bool,
    get_exposures,
    get_mapping,
    get_str,
    get_str_list,
    matches_default,
    thaw,
)

def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


class ExposureCallback(Protocol):
    """Hook invoked when a parameter value is actually read.

    Passed explicitly into ``get_value`` so results never hold a
    reference to the client that logs exposures.
    """

    def __call__(self, result: ConfigResult | LayerResult, parameter: str) -> None: ...


@dataclass(frozen=True)
class GateResult:
    """Cached evaluation of a feature gate.

    Attributes:
        name:                Name the entry was delivered under (often a hash).
        value:               ``True`` if the gate passes for the user.
        rule_id:             Identifier of the rule that produced the value.
        secondary_exposures: Exposures of gates this gate depends on.
        raw:                 The server record this result was built from.
    """

    name: str
    value: bool = False
    rule_id: str = ""
    secondary_exposures: tuple[Mapping[str, str], ...] = ()
    raw: Mapping[str, Any] = field(default_factory=_empty, compare=False, repr=False)

    @staticmethod
    def from_record(name: str, record: Mapping[str, Any]) -> GateResult:
        return GateResult(
            name=name,
            value=get_bool(record, "value"),
            rule_id=get_str(record, "rule_id"),
            secondary_exposures=get_exposures(record, "secondary_exposures"),
            raw=freeze(record),
        )


@dataclass(frozen=True)
class ConfigResult:
    """Cached evaluation of a dynamic config or experiment.

    Attributes:
        name:                  Name the entry was delivered under (often a hash).
        value:                 Deeply read-only parameter mapping.
        rule_id:               Identifier of the rule that produced the value.
        secondary_exposures:   Exposures of gates the config depends on.
        is_user_in_experiment: Whether the user was allocated to an experiment.
        is_experiment_active:  Whether the backing experiment is running.
        is_device_based:       Whether the config is keyed on a device ID.
        raw:                   The server record this result was built from.
    """

    name: str
    value: Mapping[str, Any] = field(default_factory=_empty)
    rule_id: str = ""
    secondary_exposures: tuple[Mapping[str, str], ...] = ()
    is_user_in_experiment: bool = False
    is_experiment_active: bool = False
    is_device_based: bool = False
    raw: Mapping[str, Any] = field(default_factory=_empty, compare=False, repr=False)

    @staticmethod
    def from_record(name: str, record: Mapping[str, Any]) -> ConfigResult:
        return ConfigResult(
            name=name,
            value=freeze(get_mapping(record, "value")),
            rule_id=get_str(record, "rule_id"),
            secondary_exposures=get_exposures(record, "secondary_exposures"),
            is_user_in_experiment=get_bool(record, "is_user_in_experiment"),
            is_experiment_active=get_bool(record, "is_experiment_active"),
            is_device_based=get_bool(record, "is_device_based"),
            raw=freeze(record),
        )

    def get_value(
        self,
        key: str,
        default: Any = None,
        on_exposure: ExposureCallback | None = None,
    ) -> Any:
        """Return the parameter under *key*, or *default*.

        The stored value is only returned when it is compatible with the
        type of *default*.  Mappings and lists come back as fresh copies.
        *on_exposure* fires on a hit, never on a miss.
        """
        value = thaw(self.value.get(key))
        if not matches_default(value, default):
            return default
        if on_exposure is not None:
            on_exposure(self, key)
        return value


@dataclass(frozen=True)
class LayerResult:
    """Cached evaluation of a layer, whose parameters experiments may own.

    Attributes:
        name:                            Name the entry was delivered under.
        value:                           Deeply read-only parameter mapping.
        rule_id:                         Identifier of the rule that produced the value.
        secondary_exposures:             Exposures for parameters owned by
                                         the allocated experiment.
        undelegated_secondary_exposures: Exposures for every other parameter.
        explicit_parameters:             Parameters the allocated experiment sets.
        allocated_experiment_name:       Experiment the user landed in, if any.
        is_user_in_experiment:           Whether the user was allocated.
        is_experiment_active:            Whether the allocated experiment is running.
        is_device_based:                 Whether the layer is keyed on a device ID.
        raw:                             The server record this result was built from.
    """

    name: str
    value: Mapping[str, Any] = field(default_factory=_empty)
    rule_id: str = ""
    secondary_exposures: tuple[Mapping[str, str], ...] = ()
    undelegated_secondary_exposures: tuple[Mapping[str, str], ...] = ()
    explicit_parameters: frozenset[str] = frozenset()
    allocated_experiment_name: str = ""
    is_user_in_experiment: bool = False
    is_experiment_active: bool = False
    is_device_based: bool = False
    raw: Mapping[str, Any] = field(default_factory=_empty, compare=False, repr=False)

    @staticmethod
    def from_record(name: str, record: Mapping[str, Any]) -> LayerResult:
        return LayerResult(
            name=name,
            value=freeze(get_mapping(record, "value")),
            rule_id=get_str(record, "rule_id"),
            secondary_exposures=get_exposures(record, "secondary_exposures"),
            undelegated_secondary_exposures=get_exposures(
                record, "undelegated_secondary_exposures"
            ),
            explicit_parameters=frozenset(get_str_list(record, "explicit_parameters")),
            allocated_experiment_name=get_str(record, "allocated_experiment_name"),
            is_user_in_experiment=get_bool(record, "is_user_in_experiment"),
            is_experiment_active=get_bool(record, "is_experiment_active"),
            is_device_based=get_bool(record, "is_device_based"),
            raw=freeze(record),
        )

    def is_explicit_parameter(self, parameter: str) -> bool:
        return parameter in self.explicit_parameters

    def exposures_for(self, parameter: str) -> tuple[Mapping[str, str], ...]:
        """Return the secondary exposures to log when *parameter* is read."""
        if self.is_explicit_parameter(parameter):
            return self.secondary_exposures
        return self.undelegated_secondary_exposures

    def get_value(
        self,
        key: str,
        default: Any = None,
        on_exposure: ExposureCallback | None = None,
    ) -> Any:
        """Return the parameter under *key*, or *default*.

        Same matching rules as :meth:`ConfigResult.get_value`.
        """
        value = thaw(self.value.get(key))
        if not matches_default(value, default):
            return default
        if on_exposure is not None:
            on_exposure(self, key)
        return value

