# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for answering lookup requests from a persisted cache.

Orchestrates the full lookup flow:
1. Create the value store from settings
2. Resolve the requested user
3. Look up every requested gate, config and layer
4. Return a structured response
"""

from __future__ import annotations

from flag_cache._internal.payload import thaw
from flag_cache.exceptions import ConfigError, StorageError
from flag_cache.result import ConfigResult, GateResult, LayerResult
from flag_cache.store import ValueStore
from flag_cache.user import User

from .schema import ConfigSchema, GateSchema, LayerSchema, LookupRequest, LookupResponse


class LookupExecutor:
    """Answers :class:`LookupRequest`s.

    Pass a store to the constructor to override store creation; useful
    for testing.

    Example:
        executor = LookupExecutor()
        response = executor.execute(request)

        # For testing with a prepared store:
        executor = LookupExecutor(store=ValueStore())
    """

    def __init__(self, store: ValueStore | None = None) -> None:
        self._injected_store = store

    def execute(self, request: LookupRequest) -> LookupResponse:
        """Run the lookup, converting any failure into an error response."""
        try:
            return self._execute_internal(request)
        except ConfigError as e:
            return LookupResponse(success=False, error=str(e), error_type="ConfigError")
        except StorageError as e:
            return LookupResponse(success=False, error=str(e), error_type="StorageError")
        except Exception as e:
            return LookupResponse(success=False, error=str(e), error_type=type(e).__name__)

    def _execute_internal(self, request: LookupRequest) -> LookupResponse:
        store = self._injected_store
        owns_store = store is None  # We need to close it if we created it
        if store is None:
            store = ValueStore.from_settings(request.settings)

        try:
            user = User(user_id=request.user_id)
            return LookupResponse(
                success=True,
                cached=store.get(user) is not None,
                gates={
                    name: self._gate_schema(store.check_gate(user, name))
                    for name in request.gates
                },
                configs={
                    name: self._config_schema(store.get_config(user, name))
                    for name in request.configs
                },
                layers={
                    name: self._layer_schema(store.get_layer(user, name))
                    for name in request.layers
                },
            )
        finally:
            if owns_store and hasattr(store.storage, "close"):
                store.storage.close()

    @staticmethod
    def _gate_schema(result: GateResult | None) -> GateSchema | None:
        if result is None:
            return None
        return GateSchema(name=result.name, value=result.value, rule_id=result.rule_id)

    @staticmethod
    def _config_schema(result: ConfigResult | None) -> ConfigSchema | None:
        if result is None:
            return None
        return ConfigSchema(
            name=result.name,
            value=thaw(result.value),
            rule_id=result.rule_id,
            is_user_in_experiment=result.is_user_in_experiment,
        )

    @staticmethod
    def _layer_schema(result: LayerResult | None) -> LayerSchema | None:
        if result is None:
            return None
        return LayerSchema(
            name=result.name,
            value=thaw(result.value),
            rule_id=result.rule_id,
            allocated_experiment_name=result.allocated_experiment_name,
        )
