# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the JSON contract of
``python -m flag_cache.runner``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from flag_cache.config import CacheSettings


class LookupRequest(BaseModel):
    """Complete input read from stdin.

    Attributes:
        settings: Where the persisted cache lives and how it is bounded
        user_id: User to answer for; ``None`` means the logged-out user
        gates: Gate names to check
        configs: Config names to resolve
        layers: Layer names to resolve
    """

    settings: CacheSettings = Field(default_factory=CacheSettings)
    user_id: str | None = None
    gates: list[str] = Field(default_factory=list)
    configs: list[str] = Field(default_factory=list)
    layers: list[str] = Field(default_factory=list)


class GateSchema(BaseModel):
    """Cached gate evaluation.

    Attributes:
        name: Name the entry was delivered under
        value: Whether the gate passes
        rule_id: Rule that produced the value
    """

    name: str
    value: bool
    rule_id: str = ""


class ConfigSchema(BaseModel):
    """Cached config evaluation.

    Attributes:
        name: Name the entry was delivered under
        value: Parameter mapping
        rule_id: Rule that produced the value
        is_user_in_experiment: Whether the user was allocated to an experiment
    """

    name: str
    value: dict[str, Any] = Field(default_factory=dict)
    rule_id: str = ""
    is_user_in_experiment: bool = False


class LayerSchema(BaseModel):
    """Cached layer evaluation.

    Attributes:
        name: Name the entry was delivered under
        value: Parameter mapping
        rule_id: Rule that produced the value
        allocated_experiment_name: Experiment the user landed in, if any
    """

    name: str
    value: dict[str, Any] = Field(default_factory=dict)
    rule_id: str = ""
    allocated_experiment_name: str = ""


class LookupResponse(BaseModel):
    """Complete output written to stdout.

    The runner always outputs valid JSON matching this schema, even on
    errors.  Names that miss map to ``null``.

    Attributes:
        success: Whether the lookup completed
        cached: Whether a snapshot exists for the user
        gates: Gate name -> result
        configs: Config name -> result
        layers: Layer name -> result
        error: Error message (on failure)
        error_type: Error class name (on failure)
    """

    success: bool
    cached: bool = False
    gates: dict[str, GateSchema | None] = Field(default_factory=dict)
    configs: dict[str, ConfigSchema | None] = Field(default_factory=dict)
    layers: dict[str, LayerSchema | None] = Field(default_factory=dict)
    error: str = ""
    error_type: str = ""
