# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for answering lookups from a persisted cache.

Usage:
    python -m flag_cache.runner < request.json > response.json

Exports:
    LookupExecutor: Answers lookup requests
    LookupRequest: Input schema
    LookupResponse: Output schema
"""

from .executor import LookupExecutor
from .schema import (
    ConfigSchema,
    GateSchema,
    LayerSchema,
    LookupRequest,
    LookupResponse,
)

__all__ = [
    "ConfigSchema",
    "GateSchema",
    "LayerSchema",
    "LookupExecutor",
    "LookupRequest",
    "LookupResponse",
]
