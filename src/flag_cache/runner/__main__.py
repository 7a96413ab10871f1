# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Entry point for the flag_cache lookup runner.

Usage:
    python -m flag_cache.runner < request.json > response.json

The runner reads a JSON lookup request from stdin, answers it from the
persisted cache, and writes a JSON response to stdout.  Log lines go to
stderr.

Exit codes:
    0: Success
    1: Failure (error details in JSON output)
"""

from __future__ import annotations

import os
import sys

from flag_cache.logging import configure_logging

from .executor import LookupExecutor
from .schema import LookupRequest, LookupResponse


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    configure_logging(os.getenv("FLAG_CACHE_LOG_LEVEL", "warning"))
    try:
        request = LookupRequest.model_validate_json(sys.stdin.read())
        response = LookupExecutor().execute(request)
        print(response.model_dump_json())
        return 0 if response.success else 1

    except Exception as e:
        # Always emit valid JSON, even for malformed requests
        error_output = LookupResponse(
            success=False,
            error=str(e),
            error_type=type(e).__name__,
        )
        print(error_output.model_dump_json())
        return 1


if __name__ == "__main__":
    sys.exit(main())
