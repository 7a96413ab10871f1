"""Name hashing used to match entries keyed by hashed names."""

from __future__ import annotations

import base64
import hashlib


def sha256_base64(name: str) -> str | None:
    """Return the base64-encoded SHA-256 digest of *name*.

    Returns ``None`` when *name* cannot be encoded as UTF-8 (for example
    a string holding a lone surrogate).
    """
    try:
        data = name.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")
