"""Basic flag_cache usage: cache two users, restart, read from disk.

Run with:
    python examples/basic_usage.py
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from flag_cache import User, ValueStore
from flag_cache.logging import configure_logging
from flag_cache.storage import SQLiteStorage


def fake_fetch(user: User) -> dict:
    """Stand-in for the network call that returns evaluated values."""
    is_staff = (user.email or "").endswith("@acme.com")
    return {
        "feature_gates": {
            "new_checkout": {"value": is_staff, "rule_id": "staff_rule" if is_staff else "default"},
        },
        "dynamic_configs": {
            "theme": {"value": {"color": "purple" if is_staff else "grey"}, "rule_id": "r1"},
        },
    }


def log_exposure(result, parameter: str) -> None:
    print(f"  exposure: {result.name}.{parameter} (rule {result.rule_id})")


def main() -> None:
    configure_logging("info")
    db_path = str(Path(tempfile.mkdtemp()) / "flag_cache.db")

    alice = User(user_id="alice", email="alice@acme.com")
    guest = User()

    with SQLiteStorage(db_path) as storage:
        store = ValueStore(storage)
        store.refresh(alice, fake_fetch)
        store.refresh(guest, fake_fetch)

    # A new process would start here
    with SQLiteStorage(db_path) as storage:
        store = ValueStore(storage)
        for user in (alice, guest):
            gate = store.check_gate(user, "new_checkout")
            config = store.get_config(user, "theme")
            print(f"{user.cache_key}: new_checkout={gate.value if gate else None}")
            if config is not None:
                color = config.get_value("color", "white", on_exposure=log_exposure)
                print(f"  theme.color={color}")

        store.clear()
        print(f"after clear: {len(store)} users cached")


if __name__ == "__main__":
    main()
