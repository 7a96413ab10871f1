"""Shared test fixtures."""

import base64
import hashlib
from datetime import UTC, datetime

import pytest

from flag_cache import User, ValueSet, ValueStore
from flag_cache.storage import InMemoryStorage


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self._now = start

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._now, tz=UTC)

    def advance(self, seconds: float) -> None:
        self._now += seconds


def hashed(name: str) -> str:
    return base64.b64encode(hashlib.sha256(name.encode("utf-8")).digest()).decode("ascii")


def make_payload(gate_value: bool = True, color: str = "blue") -> dict:
    return {
        "feature_gates": {
            hashed("new_checkout"): {
                "name": hashed("new_checkout"),
                "value": gate_value,
                "rule_id": "rule_gate",
                "secondary_exposures": [{"gate": "dep", "gateValue": "true", "ruleID": "r"}],
            },
        },
        "dynamic_configs": {
            hashed("theme"): {
                "name": hashed("theme"),
                "value": {"color": color, "size": 12},
                "rule_id": "rule_config",
                "is_user_in_experiment": True,
            },
        },
        "layer_configs": {
            hashed("homepage"): {
                "value": {"hero": "banner", "limit": 3},
                "rule_id": "rule_layer",
                "allocated_experiment_name": hashed("hero_test"),
                "explicit_parameters": ["hero"],
                "secondary_exposures": [{"gate": "a", "gateValue": "true", "ruleID": "1"}],
                "undelegated_secondary_exposures": [
                    {"gate": "b", "gateValue": "false", "ruleID": "2"}
                ],
            },
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clock_at():
    """Factory for clocks frozen at a given epoch second."""
    return FakeClock


@pytest.fixture(name="hashed")
def hashed_fixture():
    return hashed


@pytest.fixture(name="make_payload")
def make_payload_fixture():
    return make_payload


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, clock):
    return ValueStore(storage, clock=clock)


@pytest.fixture
def make_values(clock):
    """Build a ValueSet one second after the previous one."""

    def _make(**kwargs) -> ValueSet:
        clock.advance(1)
        return ValueSet(make_payload(**kwargs), clock=clock)

    return _make


@pytest.fixture
def alice():
    return User(user_id="alice@acme.com")


@pytest.fixture
def bob():
    return User(user_id="bob@acme.com")


@pytest.fixture
def logged_out():
    return User()
