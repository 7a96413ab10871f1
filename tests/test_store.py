"""Tests for ValueStore."""

import pytest
from structlog.testing import capture_logs

from flag_cache import LOGGED_OUT_USER_KEY, User, ValueSet, ValueStore
from flag_cache.config import DEFAULT_STORAGE_KEY
from flag_cache.exceptions import StorageError
from flag_cache.storage import InMemoryStorage, Storage


class BrokenStorage(Storage):
    def get(self, key):
        raise StorageError("get", "disk gone")

    def set(self, key, value):
        raise StorageError("set", "disk gone")

    def remove(self, key):
        raise StorageError("remove", "disk gone")


def test_starts_empty(store, alice):
    assert len(store) == 0
    assert store.get(alice) is None


def test_set_and_get(store, alice, make_values):
    values = make_values()
    store.set(alice, values)
    assert store.get(alice) == values


def test_check_gate_and_get_config(store, alice, make_values):
    store.set(alice, make_values(gate_value=True, color="red"))
    assert store.check_gate(alice, "new_checkout").value is True
    assert store.get_config(alice, "theme").get_value("color", "") == "red"
    assert store.get_layer(alice, "homepage").rule_id == "rule_layer"


def test_misses_are_none(store, alice, bob, make_values):
    store.set(alice, make_values())
    assert store.check_gate(alice, "unknown") is None
    assert store.get_config(alice, "unknown") is None
    assert store.check_gate(bob, "new_checkout") is None
    assert store.get_config(bob, "theme") is None
    assert store.get_layer(bob, "homepage") is None


def test_overwrite_not_merge(store, alice, bob, make_values, clock_at):
    t1 = make_values(color="red")
    t2 = make_values()
    t3 = ValueSet({"dynamic_configs": {"other": {"value": {}}}}, clock=clock_at(5000))
    store.set(alice, t1)
    store.set(bob, t2)
    store.set(alice, t3)

    assert store.get(alice) == t3
    assert store.get_config(alice, "theme") is None
    assert len(store) == 2


def test_logged_out_and_empty_id_are_distinct(store, logged_out, make_values):
    empty = User(user_id="")
    store.set(logged_out, make_values(color="red"))
    store.set(empty, make_values(color="blue"))

    assert len(store) == 2
    assert store.get_config(logged_out, "theme").value["color"] == "red"
    assert store.get_config(empty, "theme").value["color"] == "blue"
    assert LOGGED_OUT_USER_KEY in store.user_keys()


def test_capacity_never_exceeded(store, make_values):
    for i in range(12):
        store.set(User(user_id=f"u{i}"), make_values())
        assert len(store) <= 5
    assert store.user_keys() == [f"u{i}" for i in range(7, 12)]


def test_evicts_oldest_creation_time(storage, clock_at):
    store = ValueStore(storage, max_user_cache_count=3)
    times = {"a": 300.0, "b": 100.0, "c": 200.0}
    for user_id, ts in times.items():
        store.set(User(user_id=user_id), ValueSet({}, clock=clock_at(ts)))

    store.set(User(user_id="d"), ValueSet({}, clock=clock_at(400.0)))

    assert store.get(User(user_id="b")) is None
    remaining = [store.get(User(user_id=k)).creation_time for k in store.user_keys()]
    assert all(ts >= 100.0 for ts in remaining)
    assert sorted(store.user_keys()) == ["a", "c", "d"]


def test_new_entry_with_oldest_time_is_evicted(storage, clock_at):
    store = ValueStore(storage, max_user_cache_count=2)
    store.set(User(user_id="a"), ValueSet({}, clock=clock_at(200.0)))
    store.set(User(user_id="b"), ValueSet({}, clock=clock_at(300.0)))
    store.set(User(user_id="old"), ValueSet({}, clock=clock_at(100.0)))
    assert sorted(store.user_keys()) == ["a", "b"]


def test_eviction_is_logged(storage, make_values):
    store = ValueStore(storage, max_user_cache_count=1)
    store.set(User(user_id="a"), make_values())
    with capture_logs() as logs:
        store.set(User(user_id="b"), make_values())
    evicted = [e for e in logs if e["event"] == "value_store.evicted"]
    assert evicted and evicted[0]["user_key"] == "a"


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ValueStore(max_user_cache_count=0)


class TestPersistence:
    def test_set_writes_raw_payloads(self, store, storage, alice, make_values):
        values = make_values()
        store.set(alice, values)
        assert storage.get(DEFAULT_STORAGE_KEY) == {"alice@acme.com": values.to_dict()}

    def test_round_trip(self, store, storage, alice, logged_out, make_values):
        store.set(alice, make_values(gate_value=True, color="red"))
        store.set(logged_out, make_values(gate_value=False))

        reloaded = ValueStore(storage)

        assert sorted(reloaded.user_keys()) == sorted(store.user_keys())
        for user in (alice, logged_out):
            for name in ("new_checkout", "theme", "homepage", "missing"):
                assert reloaded.check_gate(user, name) == store.check_gate(user, name)
                assert reloaded.get_config(user, name) == store.get_config(user, name)
                assert reloaded.get_layer(user, name) == store.get_layer(user, name)

    def test_cached_snapshot_cannot_be_changed_by_callers(self, store, storage, alice):
        store.set(
            alice,
            ValueSet(
                {
                    "feature_gates": {"g": {"value": True}},
                    "dynamic_configs": {"c": {"value": {"nested": {"k": 1}}}},
                }
            ),
        )

        with pytest.raises(TypeError):
            store.get(alice).raw_data["feature_gates"]["g"]["value"] = False
        with pytest.raises(TypeError):
            store.get_config(alice, "c").value["nested"]["k"] = 999
        store.get_config(alice, "c").get_value("nested", {})["k"] = 999
        store.save()

        reloaded = ValueStore(storage)
        assert reloaded.check_gate(alice, "g") == store.check_gate(alice, "g")
        assert reloaded.check_gate(alice, "g").value is True
        assert reloaded.get_config(alice, "c") == store.get_config(alice, "c")
        assert store.get_config(alice, "c").get_value("nested", {}) == {"k": 1}

    def test_malformed_entries_skipped(self, alice, make_payload):
        storage = InMemoryStorage(
            {
                DEFAULT_STORAGE_KEY: {
                    "alice@acme.com": make_payload(color="red"),
                    "bob@acme.com": "not a payload",
                    "carol@acme.com": [1, 2, 3],
                }
            }
        )
        with capture_logs() as logs:
            store = ValueStore(storage)

        assert store.user_keys() == ["alice@acme.com"]
        assert store.get_config(alice, "theme").value["color"] == "red"
        skipped = [e for e in logs if e["event"] == "value_store.entry_skipped"]
        assert len(skipped) == 2

    def test_non_mapping_blob_starts_empty(self):
        storage = InMemoryStorage({DEFAULT_STORAGE_KEY: ["garbage"]})
        assert len(ValueStore(storage)) == 0

    def test_load_trims_to_capacity(self):
        blob = {f"u{i}": {} for i in range(8)}
        store = ValueStore(InMemoryStorage({DEFAULT_STORAGE_KEY: blob}))
        assert len(store) == 5

    def test_custom_storage_key(self, storage, alice, make_values):
        store = ValueStore(storage, storage_key="other")
        store.set(alice, make_values())
        assert storage.get(DEFAULT_STORAGE_KEY) is None
        assert "alice@acme.com" in storage.get("other")

    def test_load_failure_is_swallowed(self):
        with capture_logs() as logs:
            store = ValueStore(BrokenStorage())
        assert len(store) == 0
        assert any(e["event"] == "value_store.load_failed" for e in logs)

    def test_save_failure_is_swallowed(self, alice, make_values):
        store = ValueStore(BrokenStorage())
        values = make_values()
        with capture_logs() as logs:
            store.set(alice, values)
        assert store.get(alice) == values
        assert any(e["event"] == "value_store.save_failed" for e in logs)

    def test_reload_replaces_memory(self, store, storage, alice, bob, make_values):
        store.set(alice, make_values())
        other = ValueStore(storage)
        other.set(bob, make_values())

        store.load()
        assert sorted(store.user_keys()) == ["alice@acme.com", "bob@acme.com"]


class TestClear:
    def test_clear_removes_memory_and_storage(self, store, storage, alice, make_values):
        store.set(alice, make_values())
        store.clear()
        assert len(store) == 0
        assert storage.get(DEFAULT_STORAGE_KEY) is None

    def test_delete_persisted_leaves_live_store(self, store, storage, alice, make_values):
        store.set(alice, make_values())
        ValueStore.delete_persisted(storage)

        assert storage.get(DEFAULT_STORAGE_KEY) is None
        assert store.get(alice) is not None
        assert len(ValueStore(storage)) == 0

    def test_delete_persisted_failure_is_swallowed(self):
        with capture_logs() as logs:
            ValueStore.delete_persisted(BrokenStorage())
        assert any(e["event"] == "value_store.clear_failed" for e in logs)


class TestRefresh:
    def test_refresh_caches_fetched_payload(self, store, alice, clock, make_payload):
        calls = []

        def fetcher(user):
            calls.append(user)
            return make_payload(color="purple")

        values = store.refresh(alice, fetcher)

        assert calls == [alice]
        assert values.creation_time == clock.now().timestamp()
        assert store.get_config(alice, "theme").value["color"] == "purple"

    def test_fetch_error_propagates(self, store, alice, make_values):
        original = make_values()
        store.set(alice, original)

        def fetcher(user):
            raise ConnectionError("offline")

        with pytest.raises(ConnectionError):
            store.refresh(alice, fetcher)
        assert store.get(alice) == original
