"""Tests for the snapshot cache — expiry, TTL refresh, durability, fallback."""

import json

import pytest

from stats_card.models import cache_key
from stats_card.services.cache_store import (
    CacheStore,
    FileBackend,
    MemoryBackend,
    negotiate_backend,
)
from stats_card.tests.conftest import FakeClock, make_recent, make_snapshot


class TestGetSet:
    def test_round_trip_within_ttl(self, memory_store):
        snap = make_snapshot(activity_series=[0, 3, 1], recent_items=[make_recent("Two Sum", "two-sum", 100)])
        memory_store.set("k", snap, 60)

        entry = memory_store.get("k")
        assert entry is not None
        assert entry.key == "k"
        assert entry.value == snap

    def test_get_returns_copy_not_stored_object(self, memory_store):
        snap = make_snapshot()
        memory_store.set("k", snap, 60)
        memory_store.get("k").value.rank = 999
        assert memory_store.get("k").value.rank == 100

    def test_missing_key(self, memory_store):
        assert memory_store.get("nope") is None

    def test_expires_at_is_now_plus_ttl_ms(self, memory_store, clock):
        entry = memory_store.set("k", make_snapshot(), 900)
        assert entry.expires_at == int(clock.now * 1000) + 900_000

    def test_set_overwrites(self, memory_store):
        memory_store.set("k", make_snapshot(rank=1), 60)
        memory_store.set("k", make_snapshot(rank=2), 60)
        assert memory_store.get("k").value.rank == 2


class TestExpiry:
    def test_expired_entry_is_gone(self, memory_store, clock):
        memory_store.set("k", make_snapshot(), 60)
        clock.advance(61)
        assert memory_store.get("k") is None

    def test_eviction_is_permanent(self, memory_store, clock):
        memory_store.set("k", make_snapshot(), 60)
        clock.advance(61)
        assert memory_store.get("k") is None
        assert memory_store.get("k") is None
        assert len(memory_store) == 0

    def test_expires_exactly_at_deadline(self, memory_store, clock):
        memory_store.set("k", make_snapshot(), 60)
        clock.advance(60)
        assert memory_store.get("k") is None

    def test_live_just_before_deadline(self, memory_store, clock):
        memory_store.set("k", make_snapshot(), 60)
        clock.advance(59.999)
        assert memory_store.get("k") is not None

    def test_expired_entry_not_evicted_until_read(self, memory_store, clock):
        memory_store.set("k", make_snapshot(), 60)
        clock.advance(120)
        assert len(memory_store) == 1
        memory_store.get("k")
        assert len(memory_store) == 0


class TestRefresh:
    def test_refresh_extends_ttl_without_changing_value(self, memory_store, clock):
        snap = make_snapshot()
        memory_store.set("k", snap, 60)
        clock.advance(50)

        assert memory_store.refresh("k", 60) is True
        clock.advance(50)  # 100s after set, 50s after refresh

        entry = memory_store.get("k")
        assert entry is not None
        assert entry.value == snap
        assert entry.expires_at == int((clock.now + 10) * 1000)

    def test_refresh_missing_key(self, memory_store):
        assert memory_store.refresh("nope", 60) is False


class TestClear:
    def test_clear_empties_everything(self, memory_store):
        memory_store.set(cache_key("alice", False, False), make_snapshot("alice"), 60)
        memory_store.set(cache_key("bob", True, True), make_snapshot("bob"), 60)
        memory_store.clear()
        assert len(memory_store) == 0
        assert memory_store.get(cache_key("alice", False, False)) is None


class TestCacheKey:
    def test_key_format(self):
        assert cache_key("alice", True, False) == "alice|activity:1|recent:0"
        assert cache_key("alice", False, True) == "alice|activity:0|recent:1"

    def test_sections_get_independent_slots(self, memory_store):
        memory_store.set(cache_key("alice", False, False), make_snapshot(rank=1), 60)
        memory_store.set(cache_key("alice", True, False), make_snapshot(rank=2), 60)
        assert memory_store.get(cache_key("alice", False, False)).value.rank == 1
        assert memory_store.get(cache_key("alice", True, False)).value.rank == 2


# ---------------------------------------------------------------------------
# Durable backend
# ---------------------------------------------------------------------------

class TestFileBackend:
    def test_entries_survive_a_new_store(self, tmp_path):
        clock = FakeClock()
        path = tmp_path / "cache.json"
        backend = FileBackend(path)
        backend.open()

        snap = make_snapshot(activity_series=[1, 2, 3])
        CacheStore(backend=backend, clock=clock).set("k", snap, 60)

        reopened = CacheStore(backend=FileBackend(path), clock=clock)
        assert reopened.get("k").value == snap

    def test_file_is_valid_json_and_no_temp_left(self, tmp_path):
        path = tmp_path / "cache.json"
        store = CacheStore(backend=FileBackend(path), clock=FakeClock())
        store.set("k", make_snapshot(), 60)

        data = json.loads(path.read_text())
        assert data["k"]["value"]["subject_id"] == "alice"
        assert "expiresAt" in data["k"]
        assert not (tmp_path / "cache.json.tmp").exists()

    def test_eviction_is_persisted(self, tmp_path):
        clock = FakeClock()
        path = tmp_path / "cache.json"
        store = CacheStore(backend=FileBackend(path), clock=clock)
        store.set("k", make_snapshot(), 60)
        clock.advance(61)
        store.get("k")
        assert json.loads(path.read_text()) == {}

    def test_unreadable_file_starts_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        store = CacheStore(backend=FileBackend(path), clock=FakeClock())
        assert len(store) == 0

    @pytest.mark.parametrize("record", [
        5,
        "oops",
        None,
        {"value": "oops", "expiresAt": 9e15},
        {"value": {"subject_id": "alice"}},
        {"value": {"subject_id": "alice"}, "expiresAt": "later"},
    ])
    def test_malformed_records_are_dropped_on_load(self, tmp_path, record):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"k": record}))
        store = CacheStore(backend=FileBackend(path), clock=FakeClock())

        assert len(store) == 0
        assert store.get("k") is None
        assert store.refresh("k", 60) is False

    def test_malformed_records_do_not_hide_good_ones(self, tmp_path):
        clock = FakeClock()
        path = tmp_path / "cache.json"
        good = {"value": make_snapshot().to_dict(), "expiresAt": int(clock.now * 1000) + 60_000}
        path.write_text(json.dumps({"bad": 5, "good": good}))
        store = CacheStore(backend=FileBackend(path), clock=clock)

        assert store.get("bad") is None
        assert store.get("good").value.subject_id == "alice"

    def test_undecodable_value_is_evicted(self, tmp_path, caplog):
        clock = FakeClock()
        path = tmp_path / "cache.json"
        broken = {"value": {"subject_id": "alice", "rank": "not-a-number"}, "expiresAt": int(clock.now * 1000) + 60_000}
        path.write_text(json.dumps({"k": broken}))
        store = CacheStore(backend=FileBackend(path), clock=clock)

        with caplog.at_level("WARNING"):
            assert store.get("k") is None
        assert "k" not in json.loads(path.read_text())
        assert len(store) == 0

    def test_open_creates_directory(self, tmp_path):
        backend = FileBackend(tmp_path / "nested" / "dir" / "cache.json")
        backend.open()
        assert (tmp_path / "nested" / "dir").is_dir()


class TestBackendNegotiation:
    def test_durable_when_directory_usable(self, tmp_path):
        backend = negotiate_backend(tmp_path / "cache", durable=True)
        assert isinstance(backend, FileBackend)

    def test_memory_when_durable_disabled(self, tmp_path):
        assert isinstance(negotiate_backend(tmp_path, durable=False), MemoryBackend)

    def test_falls_back_to_memory_when_directory_unusable(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        backend = negotiate_backend(blocker / "cache", durable=True)
        assert isinstance(backend, MemoryBackend)

    def test_fallback_store_still_works(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = CacheStore(backend=negotiate_backend(blocker / "cache"), clock=FakeClock())
        store.set("k", make_snapshot(), 60)
        assert store.backend_name == "memory"
        assert store.get("k") is not None


class _BrokenBackend(MemoryBackend):
    name = "broken"

    def persist(self, records):
        raise OSError("disk full")


class TestPersistFailure:
    def test_write_errors_do_not_reach_callers(self):
        store = CacheStore(backend=_BrokenBackend(), clock=FakeClock())
        store.set("k", make_snapshot(), 60)
        assert store.get("k").value.subject_id == "alice"
        store.clear()
        assert len(store) == 0

    def test_write_errors_are_logged(self, caplog):
        store = CacheStore(backend=_BrokenBackend(), clock=FakeClock())
        with caplog.at_level("WARNING"):
            store.set("k", make_snapshot(), 60)
        assert "disk full" in caplog.text


@pytest.mark.parametrize("ttl", [1, 900, 86400])
def test_ttl_boundaries(memory_store, clock, ttl):
    memory_store.set("k", make_snapshot(), ttl)
    clock.advance(ttl - 0.5)
    assert memory_store.get("k") is not None
    clock.advance(0.5)
    assert memory_store.get("k") is None
