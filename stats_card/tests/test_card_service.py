"""Tests for the card service — MISS/HIT/UPDATED flow, identity guard, single-flight."""

import threading
import time

import pytest

from stats_card.errors import SubjectNotFound, UpstreamUnavailable
from stats_card.models import CacheStatus, DifficultyBucket, cache_key
from stats_card.services.card_service import CardService, SingleFlight
from stats_card.tests.conftest import make_snapshot

TTL = 900


class FakeUpstream:
    """Records fetch/probe calls; counters come from the current ``snapshots`` map."""

    def __init__(self):
        self.snapshots = {}
        self.fetch_calls = []
        self.probe_calls = []
        self.probe_error = None

    def fetch(self, subject_id, show_activity, show_recent):
        self.fetch_calls.append((subject_id, show_activity, show_recent))
        if subject_id.lower() not in self.snapshots:
            raise SubjectNotFound(f'User "{subject_id}" not found on LeetCode')
        return self.snapshots[subject_id.lower()]

    def probe(self, subject_id):
        self.probe_calls.append(subject_id)
        if self.probe_error:
            raise self.probe_error
        return self.snapshots[subject_id.lower()].core_counters()


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    fake.snapshots["alice"] = make_snapshot("alice")
    fake.snapshots["bob"] = make_snapshot("bob", rank=5000)
    return fake


@pytest.fixture
def service(memory_store, upstream):
    return CardService(memory_store, fetch=upstream.fetch, probe=upstream.probe, ttl_seconds=TTL)


class TestColdMiss:
    def test_miss_fetches_and_stores(self, service, upstream, memory_store):
        snap, status = service.get_snapshot("alice")
        assert status is CacheStatus.MISS
        assert snap.subject_id == "alice"
        assert upstream.fetch_calls == [("alice", False, False)]
        assert upstream.probe_calls == []
        assert memory_store.get(cache_key("alice", False, False)).value == snap

    def test_fetch_errors_propagate(self, service, memory_store):
        with pytest.raises(SubjectNotFound):
            service.get_snapshot("nobody")
        assert len(memory_store) == 0

    def test_upstream_unavailable_propagates(self, service, upstream):
        def failing(*args):
            raise UpstreamUnavailable("LeetCode API returned 503: Service Unavailable")

        service._fetch = failing
        with pytest.raises(UpstreamUnavailable):
            service.get_snapshot("alice")

    def test_section_flags_are_separate_slots(self, service, upstream):
        service.get_snapshot("alice", show_activity=True)
        _, status = service.get_snapshot("alice", show_activity=False)
        assert status is CacheStatus.MISS
        assert len(upstream.fetch_calls) == 2


class TestHit:
    def test_unchanged_counters_hit(self, service, upstream):
        service.get_snapshot("alice")
        snap, status = service.get_snapshot("alice")
        assert status is CacheStatus.HIT
        assert snap.subject_id == "alice"
        assert len(upstream.fetch_calls) == 1
        assert upstream.probe_calls == ["alice"]

    def test_hit_refreshes_ttl(self, service, memory_store, clock):
        service.get_snapshot("alice")
        key = cache_key("alice", False, False)
        first_expiry = memory_store.get(key).expires_at

        clock.advance(600)
        service.get_snapshot("alice")
        assert memory_store.get(key).expires_at == first_expiry + 600_000

        # Without the TTL refresh the entry would be gone by now
        clock.advance(600)
        assert memory_store.get(key) is not None

    def test_probe_failure_serves_cached(self, service, upstream):
        service.get_snapshot("alice")
        upstream.probe_error = UpstreamUnavailable("timeout")
        _, status = service.get_snapshot("alice")
        assert status is CacheStatus.HIT
        assert len(upstream.fetch_calls) == 1

    def test_case_insensitive_identity_is_trusted(self, service, upstream, memory_store):
        memory_store.set(cache_key("ALICE", False, False), make_snapshot("alice"), TTL)
        _, status = service.get_snapshot("ALICE")
        assert status is CacheStatus.HIT
        assert upstream.fetch_calls == []


class TestUpdated:
    def test_changed_counters_refetch(self, service, upstream, memory_store):
        service.get_snapshot("alice")
        upstream.snapshots["alice"] = make_snapshot("alice", hard=DifficultyBucket(2, 750))

        snap, status = service.get_snapshot("alice")
        assert status is CacheStatus.UPDATED
        assert snap.hard.solved == 2
        assert len(upstream.fetch_calls) == 2
        assert memory_store.get(cache_key("alice", False, False)).value.hard.solved == 2


class TestIdentityGuard:
    def test_mismatch_clears_store_and_refetches(self, service, upstream, memory_store):
        bob_key = cache_key("bob", False, False)
        # Wrong subject under bob's key, plus an unrelated entry that must also go
        memory_store.set(bob_key, make_snapshot("alice"), TTL)
        memory_store.set(cache_key("carol", True, True), make_snapshot("carol"), TTL)

        seen_store_sizes = []
        original_fetch = upstream.fetch

        def fetch(subject_id, show_activity, show_recent):
            seen_store_sizes.append(len(memory_store))
            return original_fetch(subject_id, show_activity, show_recent)

        service._fetch = fetch

        snap, status = service.get_snapshot("bob")
        assert status is CacheStatus.MISS
        assert snap.subject_id == "bob"
        assert seen_store_sizes == [0]
        assert upstream.probe_calls == []
        assert memory_store.get(cache_key("carol", True, True)) is None
        assert memory_store.get(bob_key).value.subject_id == "bob"


class TestSingleFlight:
    def test_concurrent_calls_share_one_execution(self):
        flight = SingleFlight()
        release = threading.Event()
        calls = []
        results = []

        def fn():
            calls.append(1)
            release.wait(5)
            return make_snapshot("alice")

        def worker():
            results.append(flight.do("alice|activity:0|recent:0", fn))

        leader = threading.Thread(target=worker)
        leader.start()
        deadline = time.monotonic() + 5
        while flight.in_flight() == 0 and time.monotonic() < deadline:
            time.sleep(0.005)

        followers = [threading.Thread(target=worker) for _ in range(3)]
        for t in followers:
            t.start()
        time.sleep(0.1)
        release.set()
        for t in [leader, *followers]:
            t.join(5)

        assert len(calls) == 1
        assert len(results) == 4
        assert all(r is results[0] for r in results)
        assert flight.in_flight() == 0

    def test_followers_receive_leader_exception(self):
        flight = SingleFlight()
        release = threading.Event()
        errors = []

        def fn():
            release.wait(5)
            raise UpstreamUnavailable("LeetCode API returned 502: Bad Gateway")

        def worker():
            try:
                flight.do("k", fn)
            except UpstreamUnavailable as e:
                errors.append(e)

        leader = threading.Thread(target=worker)
        leader.start()
        deadline = time.monotonic() + 5
        while flight.in_flight() == 0 and time.monotonic() < deadline:
            time.sleep(0.005)
        follower = threading.Thread(target=worker)
        follower.start()
        time.sleep(0.1)
        release.set()
        leader.join(5)
        follower.join(5)

        assert len(errors) == 2
        assert flight.in_flight() == 0

    def test_sequential_calls_run_again(self):
        flight = SingleFlight()
        calls = []
        flight.do("k", lambda: calls.append(1))
        flight.do("k", lambda: calls.append(1))
        assert len(calls) == 2

    def test_service_concurrent_misses_fetch_once(self, memory_store):
        release = threading.Event()
        calls = []

        def fetch(subject_id, show_activity, show_recent):
            calls.append(subject_id)
            release.wait(5)
            return make_snapshot(subject_id)

        service = CardService(memory_store, fetch=fetch, probe=lambda s: (0, 0, 0, 0, 0), ttl_seconds=TTL)
        statuses = []

        def worker():
            statuses.append(service.get_snapshot("alice")[1])

        threads = [threading.Thread(target=worker) for _ in range(3)]
        threads[0].start()
        deadline = time.monotonic() + 5
        while not calls and time.monotonic() < deadline:
            time.sleep(0.005)
        for t in threads[1:]:
            t.start()
        time.sleep(0.1)
        release.set()
        for t in threads:
            t.join(5)

        assert calls == ["alice"]
        assert statuses == [CacheStatus.MISS] * 3
