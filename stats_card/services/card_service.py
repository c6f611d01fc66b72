"""Card service — cache lookup, revalidation and fetch for one stats card.

Wraps the cache store, freshness validator and upstream client behind a
single ``get_snapshot()`` call that also reports MISS / HIT / UPDATED for
the X-Cache header.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable

from stats_card.config import CACHE_TTL
from stats_card.models import CacheStatus, StatsSnapshot, cache_key
from stats_card.services import upstream
from stats_card.services.cache_store import CacheStore
from stats_card.services.freshness import Freshness, Probe, same_subject, validate

logger = logging.getLogger(__name__)

Fetch = Callable[[str, bool, bool], StatsSnapshot]


class SingleFlight:
    """Collapse concurrent calls for the same key into one execution.

    Followers block on the leader's Future and get its result or exception.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[str, Future] = {}

    def do(self, key: str, fn: Callable[[], StatsSnapshot]) -> StatsSnapshot:
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        if not leader:
            logger.debug("Joining in-flight fetch for %s", key)
            return future.result()

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._calls.pop(key, None)

    def in_flight(self) -> int:
        with self._lock:
            return len(self._calls)


class CardService:
    """Serves snapshots from the cache, revalidating hits with a cheap probe."""

    def __init__(
        self,
        store: CacheStore,
        fetch: Fetch = upstream.fetch_snapshot,
        probe: Probe = upstream.fetch_core_counters,
        ttl_seconds: int = CACHE_TTL,
    ) -> None:
        self.store = store
        self._fetch = fetch
        self._probe = probe
        self.ttl_seconds = ttl_seconds
        self._flight = SingleFlight()

    def _fetch_and_store(self, key: str, subject_id: str, show_activity: bool, show_recent: bool) -> StatsSnapshot:
        def run() -> StatsSnapshot:
            snapshot = self._fetch(subject_id, show_activity, show_recent)
            self.store.set(key, snapshot, self.ttl_seconds)
            return snapshot

        return self._flight.do(key, run)

    def get_snapshot(
        self, subject_id: str, show_activity: bool = False, show_recent: bool = False,
    ) -> tuple[StatsSnapshot, CacheStatus]:
        """Return (snapshot, cache status). Full-fetch errors propagate untranslated."""
        key = cache_key(subject_id, show_activity, show_recent)
        entry = self.store.get(key)

        if entry is not None:
            if not same_subject(entry.value, subject_id):
                # A payload for another subject under this key means key derivation is broken;
                # nothing else in the store can be trusted either.
                logger.warning(
                    "Cache key %s returned snapshot for %r, clearing cache",
                    key, entry.value.subject_id,
                )
                self.store.clear()
            elif validate(entry.value, subject_id, self._probe) is Freshness.KEEP:
                self.store.refresh(key, self.ttl_seconds)
                return entry.value, CacheStatus.HIT
            else:
                snapshot = self._fetch_and_store(key, subject_id, show_activity, show_recent)
                return snapshot, CacheStatus.UPDATED

        snapshot = self._fetch_and_store(key, subject_id, show_activity, show_recent)
        return snapshot, CacheStatus.MISS


# Module-level singleton
_service: CardService | None = None
_service_lock = threading.Lock()


def get_card_service() -> CardService:
    """Return the process-wide CardService, building it on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = CardService(CacheStore())
    return _service
