"""Snapshot cache — lazy-expiring key/value store with a durable JSON file.

The storage backend is negotiated once when the store is built:
FileBackend if the cache directory can be created and written, otherwise
MemoryBackend for the lifetime of the process. Storage failures are logged,
never raised to callers.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable

from stats_card.config import CACHE_DIR, CACHE_DURABLE, CACHE_FILE_NAME
from stats_card.models import CacheEntry, StatsSnapshot

logger = logging.getLogger(__name__)


def _well_formed(record) -> bool:
    """A stored record is {"value": {...}, "expiresAt": <number>}."""
    return (
        isinstance(record, dict)
        and isinstance(record.get("value"), dict)
        and isinstance(record.get("expiresAt"), (int, float))
        and not isinstance(record.get("expiresAt"), bool)
    )


class MemoryBackend:
    """No persistence. The store's in-process mapping is the only copy."""

    name = "memory"

    def load(self) -> dict:
        return {}

    def persist(self, records: dict) -> None:
        return None


class FileBackend:
    """Whole-store JSON file, replaced atomically on every write."""

    name = "file"

    def __init__(self, path: Path):
        self.path = Path(path)

    def open(self) -> None:
        """Create the cache directory and check it is writable. Raises OSError."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not os.access(self.path.parent, os.W_OK):
            raise PermissionError(f"Cache directory not writable: {self.path.parent}")

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring cache file %s: top level is not an object", self.path)
            return {}
        records = {key: record for key, record in data.items() if _well_formed(record)}
        if len(records) != len(data):
            logger.warning("Dropped %d malformed cache records from %s", len(data) - len(records), self.path)
        return records

    def persist(self, records: dict) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(records, f)
        os.replace(tmp, self.path)


def negotiate_backend(cache_dir: Path | None = None, durable: bool = CACHE_DURABLE):
    """Pick the storage backend once. Falls back to memory if the disk is unusable."""
    if not durable:
        return MemoryBackend()
    backend = FileBackend(Path(cache_dir or CACHE_DIR) / CACHE_FILE_NAME)
    try:
        backend.open()
    except OSError as e:
        logger.warning("Durable cache unavailable (%s), using in-memory cache", e)
        return MemoryBackend()
    return backend


class CacheStore:
    """Key → (snapshot, expiresAt) store with lazy expiry.

    ``clock`` returns seconds since the epoch; expiry is tracked in
    milliseconds.
    """

    def __init__(self, backend=None, clock: Callable[[], float] = time.time):
        self._backend = backend if backend is not None else negotiate_backend()
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[str, dict] = self._backend.load()
        logger.info("Cache store using %s backend (%d entries)", self._backend.name, len(self._records))

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _persist(self) -> None:
        try:
            self._backend.persist(self._records)
        except OSError as e:
            # In-memory records stay authoritative; the file catches up on the next write.
            logger.warning("Failed to persist cache to %s backend: %s", self._backend.name, e)

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for key, evicting it if it has expired."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            if record["expiresAt"] <= self._now_ms():
                del self._records[key]
                self._persist()
                return None
            try:
                value = StatsSnapshot.from_dict(record["value"])
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("Evicting undecodable cache entry %s: %s", key, e)
                del self._records[key]
                self._persist()
                return None
            return CacheEntry(key=key, value=value, expires_at=record["expiresAt"])

    def set(self, key: str, value: StatsSnapshot, ttl_seconds: int) -> CacheEntry:
        with self._lock:
            expires_at = self._now_ms() + int(ttl_seconds * 1000)
            self._records[key] = {"value": value.to_dict(), "expiresAt": expires_at}
            self._persist()
        return CacheEntry(key=key, value=value, expires_at=expires_at)

    def refresh(self, key: str, ttl_seconds: int) -> bool:
        """Rewrite expiresAt for an existing entry without touching its value."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return False
            record["expiresAt"] = self._now_ms() + int(ttl_seconds * 1000)
            self._persist()
            return True

    def clear(self) -> None:
        with self._lock:
            self._records = {}
            self._persist()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
