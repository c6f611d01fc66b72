"""Freshness validator — cheap probe instead of a full refetch.

A cached snapshot is kept when the subject's core counters (per-difficulty
solved, rank, total) still match upstream. A probe that fails for any reason
keeps the cached snapshot: availability wins over freshness.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from stats_card.models import StatsSnapshot

logger = logging.getLogger(__name__)

Probe = Callable[[str], tuple[int, int, int, int, int]]


class Freshness(str, Enum):
    KEEP = "KEEP"
    REFRESH = "REFRESH"


def validate(cached: StatsSnapshot, subject_id: str, probe: Probe) -> Freshness:
    """Decide whether ``cached`` is still correct for ``subject_id``."""
    try:
        probed = tuple(int(v) for v in probe(subject_id))
    except Exception as e:
        logger.warning("Freshness probe failed for %s, keeping cached snapshot: %s", subject_id, e)
        return Freshness.KEEP

    if probed != cached.core_counters():
        logger.info(
            "Counters changed for %s: cached=%s probed=%s",
            subject_id, cached.core_counters(), probed,
        )
        return Freshness.REFRESH
    return Freshness.KEEP


def same_subject(cached: StatsSnapshot, subject_id: str) -> bool:
    """Case-insensitive identity check guarding against cache-key collisions."""
    return (cached.subject_id or "").strip().lower() == (subject_id or "").strip().lower()
