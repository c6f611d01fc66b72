"""Shared fixtures for stats card tests.

Provides:
- FakeClock: settable epoch clock for cache expiry tests
- memory_store: CacheStore on the in-memory backend driven by FakeClock
- snapshot / upstream payload factories
"""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("CACHE_DURABLE", "0")

from stats_card.models import DifficultyBucket, RecentItem, StatsSnapshot
from stats_card.services.cache_store import CacheStore, MemoryBackend

# 2026-02-01T00:00:00Z
T0 = 1769904000.0


class FakeClock:
    """Callable clock returning epoch seconds; advance() moves it forward."""

    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return CacheStore(backend=MemoryBackend(), clock=clock)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_snapshot(subject_id: str = "alice", **overrides) -> StatsSnapshot:
    defaults = {
        "rank": 100,
        "easy": DifficultyBucket(10, 800),
        "medium": DifficultyBucket(5, 1700),
        "hard": DifficultyBucket(1, 750),
    }
    defaults.update(overrides)
    return StatsSnapshot(subject_id=subject_id, **defaults)


def make_recent(title: str, slug: str = "", timestamp: int = 0, difficulty: str | None = "Easy") -> RecentItem:
    return RecentItem(title=title, slug=slug, timestamp=timestamp, difficulty=difficulty, status="Accepted")


def make_stats_body(
    username: str = "alice",
    solved: tuple[int, int, int] = (10, 5, 1),
    totals: tuple[int, int, int] = (800, 1700, 750),
    ranking: int = 100,
) -> dict:
    """Shape of the userStats GraphQL response."""
    easy, medium, hard = solved
    return {
        "data": {
            "matchedUser": {
                "username": username,
                "submitStatsGlobal": {
                    "acSubmissionNum": [
                        {"difficulty": "All", "count": easy + medium + hard},
                        {"difficulty": "Easy", "count": easy},
                        {"difficulty": "Medium", "count": medium},
                        {"difficulty": "Hard", "count": hard},
                    ],
                },
                "profile": {"ranking": ranking, "userAvatar": "https://example.com/a.png", "realName": "Alice A"},
            },
            "allQuestionsCount": [
                {"difficulty": "All", "count": sum(totals)},
                {"difficulty": "Easy", "count": totals[0]},
                {"difficulty": "Medium", "count": totals[1]},
                {"difficulty": "Hard", "count": totals[2]},
            ],
        }
    }


def make_calendar_body(mapping: dict) -> dict:
    import json
    return {"data": {"matchedUser": {"userCalendar": {"submissionCalendar": json.dumps(mapping)}}}}


def make_recent_body(submissions: list[dict]) -> dict:
    return {"data": {"recentSubmissionList": submissions}}
