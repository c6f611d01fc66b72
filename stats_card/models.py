"""Snapshot and display data types shared by the cache, layout and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DIFFICULTIES = ("Easy", "Medium", "Hard")


class CacheStatus(str, Enum):
    """Outcome reported to clients in the X-Cache header."""
    MISS = "MISS"
    HIT = "HIT"
    UPDATED = "UPDATED"


@dataclass
class DifficultyBucket:
    solved: int = 0
    total: int = 0


@dataclass
class RecentItem:
    """One accepted submission from the provider's recent list."""
    title: str
    slug: str = ""
    timestamp: int = 0
    difficulty: Optional[str] = None
    status: str = ""
    lang: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "slug": self.slug,
            "timestamp": self.timestamp,
            "difficulty": self.difficulty,
            "status": self.status,
            "lang": self.lang,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RecentItem:
        return cls(
            title=data.get("title", ""),
            slug=data.get("slug", ""),
            timestamp=int(data.get("timestamp") or 0),
            difficulty=data.get("difficulty"),
            status=data.get("status", ""),
            lang=data.get("lang", ""),
        )


@dataclass
class StatsSnapshot:
    """Normalized statistics for one subject at one point in time."""
    subject_id: str
    rank: int = 0
    easy: DifficultyBucket = field(default_factory=DifficultyBucket)
    medium: DifficultyBucket = field(default_factory=DifficultyBucket)
    hard: DifficultyBucket = field(default_factory=DifficultyBucket)
    activity_series: Optional[list[int]] = None
    recent_items: Optional[list[RecentItem]] = None
    avatar: Optional[str] = None
    real_name: Optional[str] = None

    @property
    def buckets(self) -> dict[str, DifficultyBucket]:
        return {"Easy": self.easy, "Medium": self.medium, "Hard": self.hard}

    @property
    def total_solved(self) -> int:
        return self.easy.solved + self.medium.solved + self.hard.solved

    @property
    def total_questions(self) -> int:
        return self.easy.total + self.medium.total + self.hard.total

    def core_counters(self) -> tuple[int, int, int, int, int]:
        """(easy, medium, hard, rank, total) solved counters used for revalidation."""
        return (
            self.easy.solved,
            self.medium.solved,
            self.hard.solved,
            self.rank,
            self.total_solved,
        )

    def to_dict(self) -> dict:
        """Plain JSON-compatible form for the durable cache."""
        return {
            "subject_id": self.subject_id,
            "rank": self.rank,
            "easy": {"solved": self.easy.solved, "total": self.easy.total},
            "medium": {"solved": self.medium.solved, "total": self.medium.total},
            "hard": {"solved": self.hard.solved, "total": self.hard.total},
            "total_solved": self.total_solved,
            "activity_series": list(self.activity_series) if self.activity_series is not None else None,
            "recent_items": (
                [item.to_dict() for item in self.recent_items]
                if self.recent_items is not None else None
            ),
            "avatar": self.avatar,
            "real_name": self.real_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StatsSnapshot:
        def bucket(name: str) -> DifficultyBucket:
            raw = data.get(name) or {}
            return DifficultyBucket(solved=int(raw.get("solved", 0)), total=int(raw.get("total", 0)))

        series = data.get("activity_series")
        recent = data.get("recent_items")
        return cls(
            subject_id=data.get("subject_id", ""),
            rank=int(data.get("rank") or 0),
            easy=bucket("easy"),
            medium=bucket("medium"),
            hard=bucket("hard"),
            activity_series=[int(v) for v in series] if series is not None else None,
            recent_items=[RecentItem.from_dict(r) for r in recent] if recent is not None else None,
            avatar=data.get("avatar"),
            real_name=data.get("real_name"),
        )


@dataclass
class CacheEntry:
    key: str
    value: StatsSnapshot
    expires_at: int  # epoch milliseconds


@dataclass
class DisplayOptions:
    show_activity: bool = False
    show_recent: bool = False
    hide_rank: bool = False
    hide_border: bool = False
    card_width: int = 500


def cache_key(subject_id: str, show_activity: bool, show_recent: bool) -> str:
    """Composite key: optional sections occupy independent cache slots."""
    return f"{subject_id}|activity:{int(bool(show_activity))}|recent:{int(bool(show_recent))}"
