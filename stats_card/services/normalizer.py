"""Snapshot normalizer — raw LeetCode GraphQL payloads → StatsSnapshot.

Stateless. The only outside call it can make is the optional
``resolve_difficulty`` callback, used to fill in difficulties the recent
submissions list does not carry.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from stats_card.errors import SubjectNotFound
from stats_card.models import DIFFICULTIES, DifficultyBucket, RecentItem, StatsSnapshot

logger = logging.getLogger(__name__)

MAX_ACCEPTED_RECENT = 5
MAX_DIFFICULTY_LOOKUPS = 3


def _counts_by_difficulty(rows: list[dict] | None) -> dict[str, int]:
    counts = {d: 0 for d in DIFFICULTIES}
    for row in rows or []:
        diff = row.get("difficulty")
        if diff in counts:
            counts[diff] = int(row.get("count") or 0)
    return counts


def _matched_user(body: dict, username: str = "") -> dict:
    user = (body.get("data") or {}).get("matchedUser")
    if not user:
        raise SubjectNotFound(f'User "{username}" not found on LeetCode' if username else "User not found")
    return user


def core_counters(body: dict, username: str = "") -> tuple[int, int, int, int, int]:
    """Extract (easy, medium, hard, rank, total) solved counters from a stats or probe payload."""
    user = _matched_user(body, username)
    solved = _counts_by_difficulty((user.get("submitStatsGlobal") or {}).get("acSubmissionNum"))
    rank = int((user.get("profile") or {}).get("ranking") or 0)
    return (
        solved["Easy"],
        solved["Medium"],
        solved["Hard"],
        rank,
        solved["Easy"] + solved["Medium"] + solved["Hard"],
    )


def parse_calendar(raw: str | dict | None) -> Optional[list[int]]:
    """Submission calendar (day-bucket → count) as a series ordered oldest-first."""
    if not raw:
        return None
    try:
        mapping = json.loads(raw) if isinstance(raw, str) else raw
        ordered = sorted(mapping.items(), key=lambda kv: int(kv[0]))
        return [max(0, int(count or 0)) for _, count in ordered]
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Failed to parse calendar data: %s", e)
        return None


def parse_recent(
    submissions: list[dict] | None,
    resolve_difficulty: Callable[[str], Optional[str]] | None = None,
) -> Optional[list[RecentItem]]:
    """Accepted submissions only, at most 5, with missing difficulties looked up."""
    if not submissions:
        return None

    items = []
    for sub in submissions:
        if sub.get("statusDisplay") != "Accepted":
            continue
        question = sub.get("question") or {}
        try:
            ts = int(sub.get("timestamp") or 0)
        except (ValueError, TypeError):
            ts = 0
        items.append(RecentItem(
            title=sub.get("title") or "",
            slug=sub.get("titleSlug") or "",
            timestamp=ts,
            difficulty=question.get("difficulty") or sub.get("difficulty"),
            status=sub.get("statusDisplay") or "",
            lang=sub.get("lang") or "",
        ))
        if len(items) >= MAX_ACCEPTED_RECENT:
            break

    if resolve_difficulty is not None:
        missing = []
        for item in items:
            if not item.difficulty and item.slug and item.slug not in missing:
                missing.append(item.slug)
        for slug in missing[:MAX_DIFFICULTY_LOOKUPS]:
            diff = resolve_difficulty(slug)
            if not diff:
                continue
            for item in items:
                if not item.difficulty and item.slug == slug:
                    item.difficulty = diff

    return items or None


def normalize_snapshot(
    stats_body: dict,
    calendar_body: dict | None = None,
    recent_body: dict | None = None,
    resolve_difficulty: Callable[[str], Optional[str]] | None = None,
    username: str = "",
) -> StatsSnapshot:
    """Build a StatsSnapshot from the user stats payload plus optional extras.

    Raises SubjectNotFound when the stats payload has no matched user.
    """
    user = _matched_user(stats_body, username)
    data = stats_body.get("data") or {}

    solved = _counts_by_difficulty((user.get("submitStatsGlobal") or {}).get("acSubmissionNum"))
    totals = _counts_by_difficulty(data.get("allQuestionsCount"))
    profile = user.get("profile") or {}

    snapshot = StatsSnapshot(
        subject_id=user.get("username") or username,
        rank=int(profile.get("ranking") or 0),
        easy=DifficultyBucket(solved["Easy"], totals["Easy"]),
        medium=DifficultyBucket(solved["Medium"], totals["Medium"]),
        hard=DifficultyBucket(solved["Hard"], totals["Hard"]),
        avatar=profile.get("userAvatar"),
        real_name=profile.get("realName"),
    )

    if calendar_body:
        calendar_user = (calendar_body.get("data") or {}).get("matchedUser") or {}
        raw = (calendar_user.get("userCalendar") or {}).get("submissionCalendar")
        snapshot.activity_series = parse_calendar(raw)

    if recent_body:
        submissions = (recent_body.get("data") or {}).get("recentSubmissionList")
        snapshot.recent_items = parse_recent(submissions, resolve_difficulty)

    return snapshot
