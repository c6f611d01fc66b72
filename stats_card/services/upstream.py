"""LeetCode GraphQL client.

Every request goes through ``graphql()``, which turns transport failures,
non-2xx statuses and GraphQL error arrays into the typed errors in
stats_card.errors. Optional sections (calendar, recent submissions) are
best-effort: their failures are logged and the section is left out.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from stats_card.config import UPSTREAM_TIMEOUT, UPSTREAM_URL, UPSTREAM_USER_AGENT
from stats_card.errors import (
    StatsCardError,
    SubjectNotFound,
    UpstreamProtocolError,
    UpstreamUnavailable,
)
from stats_card.models import StatsSnapshot
from stats_card.services.normalizer import core_counters, normalize_snapshot

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

USER_STATS_QUERY = """
query userStats($username: String!) {
  matchedUser(username: $username) {
    username
    submitStatsGlobal {
      acSubmissionNum { difficulty count }
    }
    profile {
      ranking
      userAvatar
      realName
    }
  }
  allQuestionsCount { difficulty count }
}"""

# Probe: core counters only, no question totals or profile extras
CORE_COUNTERS_QUERY = """
query userCoreCounters($username: String!) {
  matchedUser(username: $username) {
    username
    submitStatsGlobal {
      acSubmissionNum { difficulty count }
    }
    profile { ranking }
  }
}"""

USER_CALENDAR_QUERY = """
query userProfileCalendar($username: String!) {
  matchedUser(username: $username) {
    userCalendar {
      submissionCalendar
    }
  }
}"""

RECENT_SUBMISSIONS_QUERY = """
query recentSubmissions($username: String!) {
  recentSubmissionList(username: $username) {
    title
    titleSlug
    timestamp
    statusDisplay
    lang
  }
}"""

QUESTION_DETAIL_QUERY = """
query questionDetail($titleSlug: String!) {
  question(titleSlug: $titleSlug) {
    difficulty
  }
}"""

_NOT_FOUND_MARKERS = ("does not exist", "not found")


def _first_error_message(body) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0] if isinstance(errors[0], dict) else {}
        return first.get("message") or "GraphQL error"
    return None


def graphql(query: str, variables: dict, timeout: float | None = None) -> dict:
    """POST a GraphQL query and return the decoded body.

    Raises:
        UpstreamUnavailable: transport error or non-2xx status
        SubjectNotFound: GraphQL error saying the user does not exist
        UpstreamProtocolError: any other GraphQL error array
    """
    try:
        response = requests.post(
            UPSTREAM_URL,
            json={"query": query, "variables": variables},
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Referer": "https://leetcode.com",
                "User-Agent": UPSTREAM_USER_AGENT,
            },
            timeout=timeout or UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as e:
        raise UpstreamUnavailable(
            f"Network error while contacting LeetCode: {e}",
            user_message="Network connection error",
        ) from e

    try:
        body = response.json()
    except ValueError:
        body = None

    if not response.ok:
        message = _first_error_message(body) or response.reason or f"HTTP {response.status_code}"
        raise UpstreamUnavailable(f"LeetCode API returned {response.status_code}: {message}")

    message = _first_error_message(body)
    if message:
        if any(marker in message.lower() for marker in _NOT_FOUND_MARKERS):
            raise SubjectNotFound(f"LeetCode GraphQL error: {message}")
        raise UpstreamProtocolError(f"LeetCode GraphQL error: {message}")

    if not isinstance(body, dict):
        raise UpstreamProtocolError("LeetCode API returned a non-JSON body")
    return body


def fetch_user_stats(username: str) -> dict:
    return graphql(USER_STATS_QUERY, {"username": username})


def fetch_user_calendar(username: str) -> dict:
    return graphql(USER_CALENDAR_QUERY, {"username": username})


def fetch_recent_submissions(username: str) -> dict:
    return graphql(RECENT_SUBMISSIONS_QUERY, {"username": username})


def fetch_question_difficulty(slug: str) -> Optional[str]:
    """Difficulty for a question slug, or None if the lookup fails."""
    try:
        body = graphql(QUESTION_DETAIL_QUERY, {"titleSlug": slug})
    except StatsCardError as e:
        logger.debug("Difficulty lookup failed for %s: %s", slug, e)
        return None
    question = (body.get("data") or {}).get("question") or {}
    return question.get("difficulty")


def fetch_core_counters(username: str) -> tuple[int, int, int, int, int]:
    """Lightweight probe used by the freshness validator."""
    body = graphql(CORE_COUNTERS_QUERY, {"username": username})
    return core_counters(body, username)


def _optional(fetch, username: str, label: str) -> Optional[dict]:
    try:
        return fetch(username)
    except StatsCardError as e:
        logger.warning("Failed to fetch %s for %s: %s", label, username, e)
        return None


def fetch_snapshot(username: str, show_activity: bool = False, show_recent: bool = False) -> StatsSnapshot:
    """Full fetch: stats plus any requested optional sections, normalized."""
    stats_body = fetch_user_stats(username)

    calendar_body = _optional(fetch_user_calendar, username, "calendar") if show_activity else None
    recent_body = _optional(fetch_recent_submissions, username, "recent submissions") if show_recent else None

    return normalize_snapshot(
        stats_body,
        calendar_body=calendar_body,
        recent_body=recent_body,
        resolve_difficulty=fetch_question_difficulty,
        username=username,
    )
