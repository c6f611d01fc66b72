"""Stats card endpoint — GET /{username} returns an SVG card.

Query parameters follow github-readme-stats conventions:
``theme``, ``show=graph,recent``, ``hide_rank``, ``hide_border``,
``card_width``. Failures render a themed error card with the matching
status code instead of a JSON error body.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from stats_card.config import CDN_MAX_AGE, STALE_WHILE_REVALIDATE
from stats_card.errors import InvalidRequest, classify, friendly_message
from stats_card.models import DisplayOptions
from stats_card.render.layout import compute_layout
from stats_card.render.svg import render_card, render_error_card
from stats_card.render.themes import available_themes, get_theme
from stats_card.services.card_service import get_card_service

logger = logging.getLogger(__name__)

router = APIRouter()

SVG_MEDIA_TYPE = "image/svg+xml"
_ACTIVITY_TOKENS = {"graph", "activity"}
_RECENT_TOKENS = {"recent"}


def _parse_show(show: str) -> tuple[bool, bool]:
    """(show_activity, show_recent) from a comma-separated ``show`` value."""
    tokens = {t.strip().lower() for t in (show or "").split(",") if t.strip()}
    return bool(tokens & _ACTIVITY_TOKENS), bool(tokens & _RECENT_TOKENS)


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _error_response(exc: BaseException, theme_name: str, username: str) -> Response:
    err = classify(exc)
    if err.status_code >= 500:
        logger.error("Stats card failed for %r (%s): %s", username, type(err).__name__, err.message)
    else:
        logger.warning("Stats card rejected for %r (%s): %s", username, type(err).__name__, err.message)
    svg = render_error_card(friendly_message(err), get_theme(theme_name))
    return Response(
        content=svg,
        status_code=err.status_code,
        media_type=SVG_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


# ---------------------------------------------------------------------------
# GET /api/v1/themes — theme names for ?theme=
# ---------------------------------------------------------------------------

@router.get(
    "/api/v1/themes",
    summary="List card themes",
    tags=["Themes"],
)
async def list_themes():
    themes = available_themes()
    return {"count": len(themes), "themes": themes}


# ---------------------------------------------------------------------------
# GET /{username} — the stats card
# ---------------------------------------------------------------------------

@router.get(
    "/{username}",
    summary="Render a LeetCode stats card",
    description=(
        "Returns an SVG card with solved counts per difficulty, ranking and "
        "overall progress. Add show=graph for the submission heatmap and "
        "show=recent for the latest accepted submissions. The X-Cache header "
        "reports MISS, HIT or UPDATED."
    ),
    tags=["Cards"],
    response_class=Response,
)
async def stats_card(
    username: str,
    theme: str = Query("default", description="Theme name, see /api/v1/themes"),
    show: str = Query("", description="Comma list: 'graph' and/or 'recent'"),
    hide_rank: Optional[str] = Query(None, description="'true' hides the rank badge"),
    hide_border: Optional[str] = Query(None, description="'true' hides the card border"),
    card_width: int = Query(500, ge=200, le=1600, description="Card width in px"),
):
    username = (username or "").strip()
    show_activity, show_recent = _parse_show(show)

    try:
        if not username:
            raise InvalidRequest("Username is required")

        service = get_card_service()
        snapshot, cache_status = await run_in_threadpool(
            service.get_snapshot, username, show_activity, show_recent,
        )

        options = DisplayOptions(
            show_activity=show_activity,
            show_recent=show_recent,
            hide_rank=_flag(hide_rank),
            hide_border=_flag(hide_border),
            card_width=card_width,
        )
        plan = compute_layout(snapshot, options)
        svg = render_card(plan, snapshot, get_theme(theme), hide_border=options.hide_border)
    except Exception as e:
        return _error_response(e, theme, username)

    return Response(
        content=svg,
        media_type=SVG_MEDIA_TYPE,
        headers={
            "Cache-Control": f"s-maxage={CDN_MAX_AGE}, stale-while-revalidate={STALE_WHILE_REVALIDATE}",
            "Access-Control-Allow-Origin": "*",
            "X-Cache": cache_status.value,
        },
    )
