"""Layout engine — StatsSnapshot + DisplayOptions → GeometryPlan.

Pure and deterministic: no I/O, no clock. Every coordinate is an int or a
float rounded to ``PRECISION`` places so identical input renders to
identical markup.

Vertical order: header + progress ring → activity grid → recent list.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from stats_card.models import DisplayOptions, RecentItem, StatsSnapshot

PRECISION = 3

# ── Card frame ──────────────────────────────────────────────
MAIN_BODY_X = 25
MAIN_BODY_Y = 55
PROGRESS_SECTION_HEIGHT = 140
BOTTOM_PADDING = 20
SECTION_GAP = 20
BASE_CARD_HEIGHT = MAIN_BODY_Y + PROGRESS_SECTION_HEIGHT + BOTTOM_PADDING
RANK_BADGE_OFFSET = 170

# ── Progress ring / difficulty bars ─────────────────────────
ARC_RADIUS = 50
BAR_WIDTH = 320

# ── Activity grid ───────────────────────────────────────────
GRID_DAYS = 7
GRID_MAX_WEEKS = 53
GRID_MIN_WEEKS = 6
GRID_PADDING_X = 50
GRID_MIN_AVAILABLE_WIDTH = 200
GRID_CELL_SIZE = 11
GRID_CELL_GAP = 2
GRID_MIN_CELL_SIZE = 6
GRID_HEADER_HEIGHT = 60  # title + legend above the cells

# ── Recent list ─────────────────────────────────────────────
RECENT_MAX_ROWS = 3
RECENT_HEADER_HEIGHT = 28
RECENT_ROW_HEIGHT = 36
RECENT_BOTTOM_PADDING = 16


@dataclass
class ProgressArc:
    radius: int
    circumference: float
    dash_offset_start: float
    dash_offset_end: float
    fraction: float
    percentage: float


@dataclass
class DifficultyBar:
    label: str
    solved: int
    total: int
    percentage: float
    fill_width: float


@dataclass
class ActivityGrid:
    weeks: int
    cell_size: int
    cell_gap: int
    origin_x: int
    origin_y: int
    height: int
    cells: list[int] = field(default_factory=list)
    levels: list[int] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.weeks * (self.cell_size + self.cell_gap) - self.cell_gap


@dataclass
class RecentBlock:
    row_count: int
    row_height: int
    origin_y: int
    height: int
    items: list[RecentItem] = field(default_factory=list)


@dataclass
class GeometryPlan:
    card_width: int
    card_height: int
    progress_arc: ProgressArc
    bars: list[DifficultyBar]
    show_rank: bool
    rank_badge_x: int
    activity_grid: Optional[ActivityGrid] = None
    recent_block: Optional[RecentBlock] = None


def _round(value: float) -> float:
    return round(value, PRECISION)


def _percent(solved: int, total: int) -> float:
    """solved/total as a percentage, 0 when total is 0."""
    return (solved / total) * 100 if total else 0.0


# ── Progress ring ───────────────────────────────────────────


def progress_arc(total_solved: int, total_questions: int, radius: int = ARC_RADIUS) -> ProgressArc:
    """Arc geometry for the ring; dash offset animates from empty to ``fraction``."""
    circumference = 2 * math.pi * radius
    percentage = _percent(total_solved, total_questions)
    fraction = min(1.0, max(0.0, total_solved / total_questions)) if total_questions > 0 else 0.0
    return ProgressArc(
        radius=radius,
        circumference=_round(circumference),
        dash_offset_start=_round(circumference),
        dash_offset_end=_round(circumference * (1 - fraction)),
        fraction=_round(fraction),
        percentage=_round(percentage),
    )


def difficulty_bars(snapshot: StatsSnapshot, bar_width: int = BAR_WIDTH) -> list[DifficultyBar]:
    bars = []
    for label, bucket in snapshot.buckets.items():
        pct = _percent(bucket.solved, bucket.total)
        bars.append(DifficultyBar(
            label=label,
            solved=bucket.solved,
            total=bucket.total,
            percentage=_round(pct),
            fill_width=_round(pct / 100 * bar_width),
        ))
    return bars


# ── Activity grid ───────────────────────────────────────────


def grid_dimensions(card_width: int) -> tuple[int, int]:
    """(weeks, cell_size) that fill the available width.

    Columns shrink to fit but never below GRID_MIN_WEEKS; past that point the
    cell size shrinks instead (down to GRID_MIN_CELL_SIZE).
    """
    available = max(GRID_MIN_AVAILABLE_WIDTH, card_width - GRID_PADDING_X)
    pitch = GRID_CELL_SIZE + GRID_CELL_GAP
    weeks = (available + GRID_CELL_GAP) // pitch
    weeks = min(GRID_MAX_WEEKS, max(GRID_MIN_WEEKS, weeks))

    cell_size = GRID_CELL_SIZE
    if weeks * pitch - GRID_CELL_GAP > available:
        cell_size = max(GRID_MIN_CELL_SIZE, math.floor((available + GRID_CELL_GAP) / weeks - GRID_CELL_GAP))
    return weeks, cell_size


def align_series(series: list[int] | None, weeks: int, days: int = GRID_DAYS) -> list[int]:
    """Right-align the most recent ``weeks * days`` points; older cells stay 0."""
    total = weeks * days
    cells = [0] * total
    recent = list(series[-total:]) if series else []
    start = total - len(recent)
    for i, value in enumerate(recent):
        cells[start + i] = value or 0
    return cells


def activity_level(count: int, max_count: int) -> int:
    """0 for no (or negative) activity, else the quarter of (0, max] the count falls in (1-4)."""
    if count <= 0:
        return 0
    if count <= max_count * 0.25:
        return 1
    if count <= max_count * 0.5:
        return 2
    if count <= max_count * 0.75:
        return 3
    return 4


def activity_grid(series: list[int] | None, card_width: int, origin_y: int) -> ActivityGrid:
    weeks, cell_size = grid_dimensions(card_width)
    cells = align_series(series, weeks)
    max_count = max(max(cells), 1)
    grid = ActivityGrid(
        weeks=weeks,
        cell_size=cell_size,
        cell_gap=GRID_CELL_GAP,
        origin_x=0,
        origin_y=origin_y,
        height=0,
        cells=cells,
        levels=[activity_level(c, max_count) for c in cells],
    )
    # Halves round up
    grid.origin_x = max(MAIN_BODY_X, math.floor((card_width - grid.width) / 2 + 0.5))
    grid.height = GRID_DAYS * (cell_size + GRID_CELL_GAP) - GRID_CELL_GAP + GRID_HEADER_HEIGHT
    return grid


# ── Recent list ─────────────────────────────────────────────


def select_recent(items: list[RecentItem] | None, limit: int = RECENT_MAX_ROWS) -> list[RecentItem]:
    """Dedupe by slug (title fallback) keeping the first seen, newest first, at most ``limit``."""
    seen = set()
    unique = []
    for item in items or []:
        key = item.slug or item.title
        if key:
            if key in seen:
                continue
            seen.add(key)
        unique.append(item)
    unique.sort(key=lambda it: it.timestamp or 0, reverse=True)
    return unique[:limit]


def recent_block(items: list[RecentItem] | None, origin_y: int) -> RecentBlock:
    shown = select_recent(items)
    return RecentBlock(
        row_count=len(shown),
        row_height=RECENT_ROW_HEIGHT,
        origin_y=origin_y,
        height=RECENT_HEADER_HEIGHT + len(shown) * RECENT_ROW_HEIGHT + RECENT_BOTTOM_PADDING,
        items=shown,
    )


# ── Plan ────────────────────────────────────────────────────


def compute_layout(snapshot: StatsSnapshot, options: DisplayOptions) -> GeometryPlan:
    card_width = options.card_width
    card_height = BASE_CARD_HEIGHT
    next_y = MAIN_BODY_Y + PROGRESS_SECTION_HEIGHT + SECTION_GAP

    grid = None
    if options.show_activity:
        grid = activity_grid(snapshot.activity_series, card_width, next_y)
        card_height += grid.height + SECTION_GAP
        next_y += grid.height + SECTION_GAP

    recent = None
    if options.show_recent:
        recent = recent_block(snapshot.recent_items, next_y)
        card_height += recent.height + SECTION_GAP

    return GeometryPlan(
        card_width=card_width,
        card_height=card_height,
        progress_arc=progress_arc(snapshot.total_solved, snapshot.total_questions),
        bars=difficulty_bars(snapshot),
        show_rank=not options.hide_rank and snapshot.rank > 0,
        rank_badge_x=card_width - RANK_BADGE_OFFSET,
        activity_grid=grid,
        recent_block=recent,
    )
