"""
SVG renderer for stats cards.

Turns a GeometryPlan (all numbers already decided by layout.py) plus the
snapshot's text and a Theme into the final SVG document. Nothing here
computes geometry; it only formats, escapes and concatenates.
"""

from __future__ import annotations

import html as _html
import time

from stats_card.models import RecentItem, StatsSnapshot
from stats_card.render.layout import BAR_WIDTH, GRID_DAYS, MAIN_BODY_X, MAIN_BODY_Y, GeometryPlan
from stats_card.render.themes import Theme

FONT = "'Segoe UI', Ubuntu, \"Helvetica Neue\", Sans-Serif"
TITLE_MAX_LEN = 50
LEVEL_OPACITIES = (0.14, 0.3, 0.5, 0.75, 1.0)
DIFFICULTY_COLORS = {
    "Easy": "#00b894",
    "Medium": "#fdcb6e",
    "Hard": "#e17055",
}
ERROR_CARD_WIDTH = 495
ERROR_CARD_HEIGHT = 120


def _esc(text) -> str:
    """Escape & < > " ' for embedding in markup."""
    return _html.escape(str(text), quote=True) if text is not None else ""


def _num(value) -> str:
    """Stable number formatting: ints stay ints, floats drop trailing zeros."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def truncate_title(title: str, max_len: int = TITLE_MAX_LEN) -> str:
    return title[: max_len - 3] + "..." if len(title) > max_len else title


def format_rank(rank: int) -> str:
    return f"{rank:,}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def time_ago(timestamp: int, now: float) -> str:
    """Coarse relative time for a submission timestamp (seconds)."""
    if not timestamp or timestamp <= 0:
        return "-"
    days = int((now - timestamp) // 86400)
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    if days < 365:
        return f"{days // 30}mo ago"
    return f"{days // 365}y ago"


# ── SVG Helpers ─────────────────────────────────────────────


def _svg_rect(x, y, w, h, fill="", rx=0, extra="", title="") -> str:
    """Render an SVG <rect>, with a <title> tooltip child when given."""
    parts = [f'<rect x="{_num(x)}" y="{_num(y)}" width="{_num(w)}" height="{_num(h)}"']
    if rx:
        parts.append(f' rx="{_num(rx)}"')
    if fill:
        parts.append(f' fill="{fill}"')
    if extra:
        parts.append(f" {extra}")
    if title:
        parts.append(f"><title>{_esc(title)}</title></rect>")
    else:
        parts.append("/>")
    return "".join(parts)


def _svg_text(x, y, text, cls="", anchor="start", extra="") -> str:
    parts = [f'<text x="{_num(x)}" y="{_num(y)}"']
    if cls:
        parts.append(f' class="{cls}"')
    if anchor != "start":
        parts.append(f' text-anchor="{anchor}"')
    if extra:
        parts.append(f" {extra}")
    parts.append(f">{_esc(text)}</text>")
    return "".join(parts)


def _styles(theme: Theme) -> str:
    return f"""<style>
    .header {{ font: 600 18px {FONT}; fill: #{theme.title_color}; animation: fadeInAnimation 0.8s ease-in-out forwards; }}
    .stat {{ font: 600 14px {FONT}; fill: #{theme.text_color}; }}
    .stat-bold {{ font: 700 14px {FONT}; fill: #{theme.text_color}; }}
    .stat-label {{ font: 400 12px {FONT}; fill: #{theme.text_color}; opacity: 0.7; }}
    .circle-text {{ font: 600 16px {FONT}; fill: #{theme.text_color}; text-anchor: middle; }}
    .circle-number {{ font: 700 32px {FONT}; fill: #{theme.title_color}; text-anchor: middle; }}
    .circle-percentage {{ font: 600 14px {FONT}; fill: #{theme.icon_color}; text-anchor: middle; }}
    .rank-text {{ font: 600 14px {FONT}; fill: #{theme.accent_color}; text-anchor: middle; }}
    .lang-name {{ font: 400 11px {FONT}; fill: #{theme.text_color}; }}
    .stagger {{ opacity: 0; animation: fadeInAnimation 0.3s ease-in-out forwards; }}
    .progress-bar {{ transform-origin: left; transform: scaleX(0); animation: growWidthAnimation 0.6s ease-in-out forwards; }}
    @keyframes fadeInAnimation {{ from {{ opacity: 0; }} to {{ opacity: 1; }} }}
    @keyframes growWidthAnimation {{ from {{ transform: scaleX(0); }} to {{ transform: scaleX(1); }} }}
  </style>"""


def _background(plan: GeometryPlan, theme: Theme, hide_border: bool) -> str:
    stroke = "none" if hide_border else f"#{theme.border_color}"
    shadow = "" if hide_border else ' filter="url(#dropShadow)"'
    return (
        "<defs>"
        '<filter id="dropShadow" x="-20%" y="-20%" width="140%" height="140%">'
        '<feDropShadow dx="0" dy="1" stdDeviation="3" flood-opacity="0.12"/>'
        "</filter>"
        "</defs>"
        + _svg_rect(
            0.5, 0.5, plan.card_width - 1, plan.card_height - 1,
            fill=f"#{theme.bg_color}", rx=4.5,
            extra=f'data-testid="card-bg" stroke="{stroke}" stroke-width="1"{shadow}',
        )
    )


def _header(plan: GeometryPlan, snapshot: StatsSnapshot, theme: Theme, title: str) -> str:
    parts = ['<g data-testid="card-title" transform="translate(25, 35)">', _svg_text(0, 0, title, cls="header")]
    if plan.show_rank:
        parts.append(f'<g data-testid="rank-badge" transform="translate({plan.rank_badge_x}, -5)">')
        parts.append(_svg_rect(0, -15, 140, 25, fill=f"#{theme.accent_color}", rx=12, extra='opacity="0.1"'))
        parts.append(_svg_text(70, 2, f"Rank: {format_rank(snapshot.rank)}", cls="rank-text"))
        parts.append("</g>")
    parts.append("</g>")
    return "".join(parts)


def _progress_ring(plan: GeometryPlan, snapshot: StatsSnapshot, theme: Theme) -> str:
    arc = plan.progress_arc
    r = arc.radius
    return (
        '<g data-testid="progress-ring" transform="translate(65, 55)">'
        f'<circle cx="0" cy="0" r="{r + 5}" fill="none" stroke="#{theme.icon_color}" stroke-width="1" opacity="0.06"/>'
        f'<circle cx="0" cy="0" r="{r}" fill="none" stroke="#{theme.border_color}" stroke-width="4" opacity="0.15"/>'
        f'<path d="M 0 -{r} a {r} {r} 0 1 1 0 {r * 2} a {r} {r} 0 1 1 0 -{r * 2}" fill="none"'
        f' stroke="#{theme.icon_color}" stroke-width="8" stroke-linecap="round"'
        f' stroke-dasharray="{_num(arc.circumference)}" stroke-dashoffset="{_num(arc.dash_offset_start)}">'
        f'<animate attributeName="stroke-dashoffset" from="{_num(arc.dash_offset_start)}"'
        f' to="{_num(arc.dash_offset_end)}" begin="0.06s" dur="0.9s" fill="freeze"/>'
        "</path>"
        + _svg_text(0, -2, snapshot.total_solved, cls="circle-number")
        + _svg_text(0, 16, "Solved", cls="circle-text")
        + _svg_text(0, 32, format_percent(arc.percentage), cls="circle-percentage")
        + "</g>"
    )


def _difficulty_bars(plan: GeometryPlan, theme: Theme, bar_width: int = BAR_WIDTH) -> str:
    parts = ['<g data-testid="difficulty-stats" transform="translate(140, 10)">']
    for i, bar in enumerate(plan.bars):
        y = 18 + i * 37
        color = DIFFICULTY_COLORS[bar.label]
        parts.append(f'<g class="stagger" style="animation-delay: {600 + i * 100}ms">')
        parts.append(_svg_text(0, y, bar.label, cls="stat"))
        parts.append(_svg_text(bar_width - 50, y, f"{bar.solved}/{bar.total}", cls="stat-bold", anchor="end"))
        parts.append(_svg_text(bar_width, y, format_percent(bar.percentage), cls="stat-label", anchor="end"))
        parts.append(_svg_rect(0, y + 7, bar_width, 8, fill=f"#{theme.border_color}", rx=4, extra='opacity="0.2"'))
        parts.append(_svg_rect(
            0, y + 7, bar.fill_width, 8, fill=color, rx=4,
            extra=f'class="progress-bar" style="animation-delay: {800 + i * 100}ms"',
        ))
        parts.append("</g>")
    parts.append("</g>")
    return "".join(parts)


def _activity_grid(plan: GeometryPlan, theme: Theme) -> str:
    grid = plan.activity_grid
    size = grid.cell_size
    label_style = f'style="font-size:12px; fill:#{theme.text_color}; opacity:0.7"'
    parts = [
        f'<g data-testid="activity-grid" transform="translate({grid.origin_x}, {grid.origin_y})">',
        _svg_text(0, 0, "Submission Activity", cls="header", extra='style="font-size:18px; font-weight:700;"'),
        '<g transform="translate(0, 22)" aria-hidden="true">',
        _svg_text(0, 0, "Less", cls="stat-label", extra=label_style),
    ]
    for level, opacity in enumerate(LEVEL_OPACITIES):
        parts.append(_svg_rect(
            35 + level * (size + 4), -10, size, size, fill=f"#{theme.icon_color}", rx=2,
            extra=f'fill-opacity="{opacity}"',
        ))
    parts.append(_svg_text(35 + len(LEVEL_OPACITIES) * (size + 4) + 10, 0, "More", cls="stat-label", extra=label_style))
    parts.append("</g>")
    parts.append('<g transform="translate(0, 45)">')

    pitch = size + grid.cell_gap
    for index, (count, level) in enumerate(zip(grid.cells, grid.levels)):
        week, day = divmod(index, GRID_DAYS)
        parts.append(_svg_rect(
            week * pitch, day * pitch, size, size, fill=f"#{theme.icon_color}", rx=2,
            extra=f'class="contrib-rect" fill-opacity="{LEVEL_OPACITIES[level]}"'
                  f' data-week="{week}" data-day="{day}" data-count="{count}"',
            title=f"{count} submissions",
        ))
    parts.append("</g></g>")
    return "".join(parts)


def _recent_row(item: RecentItem, index: int, row_height: int, theme: Theme, now: float) -> str:
    row_y = 24 + index * row_height
    raw_title = item.title or "Unknown Title"
    title = truncate_title(raw_title)
    difficulty = item.difficulty or "Easy"
    color = DIFFICULTY_COLORS.get(difficulty, f"#{theme.icon_color}")
    ago = time_ago(item.timestamp, now)
    return (
        f'<g role="listitem" aria-label="{_esc(title)}">'
        f'<circle cx="10" cy="{row_y - 6}" r="6" fill="{color}"/>'
        f'<text x="34" y="{row_y}" class="stat" style="font-size:14px;">{_esc(title)}'
        f"<title>{_esc(raw_title)} ({_esc(ago)})</title></text>"
        + _svg_text(350, row_y, ago, cls="stat-label", anchor="end", extra='style="font-size:14px;"')
        + _svg_text(420, row_y, difficulty, cls="lang-name", anchor="end",
                    extra=f'fill="{color}" style="font-size:14px;"')
        + "</g>"
    )


def _recent_list(plan: GeometryPlan, theme: Theme, now: float) -> str:
    block = plan.recent_block
    parts = [
        f'<g data-testid="recent-list" transform="translate({MAIN_BODY_X}, {block.origin_y})" aria-label="Recent submissions">',
        _svg_text(0, 0, "Recent Submissions", cls="header", extra='style="font-size:22px; font-weight:700"'),
        '<g transform="translate(0, 18)">',
    ]
    if not block.items:
        parts.append(_svg_text(0, 24, "No recent submissions found", cls="stat-label"))
    for index, item in enumerate(block.items):
        parts.append(_recent_row(item, index, block.row_height, theme, now))
    parts.append("</g></g>")
    return "".join(parts)


def render_card(
    plan: GeometryPlan,
    snapshot: StatsSnapshot,
    theme: Theme,
    hide_border: bool = False,
    now: float | None = None,
) -> str:
    """Assemble the full stats card SVG.

    ``now`` (epoch seconds) only feeds the "3d ago" labels of the recent
    list; pass it explicitly for byte-stable output.
    """
    if now is None:
        now = time.time()
    title = f"{snapshot.subject_id}'s LeetCode Stats"
    w, h = plan.card_width, plan.card_height

    parts = [
        f'<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" fill="none"'
        ' xmlns="http://www.w3.org/2000/svg" role="img" aria-labelledby="descId">',
        f'<title id="titleId">{_esc(title)}</title>',
        f'<desc id="descId">LeetCode Statistics: {snapshot.total_solved} problems solved</desc>',
        _styles(theme),
        _background(plan, theme, hide_border),
        _header(plan, snapshot, theme, title),
        f'<g data-testid="main-card-body" transform="translate({MAIN_BODY_X}, {MAIN_BODY_Y})">',
        _progress_ring(plan, snapshot, theme),
        _difficulty_bars(plan, theme),
        "</g>",
    ]
    if plan.activity_grid is not None:
        parts.append(_activity_grid(plan, theme))
    if plan.recent_block is not None:
        parts.append(_recent_list(plan, theme, now))
    parts.append("</svg>")
    return "\n".join(parts)


def render_error_card(message: str, theme: Theme) -> str:
    """Small themed card shown in place of the stats card when a request fails."""
    w, h = ERROR_CARD_WIDTH, ERROR_CARD_HEIGHT
    return "\n".join([
        f'<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" xmlns="http://www.w3.org/2000/svg"'
        ' role="img" aria-labelledby="errorTitle">',
        '<title id="errorTitle">LeetCode Stats Error</title>',
        "<style>"
        f".error-title {{ font: 600 16px {FONT}; fill: #{theme.title_color}; }}"
        f".error-message {{ font: 400 12px {FONT}; fill: #{theme.text_color}; }}"
        f".error-icon {{ fill: #{theme.accent_color}; }}"
        "</style>",
        _svg_rect(0, 0, "100%", "100%", fill=f"#{theme.bg_color}", rx=4.5,
                  extra=f'stroke="#{theme.border_color}"'),
        '<circle cx="40" cy="45" r="16" class="error-icon" opacity="0.2"/>',
        _svg_text(40, 52, "⚠", cls="error-icon", anchor="middle", extra='font-size="18"'),
        _svg_text(70, 35, "LeetCode Stats Error", cls="error-title"),
        _svg_text(70, 55, message, cls="error-message"),
        _svg_text(70, 75, "Please check the username and try again.", cls="error-message"),
        "</svg>",
    ])
