from __future__ import annotations

import datetime as dt
from importlib import metadata
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon

from .layout import window_days
from .layout_plan import ScheduleLayout
from .render_rows import to_render_rows
from .schedule_models import FlatRenderRow, TimeWindow

FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 10 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
TICK_FONT = 8 * FONT_SCALE
TOP_MARGIN_FRAC = 0.85
TITLE_Y = 0.985
LANE_HEIGHT = 0.6  # bar height as a fraction of one lane
MILESTONE_HALF_WIDTH = 0.45  # days

BAND_COLORS = ("#FFFFFF", "#F8FAFC")
TYPE_COLORS = {
    "bar": {"stroke": "#2563EB", "fill": "#FFFFFF", "progress": "#BFDBFE"},
    "deliverable": {"stroke": "#7C3AED", "fill": "#FFFFFF", "progress": "#DDD6FE"},
    "lozenge": {"stroke": "#C2410C", "fill": "#EA580C"},
}


def render_schedule(layout: ScheduleLayout, out_dir: str, title: str, year: int | None = None) -> list[Path]:
    """Render every window of `layout` as its own SVG page; return the written paths."""

    paths: list[Path] = []
    total = len(layout.windows)
    for idx, window_layout in enumerate(layout.windows, start=1):
        out_path = Path(out_dir) / f"window_{idx:02d}.svg"
        page_title = f"{title} ({idx}/{total})" if total > 1 and title else title
        render_window(to_render_rows(window_layout), window_layout.window, str(out_path), page_title, year=year)
        paths.append(out_path)
    return paths


def render_window(
    rows: list[FlatRenderRow],
    window: TimeWindow,
    out_path: str,
    title: str,
    year: int | None = None,
) -> None:
    """
    Render one time window as a static SVG Gantt page.

    - Phase headings open a band tall enough for all of its lanes.
    - Items sit on their lane; bars carry a progress fill, milestones a lozenge.
    - Week segments become the column headers.
    """

    total_lanes = sum(row.lanes for row in rows if row.node_type == "phase") or 1
    span_days = window_days(window.start, window.end_exclusive)

    fig_height = max(3.0, LANE_HEIGHT * total_lanes + 2.0)
    fig_width = max(12.0, min(24.0, span_days / 7.0 * 2.0 + 6.0))
    fig = plt.figure(figsize=(fig_width, fig_height))
    # Allocate explicit grid: left column for phase labels, right for chart.
    gs = fig.add_gridspec(1, 2, width_ratios=[1.2, 4.0], wspace=0.05, left=0.06, right=0.98, top=TOP_MARGIN_FRAC, bottom=0.1)
    label_ax = fig.add_subplot(gs[0, 0])
    ax = fig.add_subplot(gs[0, 1], sharey=label_ax)

    ax.set_ylim(0, total_lanes)
    ax.invert_yaxis()
    ax.set_xlim(mdates.date2num(window.start), mdates.date2num(window.end_exclusive))
    ax.xaxis_date()
    ax.xaxis.tick_top()
    _week_headers(ax, window)
    ax.xaxis.set_minor_locator(mdates.DayLocator(interval=1))
    ax.grid(True, axis="x", which="major", linestyle="--", alpha=0.4)
    ax.grid(True, axis="x", which="minor", linestyle=":", alpha=0.2)
    ax.tick_params(axis="x", labelsize=TICK_FONT, pad=4)
    ax.set_yticks([])

    label_ax.set_xlim(0, 1)
    label_ax.axis("off")

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT, y=TITLE_Y)
    footer_year = year or (window.end_exclusive - dt.timedelta(days=1)).year
    footer = f"© {footer_year} gantt-layout v{_tool_version()}  {window.label}".rstrip()
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    band_top = 0.0
    band_lanes = 0
    band_idx = 0
    for row in rows:
        if row.node_type == "phase":
            band_top += band_lanes
            band_lanes = row.lanes
            ax.axhspan(band_top, band_top + row.lanes, color=BAND_COLORS[band_idx % 2], zorder=0)
            ax.axhline(band_top, color="#E2E8F0", linewidth=0.5, zorder=1)
            label_ax.text(
                0.98,
                band_top + row.lanes / 2,
                row.name,
                ha="right",
                va="center",
                fontsize=LABEL_FONT,
                fontweight="bold",
                transform=label_ax.transData,
            )
            band_idx += 1
            continue

        y = band_top + row.lane + 0.5
        if row.node_type == "lozenge" and row.clipped_start:
            _draw_milestone(ax, row, y)
        elif row.clipped_start and row.clipped_finish:
            _draw_bar(ax, row, y)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _week_headers(ax: plt.Axes, window: TimeWindow) -> None:
    ticks = [mdates.date2num(seg.start) for seg in window.week_segs]
    labels = [f"{seg.label}\n{seg.date_range}" for seg in window.week_segs]
    ax.set_xticks(ticks)
    ax.set_xticklabels(labels, ha="left")


def _draw_bar(ax: plt.Axes, row: FlatRenderRow, y: float) -> None:
    colors = TYPE_COLORS[row.node_type]
    start_num = mdates.date2num(row.clipped_start)
    end_num = mdates.date2num(row.clipped_finish + dt.timedelta(days=1))
    width = end_num - start_num
    ax.barh(y, width=width, left=start_num, height=LANE_HEIGHT, color=colors["fill"], edgecolor=colors["stroke"], linewidth=0.8, zorder=2)
    if row.progress:
        ax.barh(y, width=width * row.progress, left=start_num, height=LANE_HEIGHT, color=colors["progress"], linewidth=0, zorder=3)
    ax.text(start_num + 0.2, y, row.name, ha="left", va="center", fontsize=TICK_FONT, clip_on=True, zorder=4)


def _draw_milestone(ax: plt.Axes, row: FlatRenderRow, y: float) -> None:
    colors = TYPE_COLORS["lozenge"]
    center_x = mdates.date2num(row.clipped_start) + 0.5
    half_height = LANE_HEIGHT / 1.5 / 2
    diamond = [
        (center_x - MILESTONE_HALF_WIDTH, y),
        (center_x, y - half_height),
        (center_x + MILESTONE_HALF_WIDTH, y),
        (center_x, y + half_height),
    ]
    ax.add_patch(Polygon(diamond, closed=True, facecolor=colors["fill"], edgecolor=colors["stroke"], zorder=3))
    ax.text(center_x + MILESTONE_HALF_WIDTH + 0.2, y, row.name, ha="left", va="center", fontsize=TICK_FONT, zorder=4)


def _tool_version() -> str:
    try:
        return metadata.version("gantt-layout")
    except metadata.PackageNotFoundError:
        return "0.0.0"
