from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from .dates import add_days, start_of_day, start_of_week
from .layout import (
    assign_lanes,
    build_time_windows_weekly,
    build_week_segments,
    clamp_window_inclusive,
    items_visible_in,
    week_end_exclusive,
)
from .parse_schedule import parse_date
from .schedule_models import DateWindow, Item, LaneAssignment, NormalizedSchedule, Phase, TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_WEEKS_PER_SLIDE = 8
MAX_WEEKS_PER_SLIDE = 12


def clamp_weeks_per_slide(value: Any) -> int:
    """Coerce to an int in 1..MAX_WEEKS_PER_SLIDE; unusable values give the default."""
    if isinstance(value, float) and math.isinf(value):
        return MAX_WEEKS_PER_SLIDE if value > 0 else 1
    try:
        weeks = int(value)
    except (TypeError, ValueError):
        return DEFAULT_WEEKS_PER_SLIDE
    if weeks == 0:
        return DEFAULT_WEEKS_PER_SLIDE
    return max(1, min(MAX_WEEKS_PER_SLIDE, weeks))


@dataclass
class LayoutOptions:
    """Knobs for one render pass."""

    weeks_per_slide: int = DEFAULT_WEEKS_PER_SLIDE
    view_start: date | None = None
    view_end: date | None = None

    def __post_init__(self) -> None:
        self.weeks_per_slide = clamp_weeks_per_slide(self.weeks_per_slide)
        if self.view_start is not None:
            self.view_start = start_of_day(self.view_start)
        if self.view_end is not None:
            self.view_end = start_of_day(self.view_end)

    @property
    def has_view(self) -> bool:
        return self.view_start is not None and self.view_end is not None

    @classmethod
    def from_mapping(cls, data: Any, **overrides: Any) -> "LayoutOptions":
        """Build options from a `layout:` mapping; non-None overrides win."""
        data = data if isinstance(data, dict) else {}
        values: dict[str, Any] = {
            "weeks_per_slide": data.get("weeks_per_slide", DEFAULT_WEEKS_PER_SLIDE),
            "view_start": parse_date(data.get("view_start")),
            "view_end": parse_date(data.get("view_end")),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass
class PhaseBand:
    """Visible items of one phase inside one window, with their lanes."""

    phase: Phase
    items: list[Item]
    lanes: LaneAssignment

    @property
    def rows(self) -> int:
        """Rows reserved for the band; an empty phase still gets one."""
        return max(1, self.lanes.lanes_count)

    def lane_of(self, item: Item) -> int:
        return self.lanes.lane_of[item.id]


@dataclass
class WindowLayout:
    window: TimeWindow
    bands: list[PhaseBand] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(band.rows for band in self.bands)


@dataclass
class ScheduleLayout:
    date_window: DateWindow
    windows: list[WindowLayout] = field(default_factory=list)


def build_time_windows(schedule: NormalizedSchedule, options: LayoutOptions) -> tuple[DateWindow, list[TimeWindow]]:
    """Resolve the schedule span and paginate it, or honour an explicit view range."""

    date_window = clamp_window_inclusive(schedule.items)
    if options.has_view:
        start = start_of_week(options.view_start)
        end_exclusive = week_end_exclusive(max(options.view_end, options.view_start))
        window = TimeWindow(
            start=start,
            end_exclusive=end_exclusive,
            week_segs=build_week_segments(start, end_exclusive),
            label="",
        )
        return date_window, [window]
    return date_window, build_time_windows_weekly(date_window.min_date, date_window.max_date, options.weeks_per_slide)


def build_phase_bands(
    schedule: NormalizedSchedule, window: TimeWindow, options: LayoutOptions | None = None
) -> list[PhaseBand]:
    """With an explicit view, only items intersecting the inclusive view are banded."""
    bands: list[PhaseBand] = []
    for phase in schedule.phases:
        visible = items_visible_in(schedule.items_for_phase(phase.id), window.start, window.end_exclusive)
        if options is not None and options.has_view:
            visible = items_in_view(visible, options.view_start, options.view_end)
        lanes = assign_lanes(visible)
        ordered = sorted(visible, key=lambda item: item.start)
        bands.append(PhaseBand(phase=phase, items=ordered, lanes=lanes))
    return bands


def build_schedule_layout(schedule: NormalizedSchedule, options: LayoutOptions | None = None) -> ScheduleLayout:
    """
    Lay out a normalized schedule: windows first, then one lane assignment per
    (window, phase) pair computed over the items visible in that window.
    """

    options = options or LayoutOptions()
    date_window, windows = build_time_windows(schedule, options)
    logger.info(
        "Laying out %d items in %d phases across %d window(s) from %s to %s",
        len(schedule.items),
        len(schedule.phases),
        len(windows),
        date_window.min_date,
        date_window.max_date,
    )
    layout = ScheduleLayout(date_window=date_window)
    for window in windows:
        bands = build_phase_bands(schedule, window, options)
        layout.windows.append(WindowLayout(window=window, bands=bands))
    return layout


def items_in_view(items: Iterable[Item], view_start: date, view_end: date) -> list[Item]:
    """Items intersecting the inclusive view [view_start, view_end]."""
    return items_visible_in(items, start_of_day(view_start), add_days(view_end, 1))
