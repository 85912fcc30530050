from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from .dates import add_days, days_between, short_date_label, start_of_week, today_utc
from .schedule_models import DateWindow, Item, LaneAssignment, TimeWindow, WeekSegment

logger = logging.getLogger(__name__)

FALLBACK_WINDOW_DAYS = 56


def clamp_window_inclusive(items: Iterable[Item]) -> DateWindow:
    """
    Return the inclusive (min_date, max_date) span covered by `items`.

    Falls back to an 8-week window starting on this week's Monday when there is
    nothing to span.
    """

    min_date: date | None = None
    max_date: date | None = None
    for item in items:
        if min_date is None or item.start < min_date:
            min_date = item.start
        if max_date is None or item.effective_end > max_date:
            max_date = item.effective_end

    if min_date is None or max_date is None or min_date > max_date:
        start = start_of_week(today_utc())
        logger.debug("No datable items; falling back to %d days from %s", FALLBACK_WINDOW_DAYS, start)
        return DateWindow(start, add_days(start, FALLBACK_WINDOW_DAYS))

    return DateWindow(min_date, max_date)


def assign_lanes(items: Iterable[Item]) -> LaneAssignment:
    """
    Place each item on the lowest lane that is free for its whole inclusive span.

    Items are swept in start order (stable for equal starts). A lane is free once
    its last item ended strictly before the new item's start day, so items that
    share a day never share a lane. First fit over start-sorted intervals uses
    exactly as many lanes as the deepest overlap.
    """

    ordered = sorted(items, key=lambda item: item.start)
    lane_ends: list[date] = []
    lane_of: dict[str, int] = {}

    for item in ordered:
        lane = next((idx for idx, end in enumerate(lane_ends) if end < item.start), None)
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(item.effective_end)
        else:
            lane_ends[lane] = item.effective_end
        lane_of[item.id] = lane

    return LaneAssignment(lane_of=lane_of, lanes_count=len(lane_ends))


def build_week_segments(range_start: date, range_end_exclusive: date) -> list[WeekSegment]:
    """Tile [range_start, range_end_exclusive) with Monday-based weeks clipped to the range."""

    segments: list[WeekSegment] = []
    if range_start >= range_end_exclusive:
        return segments
    cursor = start_of_week(range_start)
    week_num = 1

    while cursor < range_end_exclusive:
        following = add_days(cursor, 7)
        seg_start = max(cursor, range_start)
        seg_end = min(following, range_end_exclusive)
        first_day = short_date_label(seg_start)
        last_day = short_date_label(add_days(seg_end, -1))
        segments.append(
            WeekSegment(
                start=seg_start,
                end_exclusive=seg_end,
                label=f"W{week_num}",
                date_range=f"{first_day} - {last_day}",
            )
        )
        cursor = following
        week_num += 1

    return segments


def week_end_exclusive(max_date: date) -> date:
    """Monday following the week that contains `max_date`."""
    return add_days(start_of_week(max_date), 7)


def build_time_windows_weekly(min_date: date, max_date: date, weeks_per_slide: int) -> list[TimeWindow]:
    """
    Paginate the weeks spanning min_date..max_date into windows of `weeks_per_slide` weeks.

    Only the last window may hold fewer weeks. Values of `weeks_per_slide` below 1
    are treated as 1.
    """

    weeks_per_slide = max(1, int(weeks_per_slide))
    start = start_of_week(min_date)
    end_exclusive = week_end_exclusive(max_date)

    weeks: list[date] = []
    cursor = start
    while cursor < end_exclusive:
        weeks.append(cursor)
        cursor = add_days(cursor, 7)

    windows: list[TimeWindow] = []
    for idx in range(0, len(weeks), weeks_per_slide):
        win_start = weeks[idx]
        win_end = weeks[idx + weeks_per_slide] if idx + weeks_per_slide < len(weeks) else end_exclusive
        segments = build_week_segments(win_start, win_end)
        windows.append(
            TimeWindow(start=win_start, end_exclusive=win_end, week_segs=segments, label=_window_label(segments))
        )

    if not windows:
        return [
            TimeWindow(
                start=start,
                end_exclusive=end_exclusive,
                week_segs=build_week_segments(start, end_exclusive),
                label="",
            )
        ]
    return windows


def _window_label(segments: list[WeekSegment]) -> str:
    if not segments:
        return ""
    first = short_date_label(segments[0].start)
    last = short_date_label(add_days(segments[-1].end_exclusive, -1))
    return f"{first} – {last}"


def window_days(range_start: date, range_end_exclusive: date) -> int:
    """Width of a range in days, never less than one."""
    return max(1, days_between(range_start, range_end_exclusive))


def items_visible_in(items: Iterable[Item], range_start: date, range_end_exclusive: date) -> list[Item]:
    """Items whose inclusive span intersects [range_start, range_end_exclusive)."""
    return [item for item in items if item.effective_end >= range_start and item.start < range_end_exclusive]
