import datetime as dt

from freezegun import freeze_time

from gantt_layout.layout import (
    assign_lanes,
    build_time_windows_weekly,
    build_week_segments,
    clamp_window_inclusive,
    items_visible_in,
    week_end_exclusive,
    window_days,
)


def test_overlapping_pair_needs_two_lanes(make_item):
    lanes = assign_lanes([make_item("A", 0, 2), make_item("B", 1, 3)])

    assert lanes.lanes_count == 2
    assert lanes.lane_of == {"A": 0, "B": 1}


def test_three_items_sharing_one_day_need_three_lanes(make_item):
    items = [make_item("A", 0, 4), make_item("B", 2, 6), make_item("C", 4, 4)]

    assert assign_lanes(items).lanes_count == 3


def test_back_to_back_items_reuse_a_single_lane(make_item):
    items = [make_item("A", 0, 1), make_item("B", 2, 3), make_item("C", 4, 5)]

    lanes = assign_lanes(items)

    assert lanes.lanes_count == 1
    assert set(lanes.lane_of.values()) == {0}


def test_items_touching_on_the_same_day_do_not_share_a_lane(make_item):
    lanes = assign_lanes([make_item("A", 0, 2), make_item("B", 2, 4)])

    assert lanes.lanes_count == 2


def test_milestones_on_the_same_day_are_stacked(make_item):
    items = [make_item("M1", 3, item_type="milestone"), make_item("M2", 3, item_type="milestone")]

    assert assign_lanes(items).lane_of == {"M1": 0, "M2": 1}


def test_lowest_free_lane_is_reused(make_item):
    items = [make_item("A", 0, 1), make_item("B", 0, 9), make_item("C", 3, 4)]

    lanes = assign_lanes(items)

    assert lanes.lane_of == {"A": 0, "B": 1, "C": 0}
    assert lanes.lanes_count == 2


def test_equal_starts_keep_input_order(make_item):
    items = [make_item("Z", 5, 6), make_item("Y", 0, 6), make_item("X", 5, 6)]

    lanes = assign_lanes(items)

    assert lanes.lane_of == {"Y": 0, "Z": 1, "X": 2}
    assert assign_lanes(items) == lanes


def test_empty_input_uses_no_lanes():
    lanes = assign_lanes([])

    assert lanes.lanes_count == 0
    assert lanes.lane_of == {}


def test_clamp_window_spans_starts_and_effective_ends(make_item):
    items = [make_item("A", 3, 5), make_item("B", 1), make_item("C", 10)]

    window = clamp_window_inclusive(items)

    assert window.min_date == dt.date(2024, 1, 2)
    assert window.max_date == dt.date(2024, 1, 11)


@freeze_time("2024-05-15 12:00:00")
def test_clamp_window_falls_back_to_eight_weeks_from_this_monday():
    min_date, max_date = clamp_window_inclusive([])

    assert min_date == dt.date(2024, 5, 13)
    assert max_date == dt.date(2024, 7, 8)


def test_week_segments_clip_partial_weeks():
    segments = build_week_segments(dt.date(2024, 1, 3), dt.date(2024, 1, 17))

    assert [seg.label for seg in segments] == ["W1", "W2", "W3"]
    assert [(seg.start, seg.end_exclusive) for seg in segments] == [
        (dt.date(2024, 1, 3), dt.date(2024, 1, 8)),
        (dt.date(2024, 1, 8), dt.date(2024, 1, 15)),
        (dt.date(2024, 1, 15), dt.date(2024, 1, 17)),
    ]
    assert segments[0].date_range == "03 Jan - 07 Jan"
    assert segments[-1].date_range == "15 Jan - 16 Jan"


def test_week_segments_empty_range():
    assert build_week_segments(dt.date(2024, 1, 3), dt.date(2024, 1, 3)) == []
    assert build_week_segments(dt.date(2024, 1, 10), dt.date(2024, 1, 3)) == []


def test_ten_weeks_paginate_as_four_four_two():
    windows = build_time_windows_weekly(dt.date(2024, 1, 1), dt.date(2024, 3, 10), 4)

    assert [len(window.week_segs) for window in windows] == [4, 4, 2]
    assert [(window.start, window.end_exclusive) for window in windows] == [
        (dt.date(2024, 1, 1), dt.date(2024, 1, 29)),
        (dt.date(2024, 1, 29), dt.date(2024, 2, 26)),
        (dt.date(2024, 2, 26), dt.date(2024, 3, 11)),
    ]
    assert windows[0].label == "01 Jan – 28 Jan"
    assert windows[-1].label == "26 Feb – 10 Mar"


def test_windows_start_on_monday_and_cover_the_last_day():
    windows = build_time_windows_weekly(dt.date(2024, 1, 4), dt.date(2024, 1, 4), 8)

    assert len(windows) == 1
    assert windows[0].start == dt.date(2024, 1, 1)
    assert windows[0].end_exclusive == dt.date(2024, 1, 8)


def test_non_positive_weeks_per_slide_is_treated_as_one():
    windows = build_time_windows_weekly(dt.date(2024, 1, 1), dt.date(2024, 1, 20), 0)

    assert [len(window.week_segs) for window in windows] == [1, 1, 1]


def test_degenerate_range_still_yields_one_window():
    windows = build_time_windows_weekly(dt.date(2024, 2, 1), dt.date(2024, 1, 1), 4)

    assert len(windows) == 1
    assert windows[0].label == ""


def test_week_end_exclusive_and_window_days():
    assert week_end_exclusive(dt.date(2024, 3, 10)) == dt.date(2024, 3, 11)
    assert week_end_exclusive(dt.date(2024, 3, 11)) == dt.date(2024, 3, 18)
    assert window_days(dt.date(2024, 1, 1), dt.date(2024, 1, 1)) == 1
    assert window_days(dt.date(2024, 1, 1), dt.date(2024, 1, 29)) == 28


def test_items_visible_in_uses_inclusive_item_span(make_item):
    items = [make_item("before", 0, 6), make_item("edge", 0, 7), make_item("inside", 9), make_item("after", 14, 20)]

    visible = items_visible_in(items, dt.date(2024, 1, 8), dt.date(2024, 1, 15))

    assert [item.id for item in visible] == ["edge", "inside"]
