"""Schedule layout and windowing engine for Gantt-style exports."""

from .layout import assign_lanes, build_time_windows_weekly, build_week_segments, clamp_window_inclusive
from .progress import infer_progress

__all__ = [
    "assign_lanes",
    "build_time_windows_weekly",
    "build_week_segments",
    "clamp_window_inclusive",
    "infer_progress",
]
