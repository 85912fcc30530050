from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .layout_plan import LayoutOptions, ScheduleLayout, build_schedule_layout
from .parse_schedule import ScheduleValidationError, load_schedule
from .render_gantt import render_schedule

logger = logging.getLogger(__name__)


def _parse_date(value: str):
    import datetime as dt

    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gantt-layout",
        description="Lay out a schedule as paginated, collision-free Gantt windows",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("schedule", help="Path to schedule YAML or JSON")
    parser.add_argument("--out-dir", default="output", help="Directory for one SVG per window")
    parser.add_argument("--weeks-per-slide", type=int, help="Weeks per window (clamped to 1..12; default 8)")
    parser.add_argument("--view-start", type=_parse_date, help="Explicit view start (YYYY-MM-DD)")
    parser.add_argument("--view-end", type=_parse_date, help="Explicit view end, inclusive (YYYY-MM-DD)")
    parser.add_argument("--title", help="Page title; defaults to the document's title")
    parser.add_argument("--year", type=int, help="Footer year; defaults to each window's last year")
    parser.add_argument("--summary", action="store_true", help="Print windows and lane usage")
    parser.add_argument(
        "--no-render",
        dest="render",
        action="store_false",
        default=True,
        help="Skip writing SVG pages",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _extract_title(raw: dict) -> str:
    for key in ("title", "name"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    project = raw.get("project")
    if isinstance(project, dict) and isinstance(project.get("name"), str):
        return project["name"]
    return "Project Roadmap"


def format_summary(layout: ScheduleLayout) -> str:
    lines = [f"Range {layout.date_window.min_date} .. {layout.date_window.max_date}"]
    for idx, window_layout in enumerate(layout.windows, start=1):
        window = window_layout.window
        label = window.label or f"{window.start} .. {window.end_exclusive}"
        lines.append(f"Window {idx}: {label} ({len(window.week_segs)} weeks)")
        for band in window_layout.bands:
            lines.append(f"  {band.phase.name}: {len(band.items)} items, {band.lanes.lanes_count} lanes")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    schedule_path = Path(args.schedule)

    if (args.view_start is None) != (args.view_end is None):
        print("Error: --view-start and --view-end must be given together", file=sys.stderr)
        return 2

    try:
        schedule, raw = load_schedule(str(schedule_path))
    except (yaml.YAMLError, ScheduleValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: schedule file not found: {schedule_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading schedule: {exc}", file=sys.stderr)
        return 1

    options = LayoutOptions.from_mapping(
        raw.get("layout"),
        weeks_per_slide=args.weeks_per_slide,
        view_start=args.view_start,
        view_end=args.view_end,
    )
    if (options.view_start is None) != (options.view_end is None):
        print("Error: layout.view_start and layout.view_end must be given together", file=sys.stderr)
        return 2

    layout = build_schedule_layout(schedule, options)

    if args.summary:
        print(format_summary(layout))

    if args.render:
        title = args.title or _extract_title(raw)
        try:
            paths = render_schedule(layout, out_dir=args.out_dir, title=title, year=args.year)
        except Exception as exc:
            print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
            return 1
        logger.info("Wrote %d page(s) to %s", len(paths), args.out_dir)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
