from __future__ import annotations

import datetime as _dt
import logging
from typing import Any

import yaml

from .dates import start_of_day
from .progress import normalize_progress
from .schedule_models import Item, ItemType, NormalizedSchedule, Phase

logger = logging.getLogger(__name__)

DEFAULT_PHASE = Phase(id="default", name="Schedule")

_MILESTONE_TOKENS = {"m", "milestone", "mile"}
_DELIVERABLE_TOKENS = {"d", "deliverable", "del"}


class ScheduleValidationError(Exception):
    """Raised when a schedule document does not have the expected top-level shape."""


def load_schedule(path: str) -> tuple[NormalizedSchedule, dict[str, Any]]:
    """
    Load and normalize a schedule document (YAML or JSON) at the given path.

    Returns the normalized schedule together with the raw mapping so callers can
    read extra sections such as `title` or `layout`.
    """

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ScheduleValidationError(f"{path}: expected mapping at top level")

    return normalize_schedule(raw), raw


def normalize_schedule(raw: Any) -> NormalizedSchedule:
    """
    Convert a loosely shaped mapping into phases and items the engine accepts.

    Records without an id or a usable start date are dropped; unknown phase ids
    become phases of their own and items without a phase join the first one.
    """

    data = raw if isinstance(raw, dict) else {}
    phases_raw = _first_list(data, "phases", "lanes")
    items_raw = _first_list(data, "items", "tasks")

    phases: list[Phase] = []
    for idx, phase_raw in enumerate(phases_raw):
        phase_raw = phase_raw if isinstance(phase_raw, dict) else {}
        phase_id = _safe_str(_first_value(phase_raw, "id", "key", default=f"phase_{idx}")).strip()
        name = _safe_str(_first_value(phase_raw, "name", "label", "title", default=f"Phase {idx + 1}")).strip()
        if phase_id and name:
            phases.append(Phase(id=phase_id, name=name))

    drafts: list[dict[str, Any]] = []
    seen_ids: set[str] = set()
    for idx, item_raw in enumerate(items_raw):
        draft = _parse_item(item_raw, f"items[{idx}]")
        if draft is None:
            continue
        if draft["id"] in seen_ids:
            logger.warning("items[%d]: duplicate id '%s', skipping", idx, draft["id"])
            continue
        seen_ids.add(draft["id"])
        drafts.append(draft)

    known = {phase.id for phase in phases}
    for draft in drafts:
        phase_id = draft["phase_id"]
        if phase_id and phase_id not in known:
            phases.append(Phase(id=phase_id, name=phase_id))
            known.add(phase_id)

    if not phases:
        phases.append(DEFAULT_PHASE)

    items = [Item(**{**draft, "phase_id": draft["phase_id"] or phases[0].id}) for draft in drafts]
    return NormalizedSchedule(phases=phases, items=items)


def _parse_item(data: Any, path: str) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        logger.warning("%s: expected mapping for item, skipping", path)
        return None

    item_id = _safe_str(_first_value(data, "id", "key", default="")).strip()
    if not item_id:
        logger.warning("%s: missing id, skipping", path)
        return None

    start = None
    for key in ("start", "date", "at", "when"):
        start = parse_date(data.get(key))
        if start is not None:
            break
    if start is None:
        logger.warning("%s (%s): no usable start date, skipping", path, item_id)
        return None

    end = parse_date(_first_value(data, "end", "finish", "to"))
    if end is not None and end < start:
        logger.warning("%s (%s): end %s precedes start %s, dropping end", path, item_id, end, start)
        end = None

    name = _safe_str(_first_value(data, "name", "title", default="Untitled")).strip() or "Untitled"
    phase_id = _safe_str(_first_value(data, "phaseId", "phase_id", "laneId", "lane_id")).strip() or None
    status = data.get("status")
    notes = _first_value(data, "notes", "description")
    dependencies = data.get("dependencies")

    return {
        "id": item_id,
        "phase_id": phase_id,
        "type": _parse_type(_first_value(data, "type", "kind")),
        "name": name,
        "start": start,
        "end": end,
        "status": _safe_str(status) if status else None,
        "progress": normalize_progress(_first_value(data, "progress", "percent_complete", "pct")),
        "dependencies": [_safe_str(dep) for dep in dependencies] if isinstance(dependencies, list) else [],
        "notes": _safe_str(notes) if notes else None,
    }


def _parse_type(value: Any) -> ItemType:
    token = _safe_str(value).strip().lower()
    if token in _MILESTONE_TOKENS:
        return "milestone"
    if token in _DELIVERABLE_TOKENS:
        return "deliverable"
    return "task"


def parse_date(value: Any) -> _dt.date | None:
    """Read a date, datetime or ISO string as a UTC calendar day; None when unusable."""
    if isinstance(value, (_dt.date, _dt.datetime)):
        return start_of_day(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return _dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return start_of_day(_dt.datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def _first_list(data: dict[str, Any], *keys: str) -> list[Any]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return value
    return []


def _first_value(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
