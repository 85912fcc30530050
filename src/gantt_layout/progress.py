from __future__ import annotations

import math
from typing import Any

from .dates import clamp01
from .schedule_models import Item

DEFAULT_PROGRESS = 0.5

STATUS_PROGRESS: dict[str, float] = {
    "done": 1.0,
    "completed": 1.0,
    "complete": 1.0,
    "approved": 1.0,
    "delayed": 0.35,
    "red": 0.35,
    "at_risk": 0.55,
    "risk": 0.55,
    "amber": 0.55,
    "on_track": 0.7,
    "green": 0.7,
}
"""Fill fraction assumed for a status token when no explicit progress is given."""


def normalize_progress(value: Any) -> float | None:
    """
    Coerce a raw progress value to a fraction in [0, 1].

    Values above 1 are read as percentages. Anything that is not a finite
    number yields None.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    if value > 1:
        value = value / 100
    return clamp01(float(value))


def infer_progress(item: Item) -> float:
    """Explicit progress wins, then the status table, then DEFAULT_PROGRESS."""
    explicit = normalize_progress(item.progress)
    if explicit is not None:
        return explicit
    status = (item.status or "").strip().lower()
    return STATUS_PROGRESS.get(status, DEFAULT_PROGRESS)
