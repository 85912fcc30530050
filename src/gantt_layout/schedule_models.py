from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, NamedTuple

ItemType = Literal["task", "milestone", "deliverable"]
"""Schedule entry kinds: task and deliverable span start..end, milestone is a point in time."""

NodeKind = Literal["phase", "bar", "deliverable", "lozenge"]
"""Render node types: phase heading, bar (task), deliverable bar, lozenge (milestone)."""


@dataclass(frozen=True)
class Phase:
    """Named grouping of schedule items, drawn as one horizontal band."""

    id: str
    name: str


@dataclass(frozen=True)
class Item:
    """Single dated schedule entry."""

    id: str
    phase_id: str
    type: ItemType
    start: date
    end: date | None = None
    name: str = "Untitled"
    status: str | None = None
    progress: float | None = None
    dependencies: list[str] = field(default_factory=list)
    notes: str | None = None

    @property
    def effective_end(self) -> date:
        """Inclusive end day; a missing end collapses onto start."""
        return self.end if self.end is not None else self.start

    @property
    def is_milestone(self) -> bool:
        return self.type == "milestone"


@dataclass
class NormalizedSchedule:
    """Canonical input of the layout engine."""

    phases: list[Phase] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)

    def items_for_phase(self, phase_id: str) -> list[Item]:
        return [item for item in self.items if item.phase_id == phase_id]


class DateWindow(NamedTuple):
    """Inclusive calendar span occupied by a set of items."""

    min_date: date
    max_date: date


@dataclass(frozen=True)
class LaneAssignment:
    lane_of: dict[str, int]
    lanes_count: int


@dataclass(frozen=True)
class WeekSegment:
    """One calendar week, or the clipped part of one, used as a header column."""

    start: date
    end_exclusive: date
    label: str
    date_range: str


@dataclass(frozen=True)
class TimeWindow:
    """Page-sized run of consecutive weeks."""

    start: date
    end_exclusive: date
    week_segs: list[WeekSegment]
    label: str


@dataclass
class FlatRenderRow:
    """
    Flattened view of one window used by renderers.

    Phase headings carry the number of lanes reserved for their band; item rows
    carry their lane, the dates clipped to the window and the progress fraction.
    """

    order: int
    node_type: NodeKind
    node_id: str
    name: str
    phase: str
    lane: int = 0
    lanes: int = 1
    start_date: date | None = None
    finish_date: date | None = None
    clipped_start: date | None = None
    clipped_finish: date | None = None
    progress: float | None = None
    status: str | None = None
    depends_on: list[str] = field(default_factory=list)
