from __future__ import annotations

from typing import List

from .dates import add_days
from .layout_plan import PhaseBand, WindowLayout
from .progress import infer_progress
from .schedule_models import FlatRenderRow, Item, NodeKind


def to_render_rows(window_layout: WindowLayout) -> list[FlatRenderRow]:
    """
    Convert one laid-out window into a flat list of render rows.

    Each phase heading is emitted first, carrying the number of lanes its band
    reserves, followed by its visible items in start order.
    """

    rows: List[FlatRenderRow] = []
    order = 0

    for band in window_layout.bands:
        rows.append(
            FlatRenderRow(
                order=order,
                node_type="phase",
                node_id=band.phase.id,
                name=band.phase.name,
                phase=band.phase.id,
                lanes=band.rows,
            )
        )
        order += 1
        for item in band.items:
            rows.append(_item_row(item, band, window_layout, order))
            order += 1

    return rows


def _item_row(item: Item, band: PhaseBand, window_layout: WindowLayout, order: int) -> FlatRenderRow:
    window = window_layout.window
    last_day = add_days(window.end_exclusive, -1)
    return FlatRenderRow(
        order=order,
        node_type=_node_kind(item),
        node_id=item.id,
        name=item.name,
        phase=band.phase.id,
        lane=band.lane_of(item),
        lanes=band.rows,
        start_date=item.start,
        finish_date=item.effective_end,
        clipped_start=max(item.start, window.start),
        clipped_finish=min(item.effective_end, last_day),
        progress=None if item.is_milestone else infer_progress(item),
        status=item.status,
        depends_on=list(item.dependencies),
    )


def _node_kind(item: Item) -> NodeKind:
    if item.type == "milestone":
        return "lozenge"
    if item.type == "deliverable":
        return "deliverable"
    return "bar"
