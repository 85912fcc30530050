import datetime as dt

import pytest

from gantt_layout.schedule_models import Item


@pytest.fixture
def make_item():
    """Factory for items; `start`/`end` are day offsets from Monday 2024-01-01."""

    base = dt.date(2024, 1, 1)

    def factory(item_id, start, end=None, phase="p1", item_type="task", **kwargs):
        return Item(
            id=item_id,
            phase_id=phase,
            type=item_type,
            start=base + dt.timedelta(days=start),
            end=None if end is None else base + dt.timedelta(days=end),
            **kwargs,
        )

    return factory
