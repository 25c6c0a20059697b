# app/services/history.py
from __future__ import annotations

import os
from dataclasses import replace
from typing import List, Optional

from app.services.months import months_window
from app.services.rollover import RolloverScheduler
from app.services.snapshots import MonthSnapshot, SnapshotStore


class HistoryAggregator:
    """
    Month-by-month compliance history for one farm.

    Covers the `months_back` calendar months ending at the current month,
    newest first. The current month is always present (initialized on demand)
    and is the only entry with is_current=True; earlier months that were never
    initialized are left out rather than synthesized.
    """

    def __init__(
        self,
        store: SnapshotStore,
        rollover: RolloverScheduler,
        *,
        max_months: Optional[int] = None,
    ):
        self.store = store
        self.rollover = rollover
        self.max_months = max_months or int(os.getenv("HISTORY_MAX_MONTHS", "24"))

    def get_history(self, farm_id: str, months_back: int) -> List[MonthSnapshot]:
        if months_back < 1:
            raise ValueError("months_back must be >= 1")
        months_back = min(months_back, self.max_months)

        current = self.rollover.ensure_current(farm_id)
        window = months_window(current.month_year, months_back)

        out: List[MonthSnapshot] = [replace(current, is_current=True)]
        # bounded by the current month; rows written by a skewed clock stay out
        in_window = self.store.list_months(
            farm_id, limit=None, since=window[-1], until=current.month_year
        )
        for month_year in in_window:
            if month_year == current.month_year:
                continue
            snap = self.store.snapshot(farm_id, month_year)
            if snap is not None:
                out.append(snap)

        out.sort(key=lambda s: s.month_year, reverse=True)
        return out
