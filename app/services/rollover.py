# app/services/rollover.py
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from app.core.errors import ComplianceError
from app.services.months import month_year_of
from app.services.snapshots import MonthSnapshot, SnapshotStore

log = logging.getLogger("app.compliance")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RolloverScheduler:
    """
    Makes sure the current month has an initialized checklist before it is read.

    "Current" is the calendar month of `now()` in COMPLIANCE_TIMEZONE (UTC by
    default). Rollover is lazy: every read of the current month goes through
    ensure_current, which is idempotent.
    """

    def __init__(
        self,
        store: SnapshotStore,
        *,
        now: Optional[Callable[[], datetime]] = None,
        tz: Optional[str] = None,
    ):
        self.store = store
        self._now = now or _utcnow
        self.tz = tz if tz is not None else os.getenv("COMPLIANCE_TIMEZONE", "UTC")

    def current_month_year(self) -> str:
        return month_year_of(self._now(), self.tz)

    def ensure_current(self, farm_id: str) -> MonthSnapshot:
        return self.store.get_or_init(farm_id, self.current_month_year())

    def rollover_all(self, farm_ids: Optional[Iterable[str]] = None) -> Dict[str, object]:
        """
        Eager variant for the monthly job: initialize the current month for
        every farm that has any checklist history (or the given farms).
        """
        month = self.current_month_year()
        farms = list(farm_ids) if farm_ids is not None else self.store.list_farms()
        ok, failed = 0, 0
        for farm_id in farms:
            try:
                self.store.get_or_init(farm_id, month)
                ok += 1
            except ComplianceError:
                failed += 1
                log.exception("rollover failed farm=%s month=%s", farm_id, month)
        log.info("rollover month=%s farms=%s failed=%s", month, ok, failed)
        return {"month_year": month, "initialized": ok, "failed": failed}
