# app/worker/scheduler.py
from __future__ import annotations

import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from tzlocal import get_localzone

from app.db.session import SessionLocal
from app.services.rollover import RolloverScheduler
from app.services.snapshots import SnapshotStore

log = logging.getLogger("app.scheduler")


def run_monthly_rollover(session_factory=SessionLocal) -> dict:
    """
    Initialize the current month's checklist for every farm with history.
    Safe to run any number of times; reads still roll over lazily if this
    job never runs.
    """
    db = session_factory()
    try:
        return RolloverScheduler(SnapshotStore(db)).rollover_all()
    finally:
        db.close()


def make_scheduler() -> BackgroundScheduler:
    """
    Create a BackgroundScheduler configured from env:
      - APP_TIMEZONE           (default: system tz via tzlocal or 'UTC')
      - APP_SCHEDULER_DAY      (default: 1, day of month)
      - APP_SCHEDULER_HOUR     (default: 0)
      - APP_SCHEDULER_MINUTE   (default: 5)
    """
    tzname = os.getenv("APP_TIMEZONE") or str(get_localzone()) or "UTC"

    day = int(os.getenv("APP_SCHEDULER_DAY", "1"))
    hour = int(os.getenv("APP_SCHEDULER_HOUR", "0"))
    minute = int(os.getenv("APP_SCHEDULER_MINUTE", "5"))

    sched = BackgroundScheduler(timezone=tzname)
    sched.add_job(
        run_monthly_rollover,
        CronTrigger(day=day, hour=hour, minute=minute),
        id="monthly_checklist_rollover",
        replace_existing=True,
    )
    log.info("scheduled monthly rollover day=%s %02d:%02d tz=%s", day, hour, minute, tzname)
    return sched
