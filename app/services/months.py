# app/services/months.py
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def parse_month_year(month_year: str) -> Tuple[int, int]:
    """'2026-02' -> (2026, 2). Raises ValueError on anything else."""
    m = _MONTH_RE.match(month_year or "")
    if not m:
        raise ValueError(f"month_year must be YYYY-MM, got {month_year!r}")
    return int(m.group(1)), int(m.group(2))


def format_month_year(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_year_of(now: datetime, tz: Optional[str] = None) -> str:
    # naive datetimes are treated as UTC
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if tz and tz.upper() != "UTC":
        now = now.astimezone(ZoneInfo(tz))
    else:
        now = now.astimezone(timezone.utc)
    return format_month_year(now.year, now.month)


def month_label(month_year: str) -> str:
    """'2026-02' -> 'February 2026'"""
    year, month = parse_month_year(month_year)
    return f"{_MONTH_NAMES[month - 1]} {year}"


def shift_month(month_year: str, delta: int) -> str:
    year, month = parse_month_year(month_year)
    idx = year * 12 + (month - 1) + delta
    return format_month_year(idx // 12, idx % 12 + 1)


def months_window(current: str, n: int) -> List[str]:
    """The n calendar months ending at `current`, most recent first."""
    return [shift_month(current, -i) for i in range(max(0, n))]
