# app/services/snapshots.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy import case, null, select, text, true, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import InvalidCatalogReference, NotFound, UpstreamUnavailable
from app.models.checklist import ComplianceMonth, MonthlyItemState
from app.services.catalog import DEFAULT_CATALOG, ChecklistCatalog
from app.services.months import month_label, parse_month_year
from app.services.status import ComplianceStatus, classify, progress_of

log = logging.getLogger("app.compliance")

T = TypeVar("T")


@dataclass(frozen=True)
class ItemState:
    item_id: str
    category_id: str
    text: str
    completed: bool
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CategoryProgress:
    category_id: str
    name: str
    completed_items: int
    total_items: int
    progress: int
    items: Tuple[ItemState, ...] = ()


@dataclass(frozen=True)
class MonthSnapshot:
    farm_id: str
    month_year: str
    label: str
    completed_items: int
    total_items: int
    progress: int
    status: ComplianceStatus
    catalog_version: str
    is_current: bool = False
    categories: Tuple[CategoryProgress, ...] = field(default=())


# Both statements rely on the unique constraints of the natural keys, so two
# requests racing on the first read of a month converge to one row set.
_INSERT_MONTH = text(
    """
    INSERT INTO compliance_months (farm_id, month_year, catalog_version, item_count)
    VALUES (:farm_id, :month_year, :catalog_version, :item_count)
    ON CONFLICT (farm_id, month_year) DO NOTHING
    """
)

_INSERT_ITEM = text(
    """
    INSERT INTO compliance_checklist_items (
        farm_id, month_year, item_id, category_id, category_name,
        item_text, position, catalog_version, completed
    )
    VALUES (
        :farm_id, :month_year, :item_id, :category_id, :category_name,
        :item_text, :position, :catalog_version, :completed
    )
    ON CONFLICT (farm_id, month_year, item_id) DO NOTHING
    """
)


class SnapshotStore:
    """
    Per-farm, per-month checklist state.

    Rows are created by get_or_init, flipped by toggle and never deleted.
    Aggregates are always recomputed from committed rows.
    """

    def __init__(
        self,
        db: Session,
        catalog: ChecklistCatalog = DEFAULT_CATALOG,
        *,
        retries: int = 1,
        backoff_seconds: float = 0.1,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.retries = retries
        self.backoff_seconds = backoff_seconds
        self._now = now or (lambda: datetime.now(timezone.utc))

    # -------------------------
    # persistence boundary
    # -------------------------
    def _run(self, fn: Callable[[], T], what: str) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except OperationalError as e:
                self.db.rollback()
                if attempt >= self.retries:
                    log.error("storage unavailable during %s: %s", what, e)
                    raise UpstreamUnavailable(
                        f"Compliance storage unavailable ({what})."
                    ) from e
                attempt += 1
                log.warning("transient storage error during %s, retry %s: %s", what, attempt, e)
                time.sleep(self.backoff_seconds * attempt)
            except SQLAlchemyError as e:
                self.db.rollback()
                log.error("storage error during %s: %s", what, e)
                raise UpstreamUnavailable(f"Compliance storage error ({what}).") from e

    # -------------------------
    # writes
    # -------------------------
    def get_or_init(self, farm_id: str, month_year: str) -> MonthSnapshot:
        parse_month_year(month_year)

        def _init() -> bool:
            items = self.catalog.items()
            created = self.db.execute(
                _INSERT_MONTH,
                {
                    "farm_id": farm_id,
                    "month_year": month_year,
                    "catalog_version": self.catalog.version,
                    "item_count": len(items),
                },
            ).rowcount
            frozen_version = self.db.execute(
                select(ComplianceMonth.catalog_version).where(
                    ComplianceMonth.farm_id == farm_id,
                    ComplianceMonth.month_year == month_year,
                )
            ).scalar_one()
            # A month frozen with another catalog version keeps its own items
            if items and frozen_version == self.catalog.version:
                self.db.execute(
                    _INSERT_ITEM,
                    [
                        {
                            "farm_id": farm_id,
                            "month_year": month_year,
                            "item_id": item.id,
                            "category_id": item.category_id,
                            "category_name": self.catalog.category_name(item.category_id),
                            "item_text": item.text,
                            "position": pos,
                            "catalog_version": self.catalog.version,
                            "completed": False,
                        }
                        for pos, item in enumerate(items)
                    ],
                )
            self.db.commit()
            return bool(created)

        if self._run(_init, "initialize month"):
            log.info(
                "initialized checklist farm=%s month=%s catalog=%s items=%s",
                farm_id,
                month_year,
                self.catalog.version,
                self.catalog.total_items,
            )
        snap = self.snapshot(farm_id, month_year)
        if snap is None:  # pragma: no cover - committed just above
            raise UpstreamUnavailable("Checklist month vanished after initialization.")
        return snap

    def toggle(
        self,
        farm_id: str,
        month_year: str,
        item_id: str,
        *,
        completed_by: Optional[str] = None,
    ) -> MonthSnapshot:
        if not self.catalog.has_item(item_id):
            raise InvalidCatalogReference(
                f"Checklist item {item_id!r} is not part of catalog {self.catalog.version}.",
                details={"item_id": item_id, "catalog_version": self.catalog.version},
            )

        def _toggle() -> None:
            now = self._now()
            was_done = MonthlyItemState.completed == true()
            stmt = (
                update(MonthlyItemState)
                .where(
                    MonthlyItemState.farm_id == farm_id,
                    MonthlyItemState.month_year == month_year,
                    MonthlyItemState.item_id == item_id,
                )
                .values(
                    completed=~MonthlyItemState.completed,
                    completed_at=case((was_done, null()), else_=now),
                    completed_by=case((was_done, null()), else_=completed_by),
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if self.db.execute(stmt).rowcount == 0:
                self.db.rollback()
                raise NotFound(
                    f"No checklist row for farm={farm_id} month={month_year} item={item_id}; "
                    "initialize the month first.",
                    details={"farm_id": farm_id, "month_year": month_year, "item_id": item_id},
                )
            self.db.commit()

        self._run(_toggle, "toggle item")
        snap = self.snapshot(farm_id, month_year)
        if snap is None:  # pragma: no cover - a row was just updated
            raise NotFound(f"Checklist month {month_year} not initialized for farm {farm_id}.")
        log.info(
            "toggled item farm=%s month=%s item=%s progress=%s",
            farm_id,
            month_year,
            item_id,
            snap.progress,
        )
        return snap

    # -------------------------
    # reads
    # -------------------------
    def snapshot(self, farm_id: str, month_year: str) -> Optional[MonthSnapshot]:
        """Computed aggregate for an initialized month, or None."""

        def _read():
            month = self.db.execute(
                select(ComplianceMonth).where(
                    ComplianceMonth.farm_id == farm_id,
                    ComplianceMonth.month_year == month_year,
                )
            ).scalar_one_or_none()
            if month is None:
                return None, []
            rows = (
                self.db.execute(
                    select(MonthlyItemState)
                    .where(
                        MonthlyItemState.farm_id == farm_id,
                        MonthlyItemState.month_year == month_year,
                    )
                    .order_by(MonthlyItemState.position, MonthlyItemState.id)
                    .execution_options(populate_existing=True)
                )
                .scalars()
                .all()
            )
            return month.catalog_version, rows

        version, rows = self._run(_read, "read snapshot")
        if version is None:
            return None
        return self._compute(farm_id, month_year, version, rows)

    def list_months(
        self,
        farm_id: str,
        limit: Optional[int] = 12,
        *,
        since: Optional[str] = None,
        until: Optional[str] = None,
    ) -> List[str]:
        """
        Initialized months for a farm, most recent first.
        `since` / `until` are inclusive YYYY-MM bounds.
        """
        for bound in (since, until):
            if bound is not None:
                parse_month_year(bound)

        def _list() -> List[str]:
            stmt = select(ComplianceMonth.month_year).where(
                ComplianceMonth.farm_id == farm_id
            )
            # YYYY-MM sorts lexically in calendar order
            if since is not None:
                stmt = stmt.where(ComplianceMonth.month_year >= since)
            if until is not None:
                stmt = stmt.where(ComplianceMonth.month_year <= until)
            stmt = stmt.order_by(ComplianceMonth.month_year.desc())
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(self.db.execute(stmt).scalars())

        return self._run(_list, "list months")

    def list_farms(self) -> List[str]:
        def _farms() -> List[str]:
            return list(
                self.db.execute(
                    select(ComplianceMonth.farm_id)
                    .distinct()
                    .order_by(ComplianceMonth.farm_id)
                ).scalars()
            )

        return self._run(_farms, "list farms")

    # -------------------------
    # aggregation
    # -------------------------
    def _compute(
        self,
        farm_id: str,
        month_year: str,
        catalog_version: str,
        rows: List[MonthlyItemState],
    ) -> MonthSnapshot:
        grouped: Dict[str, List[ItemState]] = {}
        names: Dict[str, str] = {}
        for r in rows:
            # name as stored when the month was initialized
            names.setdefault(r.category_id, r.category_name)
            grouped.setdefault(r.category_id, []).append(
                ItemState(
                    item_id=r.item_id,
                    category_id=r.category_id,
                    text=r.item_text,
                    completed=bool(r.completed),
                    completed_at=r.completed_at,
                    completed_by=r.completed_by,
                    notes=r.notes,
                )
            )

        categories = []
        for cid, items in grouped.items():
            done = sum(1 for i in items if i.completed)
            categories.append(
                CategoryProgress(
                    category_id=cid,
                    name=names[cid],
                    completed_items=done,
                    total_items=len(items),
                    progress=progress_of(done, len(items)),
                    items=tuple(items),
                )
            )

        completed = sum(c.completed_items for c in categories)
        total = len(rows)
        progress = progress_of(completed, total)
        return MonthSnapshot(
            farm_id=farm_id,
            month_year=month_year,
            label=month_label(month_year),
            completed_items=completed,
            total_items=total,
            progress=progress,
            status=classify(progress),
            catalog_version=catalog_version,
            categories=tuple(categories),
        )
