# app/services/compliance.py
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.services.catalog import DEFAULT_CATALOG, ChecklistCatalog
from app.services.documents import SqlDocumentCounter
from app.services.history import HistoryAggregator
from app.services.readiness import (
    AuditReadiness,
    AuditReadinessCalculator,
    AuditType,
    DocumentCounter,
)
from app.services.rollover import RolloverScheduler
from app.services.snapshots import MonthSnapshot, SnapshotStore


def _audit_type(value) -> AuditType:
    try:
        return AuditType(value)
    except ValueError:
        raise NotFound(
            f"Unknown audit type {value!r}.",
            details={"audit_type": str(value), "known": [t.value for t in AuditType]},
        ) from None


class ComplianceService:
    """
    Farm-scoped entry point for the compliance engine.
    Everything the HTTP layer needs goes through here.
    """

    def __init__(
        self,
        store: SnapshotStore,
        rollover: RolloverScheduler,
        readiness: AuditReadinessCalculator,
        history: Optional[HistoryAggregator] = None,
    ):
        self.store = store
        self.rollover = rollover
        self.readiness = readiness
        self.history = history or HistoryAggregator(store, rollover)

    @property
    def catalog(self) -> ChecklistCatalog:
        return self.store.catalog

    # --- checklist ---
    def get_current_status(self, farm_id: str) -> MonthSnapshot:
        snap = self.rollover.ensure_current(farm_id)
        return replace(snap, is_current=True)

    def toggle_item(
        self, farm_id: str, item_id: str, *, completed_by: Optional[str] = None
    ) -> MonthSnapshot:
        # The current month may not exist yet (first action of a new month)
        current = self.rollover.ensure_current(farm_id)
        snap = self.store.toggle(
            farm_id, current.month_year, item_id, completed_by=completed_by
        )
        return replace(snap, is_current=True)

    def get_history(self, farm_id: str, months: int = 6) -> List[MonthSnapshot]:
        return self.history.get_history(farm_id, months)

    # --- audit readiness ---
    def get_audit_readiness(self, farm_id: str, audit_type) -> AuditReadiness:
        return self.readiness.readiness(_audit_type(audit_type), farm_id)

    def get_all_audit_readiness(self, farm_id: str) -> List[AuditReadiness]:
        return self.readiness.readiness_all(farm_id)

    def get_missing_documents(self, farm_id: str, limit: Optional[int] = 6) -> List[str]:
        return self.readiness.missing_documents(farm_id, limit=limit)

    def get_catalog(self) -> ChecklistCatalog:
        return self.catalog


def build_compliance_service(
    db: Session,
    *,
    catalog: ChecklistCatalog = DEFAULT_CATALOG,
    documents: Optional[DocumentCounter] = None,
    now=None,
    tz: Optional[str] = None,
) -> ComplianceService:
    """Wire the default SQL-backed collaborators around one DB session."""
    store = SnapshotStore(db, catalog, now=now)
    rollover = RolloverScheduler(store, now=now, tz=tz)
    calculator = AuditReadinessCalculator(documents or SqlDocumentCounter(db))
    return ComplianceService(store, rollover, calculator)
