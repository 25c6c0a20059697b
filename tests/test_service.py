import pytest

from app.core.errors import InvalidCatalogReference, NotFound
from app.services.compliance import ComplianceService
from app.services.history import HistoryAggregator
from app.services.readiness import AuditReadinessCalculator, AuditType, DocumentCategory
from app.services.rollover import RolloverScheduler
from app.services.snapshots import SnapshotStore

from conftest import FakeDocuments, small_catalog


def test_farm_scenario_end_to_end(db, clock):
    """Farm F: 5 items over 2 categories, February 2026."""
    docs = FakeDocuments({"F": {"ppe_register": 2}})
    store = SnapshotStore(db, small_catalog(), now=clock)
    rollover = RolloverScheduler(store, now=clock, tz="UTC")
    calc = AuditReadinessCalculator(
        docs,
        requirements={
            AuditType.OHS: (DocumentCategory.PPE_REGISTER, DocumentCategory.INCIDENT_REGISTER)
        },
    )
    svc = ComplianceService(store, rollover, calc)

    start = svc.get_current_status("F")
    assert start.month_year == "2026-02"
    assert start.total_items == 5
    assert start.completed_items == 0
    assert start.progress == 0
    assert start.status.label == "Action Required"

    for item in ("aw1", "aw2", "bs1", "bs2"):
        snap = svc.toggle_item("F", item)
    assert snap.progress == 80
    assert snap.status.label == "Audit Ready"
    assert snap.status.color == "green"

    r = svc.get_audit_readiness("F", "ohs")
    assert r.percent == 50
    assert list(r.missing_categories) == ["incident_register"]


def test_current_status_is_flagged_current(service):
    snap = service.get_current_status("farm-1")
    assert snap.is_current is True


def test_toggle_targets_current_month_and_initializes_it(service, clock):
    service.get_current_status("farm-1")
    clock.set(2026, 3, 1)

    snap = service.toggle_item("farm-1", "aw1", completed_by="u1")
    assert snap.month_year == "2026-03"
    assert snap.completed_items == 1
    assert snap.is_current
    assert service.store.snapshot("farm-1", "2026-02").completed_items == 0


def test_toggle_unknown_item(service):
    with pytest.raises(InvalidCatalogReference):
        service.toggle_item("farm-1", "nope")


def test_history_through_facade(service, clock):
    service.toggle_item("farm-1", "aw1")
    clock.set(2026, 3)
    history = service.get_history("farm-1", 6)
    assert [(s.month_year, s.is_current) for s in history] == [
        ("2026-03", True),
        ("2026-02", False),
    ]


def test_unknown_audit_type_is_not_found(service):
    with pytest.raises(NotFound):
        service.get_audit_readiness("farm-1", "iso9001")


def test_all_readiness_and_missing_documents(service, documents):
    documents.counts = {"farm-1": {"uif": 1}}
    results = service.get_all_audit_readiness("farm-1")
    assert len(results) == len(AuditType)
    assert service.get_missing_documents("farm-1", limit=2) == ["coida", "payslips_payroll"]


def test_service_uses_injected_history(db, clock):
    store = SnapshotStore(db, small_catalog())
    rollover = RolloverScheduler(store, now=clock, tz="UTC")
    history = HistoryAggregator(store, rollover, max_months=1)
    svc = ComplianceService(store, rollover, AuditReadinessCalculator(FakeDocuments()), history)
    assert svc.history is history
    assert svc.get_catalog() is store.catalog
