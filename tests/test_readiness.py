import pytest

from app.core.errors import UpstreamUnavailable
from app.models.document import ComplianceDocument
from app.services.documents import SqlDocumentCounter
from app.services.readiness import (
    AUDIT_REQUIREMENTS,
    AUDIT_TYPE_LABELS,
    AuditReadinessCalculator,
    AuditType,
    DocumentCategory,
)

from conftest import FakeDocuments


def test_every_audit_type_is_mapped():
    for t in AuditType:
        assert AUDIT_REQUIREMENTS[t]
        assert AUDIT_TYPE_LABELS[t]


def test_partial_readiness_and_missing_in_catalog_order():
    docs = FakeDocuments({"farm-1": {"ppe_register": 2, "first_aid": 1}})
    r = AuditReadinessCalculator(docs).readiness(AuditType.OHS, "farm-1")

    assert r.percent == 50
    assert r.present_count == 2
    assert r.required_count == 4
    assert r.missing_categories == ("ohs_risk_assessments", "incident_register")
    assert r.label == "Occupational Health & Safety"
    assert r.degenerate is False


def test_zero_counts_do_not_count_as_present():
    docs = FakeDocuments({"farm-1": {"uif": 0, "coida": 3}})
    r = AuditReadinessCalculator(docs).readiness("department_of_labour", "farm-1")
    assert r.percent == 25
    assert "uif" in r.missing_categories


def test_full_and_empty():
    docs = FakeDocuments(
        {
            "farm-1": {
                "animal_id_ownership": 1,
                "movement_records": 4,
                "vet_letters": 1,
            }
        }
    )
    calc = AuditReadinessCalculator(docs)
    assert calc.readiness(AuditType.LIVESTOCK_TRACEABILITY, "farm-1").percent == 100
    assert calc.readiness(AuditType.LIVESTOCK_TRACEABILITY, "farm-1").missing_categories == ()
    assert calc.readiness(AuditType.LIVESTOCK_TRACEABILITY, "farm-2").percent == 0


def test_rounding_thirds():
    docs = FakeDocuments({"farm-1": {"chemical_purchase_invoices": 1, "chemical_stock_records": 1}})
    r = AuditReadinessCalculator(docs).readiness(AuditType.CHEMICAL_RECORDS, "farm-1")
    assert r.percent == 67


def test_degenerate_type_is_zero_not_hundred():
    calc = AuditReadinessCalculator(
        FakeDocuments({"farm-1": {"uif": 1}}), requirements={AuditType.OHS: ()}
    )
    r = calc.readiness(AuditType.OHS, "farm-1")
    assert r.percent == 0
    assert r.degenerate is True
    assert r.missing_categories == ()


def test_unknown_audit_type_rejected():
    with pytest.raises(ValueError):
        AuditReadinessCalculator(FakeDocuments()).readiness("iso9001", "farm-1")


def test_readiness_all_reads_documents_once():
    docs = FakeDocuments({"farm-1": {"ppe_register": 1}})
    results = AuditReadinessCalculator(docs).readiness_all("farm-1")

    assert [r.audit_type for r in results] == [t.value for t in AuditType]
    assert docs.calls == 1
    by_type = {r.audit_type: r.percent for r in results}
    assert by_type == {
        "department_of_labour": 0,
        "ohs": 25,
        "livestock_traceability": 0,
        "chemical_records": 0,
    }


def test_document_store_failure_is_reported():
    calc = AuditReadinessCalculator(FakeDocuments(error=ConnectionError("vault down")))
    with pytest.raises(UpstreamUnavailable):
        calc.readiness(AuditType.OHS, "farm-1")
    with pytest.raises(UpstreamUnavailable):
        calc.readiness_all("farm-1")


def test_missing_documents_skips_other_and_limits():
    docs = FakeDocuments({"farm-1": {"uif": 1, "coida": 2}})
    calc = AuditReadinessCalculator(docs)

    assert calc.missing_documents("farm-1", limit=3) == [
        "payslips_payroll",
        "employment_contracts",
        "ohs_risk_assessments",
    ]
    everything = calc.missing_documents("farm-1", limit=None)
    assert "other" not in everything
    assert len(everything) == len(DocumentCategory) - 1 - 2


def test_sql_document_counter(db):
    for farm, cat in (("farm-1", "ppe_register"), ("farm-1", "ppe_register"), ("farm-1", "uif"), ("farm-2", "coida")):
        db.add(
            ComplianceDocument(
                farm_id=farm,
                category=cat,
                title=f"{cat} scan",
                file_name=f"{cat}.pdf",
                file_url=f"s3://vault/{farm}/{cat}.pdf",
            )
        )
    db.commit()

    counts = SqlDocumentCounter(db).count_by_category("farm-1")
    assert counts == {"ppe_register": 2, "uif": 1}
    assert SqlDocumentCounter(db).count_by_category("farm-3") == {}

    r = AuditReadinessCalculator(SqlDocumentCounter(db)).readiness(AuditType.OHS, "farm-1")
    assert r.percent == 25
