# app/api/v1/compliance.py
from dataclasses import asdict
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.compliance import (
    AuditReadinessListOut,
    AuditReadinessOut,
    CatalogOut,
    HistoryOut,
    MissingDocumentsOut,
    MonthSnapshotOut,
    ToggleIn,
)
from app.services.compliance import ComplianceService, build_compliance_service
from app.services.readiness import (
    AUDIT_REQUIREMENTS,
    AUDIT_TYPE_LABELS,
    DOCUMENT_CATEGORY_LABELS,
    AuditType,
    DocumentCategory,
)

router = APIRouter()


def get_compliance_service(db: Session = Depends(get_db)) -> ComplianceService:
    return build_compliance_service(db)


def _snapshot_out(snap) -> MonthSnapshotOut:
    return MonthSnapshotOut.model_validate(asdict(snap))


def _readiness_out(r) -> AuditReadinessOut:
    return AuditReadinessOut.model_validate(asdict(r))


@router.get("/compliance/status", response_model=MonthSnapshotOut)
def compliance_status(
    farm: str = Query(..., min_length=1, max_length=64),
    svc: ComplianceService = Depends(get_compliance_service),
):
    """
    Current month checklist snapshot for a farm.
    The month is initialized on first read.
    """
    return _snapshot_out(svc.get_current_status(farm))


@router.post("/compliance/toggle", response_model=MonthSnapshotOut)
def compliance_toggle(
    payload: ToggleIn,
    svc: ComplianceService = Depends(get_compliance_service),
):
    """Flip one checklist item of the current month and return the new totals."""
    snap = svc.toggle_item(
        payload.farm, payload.item_id, completed_by=payload.completed_by
    )
    return _snapshot_out(snap)


@router.get("/compliance/history", response_model=HistoryOut)
def compliance_history(
    farm: str = Query(..., min_length=1, max_length=64),
    months: int = Query(6, ge=1, le=120),
    svc: ComplianceService = Depends(get_compliance_service),
):
    snaps = svc.get_history(farm, months)
    # report the window actually served (capped by HISTORY_MAX_MONTHS)
    return HistoryOut(
        farm_id=farm,
        months=min(months, svc.history.max_months),
        snapshots=[_snapshot_out(s) for s in snaps],
    )


@router.get(
    "/compliance/audit-readiness",
    response_model=Union[AuditReadinessOut, AuditReadinessListOut],
)
def compliance_audit_readiness(
    farm: str = Query(..., min_length=1, max_length=64),
    type_: Optional[str] = Query(None, alias="type"),
    svc: ComplianceService = Depends(get_compliance_service),
):
    """
    Readiness for one audit type (?type=ohs) or for every audit type when
    `type` is omitted.
    """
    if type_ is not None:
        return _readiness_out(svc.get_audit_readiness(farm, type_))
    return AuditReadinessListOut(
        farm_id=farm,
        audit_types=[_readiness_out(r) for r in svc.get_all_audit_readiness(farm)],
    )


@router.get("/compliance/missing-documents", response_model=MissingDocumentsOut)
def compliance_missing_documents(
    farm: str = Query(..., min_length=1, max_length=64),
    limit: int = Query(6, ge=1, le=50),
    svc: ComplianceService = Depends(get_compliance_service),
):
    missing = svc.get_missing_documents(farm, limit=limit)
    return {
        "farm_id": farm,
        "missing": [
            {"category": c, "label": DOCUMENT_CATEGORY_LABELS[DocumentCategory(c)]}
            for c in missing
        ],
    }


@router.get("/compliance/catalog", response_model=CatalogOut)
def compliance_catalog(svc: ComplianceService = Depends(get_compliance_service)):
    catalog = svc.get_catalog()
    return {
        "version": catalog.version,
        "categories": [
            {
                "id": cat.id,
                "name": cat.name,
                "items": [asdict(i) for i in cat.items],
            }
            for cat in catalog.categories
        ],
        "audit_types": [
            {
                "id": t.value,
                "label": AUDIT_TYPE_LABELS[t],
                "required_categories": [c.value for c in AUDIT_REQUIREMENTS[t]],
            }
            for t in AuditType
        ],
    }
