# app/services/readiness.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from app.core.errors import ComplianceError, UpstreamUnavailable
from app.services.status import progress_of

log = logging.getLogger("app.compliance")


class DocumentCategory(str, enum.Enum):
    UIF = "uif"
    COIDA = "coida"
    PAYSLIPS_PAYROLL = "payslips_payroll"
    EMPLOYMENT_CONTRACTS = "employment_contracts"
    OHS_RISK_ASSESSMENTS = "ohs_risk_assessments"
    PPE_REGISTER = "ppe_register"
    INCIDENT_REGISTER = "incident_register"
    FIRST_AID = "first_aid"
    ANIMAL_ID_OWNERSHIP = "animal_id_ownership"
    MOVEMENT_RECORDS = "movement_records"
    VET_LETTERS = "vet_letters"
    CHEMICAL_PURCHASE_INVOICES = "chemical_purchase_invoices"
    CHEMICAL_STOCK_RECORDS = "chemical_stock_records"
    CHEMICAL_APPLICATION_RECORDS = "chemical_application_records"
    WATER_USE_AUTHORISATION = "water_use_authorisation"
    BOREHOLE_ABSTRACTION_LOGS = "borehole_abstraction_logs"
    ABATTOIR_MEAT_SAFETY = "abattoir_meat_safety"
    OTHER = "other"


DOCUMENT_CATEGORY_LABELS: Dict[DocumentCategory, str] = {
    DocumentCategory.UIF: "UIF Registration",
    DocumentCategory.COIDA: "COIDA Certificate",
    DocumentCategory.PAYSLIPS_PAYROLL: "Payslips/Payroll",
    DocumentCategory.EMPLOYMENT_CONTRACTS: "Employment Contracts",
    DocumentCategory.OHS_RISK_ASSESSMENTS: "OHS Risk Assessments",
    DocumentCategory.PPE_REGISTER: "PPE Register",
    DocumentCategory.INCIDENT_REGISTER: "Incident Register",
    DocumentCategory.FIRST_AID: "First Aid Records",
    DocumentCategory.ANIMAL_ID_OWNERSHIP: "Animal ID/Ownership",
    DocumentCategory.MOVEMENT_RECORDS: "Movement Records",
    DocumentCategory.VET_LETTERS: "Veterinary Letters",
    DocumentCategory.CHEMICAL_PURCHASE_INVOICES: "Chemical Invoices",
    DocumentCategory.CHEMICAL_STOCK_RECORDS: "Stock Records",
    DocumentCategory.CHEMICAL_APPLICATION_RECORDS: "Application Records",
    DocumentCategory.WATER_USE_AUTHORISATION: "Water Use Licence",
    DocumentCategory.BOREHOLE_ABSTRACTION_LOGS: "Borehole Logs",
    DocumentCategory.ABATTOIR_MEAT_SAFETY: "Meat Safety Docs",
    DocumentCategory.OTHER: "Other",
}


class AuditType(str, enum.Enum):
    DEPARTMENT_OF_LABOUR = "department_of_labour"
    OHS = "ohs"
    LIVESTOCK_TRACEABILITY = "livestock_traceability"
    CHEMICAL_RECORDS = "chemical_records"


AUDIT_TYPE_LABELS: Dict[AuditType, str] = {
    AuditType.DEPARTMENT_OF_LABOUR: "Dept of Labour (BCEA/UIF/COIDA)",
    AuditType.OHS: "Occupational Health & Safety",
    AuditType.LIVESTOCK_TRACEABILITY: "Livestock Traceability",
    AuditType.CHEMICAL_RECORDS: "Chemical Records",
}

AUDIT_REQUIREMENTS: Dict[AuditType, Tuple[DocumentCategory, ...]] = {
    AuditType.DEPARTMENT_OF_LABOUR: (
        DocumentCategory.UIF,
        DocumentCategory.COIDA,
        DocumentCategory.PAYSLIPS_PAYROLL,
        DocumentCategory.EMPLOYMENT_CONTRACTS,
    ),
    AuditType.OHS: (
        DocumentCategory.OHS_RISK_ASSESSMENTS,
        DocumentCategory.PPE_REGISTER,
        DocumentCategory.INCIDENT_REGISTER,
        DocumentCategory.FIRST_AID,
    ),
    AuditType.LIVESTOCK_TRACEABILITY: (
        DocumentCategory.ANIMAL_ID_OWNERSHIP,
        DocumentCategory.MOVEMENT_RECORDS,
        DocumentCategory.VET_LETTERS,
    ),
    AuditType.CHEMICAL_RECORDS: (
        DocumentCategory.CHEMICAL_PURCHASE_INVOICES,
        DocumentCategory.CHEMICAL_STOCK_RECORDS,
        DocumentCategory.CHEMICAL_APPLICATION_RECORDS,
    ),
}

# Every audit type must have an entry; checked at import time
_missing = [t for t in AuditType if t not in AUDIT_REQUIREMENTS or t not in AUDIT_TYPE_LABELS]
if _missing:  # pragma: no cover
    raise RuntimeError(f"Audit types without requirements/labels: {_missing}")


class DocumentCounter(Protocol):
    def count_by_category(self, farm_id: str) -> Mapping[str, int]: ...


@dataclass(frozen=True)
class AuditReadiness:
    audit_type: str
    label: str
    percent: int
    present_count: int
    required_count: int
    missing_categories: Tuple[str, ...]
    degenerate: bool = False


class AuditReadinessCalculator:
    """
    Percentage of an audit type's required document categories that have at
    least one uploaded document. Stateless; safe to call for all types at once.
    """

    def __init__(
        self,
        documents: DocumentCounter,
        requirements: Optional[Mapping[AuditType, Sequence[DocumentCategory]]] = None,
    ):
        self.documents = documents
        self.requirements = requirements if requirements is not None else AUDIT_REQUIREMENTS

    def _present(self, farm_id: str) -> set:
        try:
            counts = self.documents.count_by_category(farm_id)
        except ComplianceError:
            raise
        except Exception as e:
            log.error("document store failed farm=%s: %s", farm_id, e)
            raise UpstreamUnavailable("Document store unavailable.") from e
        return {str(getattr(k, "value", k)) for k, v in (counts or {}).items() if (v or 0) > 0}

    def _score(self, audit_type: AuditType, present: set) -> AuditReadiness:
        required = [c.value for c in self.requirements.get(audit_type, ())]
        have = [c for c in required if c in present]
        missing = tuple(c for c in required if c not in present)
        return AuditReadiness(
            audit_type=audit_type.value,
            label=AUDIT_TYPE_LABELS.get(audit_type, audit_type.value),
            percent=progress_of(len(have), len(required)),
            present_count=len(have),
            required_count=len(required),
            missing_categories=missing,
            degenerate=not required,
        )

    def readiness(self, audit_type: AuditType | str, farm_id: str) -> AuditReadiness:
        audit_type = AuditType(audit_type)
        return self._score(audit_type, self._present(farm_id))

    def readiness_all(self, farm_id: str) -> List[AuditReadiness]:
        present = self._present(farm_id)
        return [self._score(t, present) for t in AuditType]

    def missing_documents(self, farm_id: str, limit: Optional[int] = 6) -> List[str]:
        """Document categories with no uploads at all ('other' excluded), vault order."""
        present = self._present(farm_id)
        missing = [
            c.value
            for c in DocumentCategory
            if c is not DocumentCategory.OTHER and c.value not in present
        ]
        return missing if limit is None else missing[:limit]
