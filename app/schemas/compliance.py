# app/schemas/compliance.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # JSON uses camelCase (monthYear, missingCategories); Python stays snake_case
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class ComplianceStatusOut(_CamelModel):
    label: str = Field(..., description="Audit Ready | Needs Attention | Action Required")
    color: str = Field(..., description="green | yellow | red")


class ChecklistItemStateOut(_CamelModel):
    item_id: str
    category_id: str
    text: str
    completed: bool
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    notes: Optional[str] = None


class CategoryProgressOut(_CamelModel):
    category_id: str
    name: str
    completed_items: int
    total_items: int
    progress: int
    items: List[ChecklistItemStateOut] = []


class MonthSnapshotOut(_CamelModel):
    farm_id: str
    month_year: str = Field(..., description="Calendar month, YYYY-MM.")
    label: str = Field(..., description="Human label, e.g. 'February 2026'.")
    completed_items: int
    total_items: int
    progress: int = Field(..., ge=0, le=100)
    status: ComplianceStatusOut
    catalog_version: str
    is_current: bool = False
    categories: List[CategoryProgressOut] = []


class HistoryOut(_CamelModel):
    farm_id: str
    months: int
    snapshots: List[MonthSnapshotOut]


class ToggleIn(_CamelModel):
    farm: constr(strip_whitespace=True, min_length=1, max_length=64) = Field(
        ..., description="Farm ID."
    )
    item_id: constr(strip_whitespace=True, min_length=1, max_length=64) = Field(
        ..., description="Checklist item ID from the catalog (e.g. 'aw1')."
    )
    completed_by: Optional[constr(strip_whitespace=True, max_length=64)] = Field(
        None, description="User ID recorded on completion."
    )


class AuditReadinessOut(_CamelModel):
    audit_type: str
    label: str
    percent: int = Field(..., ge=0, le=100)
    present_count: int
    required_count: int
    missing_categories: List[str]
    degenerate: bool = False


class AuditReadinessListOut(_CamelModel):
    farm_id: str
    audit_types: List[AuditReadinessOut]


class MissingDocumentOut(_CamelModel):
    category: str
    label: str


class MissingDocumentsOut(_CamelModel):
    farm_id: str
    missing: List[MissingDocumentOut]


class CatalogItemOut(_CamelModel):
    id: str
    category_id: str
    text: str


class CatalogCategoryOut(_CamelModel):
    id: str
    name: str
    items: List[CatalogItemOut]


class AuditTypeOut(_CamelModel):
    id: str
    label: str
    required_categories: List[str]


class CatalogOut(_CamelModel):
    version: str
    categories: List[CatalogCategoryOut]
    audit_types: List[AuditTypeOut]
