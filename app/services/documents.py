# app/services/documents.py
from __future__ import annotations

from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import UpstreamUnavailable
from app.models.document import ComplianceDocument


class SqlDocumentCounter:
    """Document vault counts straight from the compliance_documents table."""

    def __init__(self, db: Session):
        self.db = db

    def count_by_category(self, farm_id: str) -> Dict[str, int]:
        try:
            rows = self.db.execute(
                select(ComplianceDocument.category, func.count(ComplianceDocument.id))
                .where(ComplianceDocument.farm_id == farm_id)
                .group_by(ComplianceDocument.category)
            ).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise UpstreamUnavailable("Document store unavailable.") from e
        return {category: int(cnt or 0) for category, cnt in rows}
