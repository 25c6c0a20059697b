# app/models/document.py
from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, Index, Integer, String, Text, func

from app.db.base import Base


class ComplianceDocument(Base):
    """
    Evidence uploaded to a farm's document vault.
    Only `farm_id` and `category` matter to readiness scoring; the file itself
    lives in external storage behind `file_url`.
    """

    __tablename__ = "compliance_documents"

    id = Column(Integer, primary_key=True, index=True)

    farm_id = Column(String(64), nullable=False, index=True)
    category = Column(
        String(64), nullable=False, index=True
    )  # e.g. uif, ppe_register, movement_records
    title = Column(String(255), nullable=False)

    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    date_of_document = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    uploaded_by = Column(String(64), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


Index("ix_compliance_documents_farm_category", ComplianceDocument.farm_id, ComplianceDocument.category)
