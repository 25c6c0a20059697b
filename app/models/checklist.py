# app/models/checklist.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.db.base import Base


class ComplianceMonth(Base):
    """
    One row per (farm, month) once the month's checklist has been initialized.
    Records which catalog version the month was frozen with, so historical
    percentages are never recomputed against a newer catalog.
    """

    __tablename__ = "compliance_months"
    __table_args__ = (
        UniqueConstraint("farm_id", "month_year", name="ux_compliance_months"),
    )

    id = Column(Integer, primary_key=True)
    farm_id = Column(String(64), nullable=False, index=True)
    month_year = Column(String(7), nullable=False, index=True)  # YYYY-MM
    catalog_version = Column(String(32), nullable=False)
    item_count = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<ComplianceMonth farm={self.farm_id!r} month={self.month_year} v={self.catalog_version}>"


class MonthlyItemState(Base):
    __tablename__ = "compliance_checklist_items"

    id = Column(Integer, primary_key=True)

    farm_id = Column(String(64), nullable=False, index=True)
    month_year = Column(String(7), nullable=False)  # YYYY-MM

    # Frozen copy of the catalog entry at initialization time
    item_id = Column(String(64), nullable=False)
    category_id = Column(String(64), nullable=False)
    category_name = Column(String(128), nullable=False)
    item_text = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    catalog_version = Column(String(32), nullable=False)

    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completed_by = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)  # free text, returned with the item

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "farm_id", "month_year", "item_id", name="ux_compliance_checklist_items"
        ),
        Index("ix_checklist_items_farm_month", "farm_id", "month_year"),
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlyItemState farm={self.farm_id!r} month={self.month_year} "
            f"item={self.item_id} completed={self.completed}>"
        )
