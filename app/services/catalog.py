# app/services/catalog.py
"""
Monthly checklist catalog.

The catalog is immutable and versioned. Every initialized month stores the
version and a frozen copy of the items it was created with, so bumping
CATALOG_VERSION after adding/removing items never changes past percentages.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

CATALOG_VERSION = "2024.1"


class ChecklistCategoryId(str, enum.Enum):
    ANIMAL_WELFARE = "animal-welfare"
    BIOSECURITY = "biosecurity"
    CHEMICAL_USE = "chemical-use"
    TRACEABILITY = "traceability"
    STAFF_SAFETY = "staff-safety"
    SUSTAINABILITY = "sustainability"


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    category_id: str
    text: str


@dataclass(frozen=True)
class ChecklistCategory:
    id: str
    name: str
    items: Tuple[ChecklistItem, ...]


class ChecklistCatalog:
    """Read-only, ordered view over checklist categories and their items."""

    def __init__(self, version: str, categories: Tuple[ChecklistCategory, ...]):
        self.version = version
        self.categories = tuple(categories)
        self._items: Dict[str, ChecklistItem] = {}
        for cat in self.categories:
            for item in cat.items:
                if item.id in self._items:
                    raise ValueError(f"Duplicate checklist item id {item.id!r}")
                self._items[item.id] = item

    def items(self) -> Tuple[ChecklistItem, ...]:
        return tuple(item for cat in self.categories for item in cat.items)

    @property
    def total_items(self) -> int:
        return len(self._items)

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def item(self, item_id: str) -> Optional[ChecklistItem]:
        return self._items.get(item_id)

    def category(self, category_id: str) -> Optional[ChecklistCategory]:
        for cat in self.categories:
            if cat.id == category_id:
                return cat
        return None

    def category_name(self, category_id: str) -> str:
        cat = self.category(category_id)
        return cat.name if cat else category_id

    def __repr__(self) -> str:
        return f"<ChecklistCatalog v={self.version} categories={len(self.categories)} items={self.total_items}>"


def _category(cid: ChecklistCategoryId, name: str, *items: Tuple[str, str]) -> ChecklistCategory:
    return ChecklistCategory(
        id=cid.value,
        name=name,
        items=tuple(ChecklistItem(id=iid, category_id=cid.value, text=text) for iid, text in items),
    )


DEFAULT_CATALOG = ChecklistCatalog(
    CATALOG_VERSION,
    (
        _category(
            ChecklistCategoryId.ANIMAL_WELFARE,
            "Animal Welfare",
            ("aw1", "Adequate food and water available"),
            ("aw2", "Appropriate shelter and living conditions"),
            ("aw3", "Regular health monitoring documented"),
            ("aw4", "Humane handling procedures in place"),
            ("aw5", "Pain management protocols documented"),
        ),
        _category(
            ChecklistCategoryId.BIOSECURITY,
            "Biosecurity",
            ("bs1", "Biosecurity plan documented and current"),
            ("bs2", "Visitor log maintained"),
            ("bs3", "Quarantine procedures documented"),
            ("bs4", "Vehicle and equipment cleaning protocols"),
            ("bs5", "Disease outbreak response plan"),
        ),
        _category(
            ChecklistCategoryId.CHEMICAL_USE,
            "Chemical Use",
            ("ch1", "Chemical storage meets regulations"),
            ("ch2", "All treatments recorded with WHP/ESI"),
            ("ch3", "Chemical inventory current"),
            ("ch4", "Staff trained in chemical handling"),
            ("ch5", "Disposal procedures documented"),
        ),
        _category(
            ChecklistCategoryId.TRACEABILITY,
            "Traceability",
            ("tr1", "All animals identified with NLIS tags"),
            ("tr2", "Movement records up to date"),
            ("tr3", "NVDs/eNVDs properly completed"),
            ("tr4", "Deceased animal records maintained"),
            ("tr5", "Birth and purchase records complete"),
        ),
        _category(
            ChecklistCategoryId.STAFF_SAFETY,
            "Staff Safety",
            ("ss1", "Safety induction completed for all staff"),
            ("ss2", "PPE available and properly maintained"),
            ("ss3", "First aid kits stocked and accessible"),
            ("ss4", "Emergency procedures documented"),
            ("ss5", "Incident reporting system in place"),
        ),
        _category(
            ChecklistCategoryId.SUSTAINABILITY,
            "Sustainability",
            ("su1", "Grazing rotation plan documented"),
            ("su2", "Water usage monitoring in place"),
            ("su3", "Pasture condition assessments recorded"),
            ("su4", "Environmental impact measures documented"),
            ("su5", "Carbon footprint tracking initiated"),
        ),
    ),
)
