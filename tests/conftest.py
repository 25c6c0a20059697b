import os
from datetime import datetime, timezone

# Keep app.main from touching a real DB file or starting the scheduler
os.environ.setdefault("ENABLE_CREATE_ALL", "0")
os.environ.setdefault("ENABLE_SCHEDULER", "0")
os.environ.setdefault("COMPLIANCE_TIMEZONE", "UTC")
os.environ.setdefault("HISTORY_MAX_MONTHS", "24")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base
from app.services.catalog import ChecklistCatalog, ChecklistCategory, ChecklistItem
from app.services.compliance import build_compliance_service


class Clock:
    """Settable clock; call it to get the current time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, year: int, month: int, day: int = 15) -> None:
        self.now = datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


class FakeDocuments:
    """Stand-in for the document vault: fixed counts per farm."""

    def __init__(self, counts=None, error: Exception | None = None):
        self.counts = counts or {}
        self.error = error
        self.calls = 0

    def count_by_category(self, farm_id):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.counts.get(farm_id, {}))


def small_catalog(version: str = "test.1") -> ChecklistCatalog:
    """5 items across 2 categories."""
    return ChecklistCatalog(
        version,
        (
            ChecklistCategory(
                "animal-welfare",
                "Animal Welfare",
                (
                    ChecklistItem("aw1", "animal-welfare", "Food and water"),
                    ChecklistItem("aw2", "animal-welfare", "Shelter"),
                    ChecklistItem("aw3", "animal-welfare", "Health monitoring"),
                ),
            ),
            ChecklistCategory(
                "biosecurity",
                "Biosecurity",
                (
                    ChecklistItem("bs1", "biosecurity", "Biosecurity plan"),
                    ChecklistItem("bs2", "biosecurity", "Visitor log"),
                ),
            ),
        ),
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def clock():
    return Clock(datetime(2026, 2, 10, 8, 30, tzinfo=timezone.utc))


@pytest.fixture
def documents():
    return FakeDocuments()


@pytest.fixture
def service(db, clock, documents):
    return build_compliance_service(
        db, catalog=small_catalog(), documents=documents, now=clock, tz="UTC"
    )
