# app/api/health.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.catalog import DEFAULT_CATALOG

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict:
    # Liveness: always 200 while the process is up
    return {
        "ok": True,
        "service": "farm_compliance",
        "status": "healthy",
        "catalog_version": DEFAULT_CATALOG.version,
        "ts": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
def readyz(db: Session = Depends(get_db)):
    # Readiness: compliance tables reachable + latency
    t0 = time.perf_counter()
    try:
        db.execute(text("SELECT 1 FROM compliance_months LIMIT 1"))
        latency_ms = (time.perf_counter() - t0) * 1000.0
        return JSONResponse(
            status_code=200,
            content={"ok": True, "db": "up", "db_latency_ms": round(latency_ms, 2)},
            headers={"Cache-Control": "no-store"},
        )
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "db": "down", "error": str(e)},
            headers={"Cache-Control": "no-store"},
        )
