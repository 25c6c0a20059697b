# app/main.py
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv, find_dotenv
from fastapi import FastAPI

# ---------------------------
# Env loading (root .env first, then app/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("app")

# --- DB engine (must be imported BEFORE create_all) ---
from app.db.session import engine  # noqa: E402

# ---------------------------
# MODELS (registers every table on the shared Base)
# ---------------------------
from app.models import Base  # noqa: E402

# ---------------------------
# ROUTERS / ERRORS / MIDDLEWARE
# ---------------------------
from app.api import health  # noqa: E402
from app.api.v1 import compliance  # noqa: E402
from app.core.errors import register_exception_handlers  # noqa: E402
from app.middleware.request_logging import RequestLoggingMiddleware  # noqa: E402
from app.worker.scheduler import make_scheduler  # noqa: E402

# ---------------------------
# CREATE TABLES (dev-only; guard with env, use Alembic elsewhere)
# ---------------------------
ENABLE_CREATE_ALL = os.getenv("ENABLE_CREATE_ALL", "1") == "1"

if ENABLE_CREATE_ALL:
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(
    title="Farm Compliance",
    version="1.0.0",
    description="Monthly checklist compliance and audit readiness for farm operations.",
)

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

app.include_router(compliance.router, prefix="/api/v1", tags=["compliance"])
app.include_router(health.router, prefix="/api", tags=["health"])


# ---------------------------
# Scheduler (monthly rollover) – optional
# ---------------------------
@app.on_event("startup")
def _start_scheduler():
    # Enable with ENABLE_SCHEDULER=1. Reads roll over lazily without it.
    app.state.scheduler = None
    if os.getenv("ENABLE_SCHEDULER", "0") != "1":
        return
    try:
        app.state.scheduler = make_scheduler()
        app.state.scheduler.start()
    except Exception:
        # keep the API running if the scheduler cannot start
        log.exception("scheduler failed to start; continuing with lazy rollover only")
        app.state.scheduler = None


@app.on_event("shutdown")
def _stop_scheduler():
    sched = getattr(app.state, "scheduler", None)
    if sched:
        sched.shutdown(wait=False)
