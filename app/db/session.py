# app/db/session.py
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

# SQLite file DB by default (relative ./farm_compliance.db)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./farm_compliance.db")


def make_engine(url: str = DATABASE_URL):
    is_sqlite = url.startswith("sqlite")
    eng = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},  # SQLite + threads
        pool_pre_ping=True,  # safer reconnects
        future=True,
    )

    if is_sqlite:
        # Enforce foreign keys in SQLite
        @event.listens_for(eng, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return eng


engine = make_engine()

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    future=True,
)


def get_db():
    """Yield a DB session and make sure it's closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
