# app/db/base.py
from sqlalchemy.orm import declarative_base

# Single metadata for every model so create_all / Alembic see all tables
Base = declarative_base()
