from app.db.base import Base  # noqa: F401

from . import checklist  # noqa: F401
from . import document   # noqa: F401
