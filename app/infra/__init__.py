"""Infrastructure layer - Database, persistence and configuration"""

from .db import DatabaseEngine, get_engine, init_db
from .local_storage import LocalStorage

__all__ = ["DatabaseEngine", "get_engine", "init_db", "LocalStorage"]
