"""Database package."""
from church_attendance.db.session import Database, init_database, close_database, get_db
from church_attendance.db.base import Base

__all__ = ["Database", "init_database", "close_database", "get_db", "Base"]
