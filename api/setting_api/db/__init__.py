"""Database access for the PTM BMUP Setting API."""

from .connection import DatabaseManager, get_database, get_db_pool
from .members import MemberRepository

__all__ = [
    "DatabaseManager",
    "get_database",
    "get_db_pool",
    "MemberRepository"
]
