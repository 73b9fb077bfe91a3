"""
Database module - engine, sessions and table definitions.
"""
from jobmarket.db.database import Database, degrade_on_store_unavailable
from jobmarket.db.schema import metadata

__all__ = [
    "Database",
    "degrade_on_store_unavailable",
    "metadata",
]
