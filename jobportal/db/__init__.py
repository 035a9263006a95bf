"""
Database module - relational store handle and table definitions.
"""
from jobportal.db.postgres import Database, get_database
from jobportal.db.schema import metadata

__all__ = [
    "Database",
    "get_database",
    "metadata",
]
