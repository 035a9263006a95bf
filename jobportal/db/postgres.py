"""
Relational store handle.

One Database object is built at process start (see main.lifespan), kept on
app.state and disposed at shutdown. Route handlers get it through the
get_database dependency instead of touching module-level engine state.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from jobportal.core.config import Settings
from jobportal.db.schema import metadata

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Pooled engine plus a session factory."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        if engine.dialect.name == "sqlite":
            # ON DELETE CASCADE is off by default in SQLite
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        # pool_size=5: maintain 5 connections ready
        # max_overflow=10: allow 10 extra connections under load
        engine = create_engine(
            settings.sqlalchemy_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            echo=settings.debug  # Log SQL queries in debug mode
        )
        return cls(engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        One session == one transaction.
        Usage:
            with db.session() as s:
                s.execute(text("SELECT * FROM users"))
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def fetch_all(self, sql: str, params: Optional[dict] = None) -> list:
        """Execute raw SQL and return results as list of dicts."""
        with self.session() as s:
            result = s.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    def fetch_one(self, sql: str, params: Optional[dict] = None) -> Optional[dict]:
        rows = self.fetch_all(sql, params)
        return rows[0] if rows else None

    def ping(self) -> bool:
        """Return True if the store answers SELECT 1."""
        try:
            with self.session() as s:
                return s.execute(text("SELECT 1")).scalar() == 1
        except Exception:
            logger.exception("Database connection failed")
            return False

    def init_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        metadata.create_all(self.engine)
        logger.info("Database schema ensured (%d tables)", len(metadata.tables))

    def dispose(self) -> None:
        self.engine.dispose()


def get_database(request: Request) -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/users")
        def get_users(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.db
