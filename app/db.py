"""
Database engine, session factory and FastAPI dependency.

Request handlers get a session through ``get_db``; tests rebind the manager to
their own engine with ``db_manager.bind``.
"""

from __future__ import annotations

from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings, get_settings

Base = declarative_base()


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite honour SAVEPOINT by emitting BEGIN ourselves."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _engine_kwargs(settings: Settings) -> dict[str, Any]:
    url = settings.database_url_obj
    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "connect_args": {
            "application_name": settings.app_name,
            "options": f"-c statement_timeout={settings.database_statement_timeout_ms}",
        },
    }


class DatabaseManager:
    """Lazily builds the engine so settings are read at first use, not import."""

    def __init__(self) -> None:
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            settings = get_settings()
            self._engine = create_engine(
                settings.database_url, **_engine_kwargs(settings)
            )
            if self._engine.dialect.name == "sqlite":
                enable_sqlite_savepoints(self._engine)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autocommit=False, autoflush=False
            )
        return self._session_factory

    def bind(self, engine: Engine) -> None:
        """Point the manager at an existing engine (used by tests)."""
        self._engine = engine
        self._session_factory = None


db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = db_manager.session_factory()
    try:
        yield db
    finally:
        db.close()
