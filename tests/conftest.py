import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db import Base, db_manager, enable_sqlite_savepoints
from app.infra.celery_app import celery_app

pytest_plugins = [
    "tests.fixtures.instance_fixtures",
    "tests.fixtures.conversation_fixtures",
    "tests.fixtures.storage_fixtures",
]


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    db_manager.bind(engine)
    celery_app.conf.task_always_eager = True
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
