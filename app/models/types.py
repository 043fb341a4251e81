"""Column types that map to PostgreSQL natives and still work on SQLite (tests)."""

from sqlalchemy import Uuid

UUIDType = Uuid(as_uuid=True)
