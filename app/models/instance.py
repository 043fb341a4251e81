"""Instance model: one configured connection to a messaging-provider number."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String

from app.db import Base
from app.models.mixins import TimestampMixin
from app.models.types import UUIDType


class Instance(Base, TimestampMixin):
    """Provider connection, looked up by ``instance_name`` on every webhook."""

    __tablename__ = "instances"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    instance_name = Column(String(255), unique=True, nullable=False, index=True)
    apikey = Column(String(512), nullable=False)
    webhook_url = Column(String(1024), nullable=True)  # forwarding URL
    default_queue_id = Column(UUIDType, nullable=True)
    user_id = Column(UUIDType, nullable=True)  # owning workspace
