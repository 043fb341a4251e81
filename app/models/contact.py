"""Contact model: a 1:1 chat participant."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.mixins import TimestampMixin
from app.models.types import UUIDType


class Contact(Base, TimestampMixin):
    """Created on the first inbound event from an unseen chat identifier."""

    __tablename__ = "contacts"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    number = Column(String(255), unique=True, nullable=False, index=True)
    push_name = Column(String(255), nullable=True)
    profile_pic_url = Column(Text, nullable=True)
    instance_id = Column(
        UUIDType, ForeignKey("instances.id", ondelete="SET NULL"), nullable=True
    )
    user_id = Column(UUIDType, nullable=True)

    instance = relationship("Instance")
