"""Auto follow-up schedule rows. Owned by the follow-up scheduler; reset on inbound messages."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer

from app.db import Base
from app.models.mixins import TimestampMixin
from app.models.types import UUIDType


class ConversationFollowUp(Base, TimestampMixin):
    __tablename__ = "conversation_follow_ups"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        UUIDType,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    category_id = Column(UUIDType, nullable=False, index=True)
    auto_send = Column(Boolean, nullable=False, default=False)
    current_template_index = Column(Integer, nullable=False, default=0)
    next_send_at = Column(DateTime, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)


class FollowUpTemplate(Base, TimestampMixin):
    """One step of a follow-up category; ``time_minutes`` is the delay before it fires."""

    __tablename__ = "follow_up_templates"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    category_id = Column(UUIDType, nullable=False, index=True)
    time_minutes = Column(Integer, nullable=False)
