"""Conversation model: the agent-facing thread for one identity within one instance."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import relationship

from app.constants.conversations import ACTIVE_STATUSES, ConversationStatus
from app.db import Base
from app.models.mixins import TimestampMixin, utcnow
from app.models.types import UUIDType

_ACTIVE_FILTER = text(
    "status IN (" + ", ".join(f"'{s.value}'" for s in ACTIVE_STATUSES) + ")"
)


class Conversation(Base, TimestampMixin):
    """
    At most one pending/open conversation per (contact-or-group, instance).

    The two partial unique indexes below enforce it; resolved rows are ignored
    by the indexes so history accumulates.
    """

    __tablename__ = "conversations"

    __table_args__ = (
        CheckConstraint(
            "(contact_id IS NULL) <> (group_id IS NULL)",
            name="ck_conversations_contact_xor_group",
        ),
        CheckConstraint("unread_count >= 0", name="ck_conversations_unread_count"),
        Index(
            "uq_conversations_active_contact_instance",
            "contact_id",
            "instance_id",
            unique=True,
            postgresql_where=_ACTIVE_FILTER,
            sqlite_where=_ACTIVE_FILTER,
        ),
        Index(
            "uq_conversations_active_group_instance",
            "group_id",
            "instance_id",
            unique=True,
            postgresql_where=_ACTIVE_FILTER,
            sqlite_where=_ACTIVE_FILTER,
        ),
    )

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    contact_id = Column(
        UUIDType, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=True
    )
    group_id = Column(
        UUIDType, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True
    )
    instance_id = Column(
        UUIDType, ForeignKey("instances.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(UUIDType, nullable=True)
    status = Column(
        String(16), nullable=False, default=ConversationStatus.PENDING.value
    )
    unread_count = Column(Integer, nullable=False, default=0)
    message_count = Column(Integer, nullable=False, default=0)
    queue_id = Column(UUIDType, nullable=True)
    last_message_at = Column(DateTime, nullable=False, default=utcnow)

    contact = relationship("Contact")
    group = relationship("Group")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )
