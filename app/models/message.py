"""Message model: one provider message. Only ``status`` changes after insert."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.constants.messages import MessageStatus
from app.db import Base
from app.models.mixins import utcnow
from app.models.types import UUIDType


class Message(Base):
    """Recorded once by the message recorder; status updated by acknowledgements."""

    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_conversation_id_created_at", "conversation_id", "created_at"),
    )

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        UUIDType,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    body = Column(Text, nullable=True)
    direction = Column(String(16), nullable=False)  # 'inbound' | 'outbound'
    message_type = Column(String(32), nullable=False)
    external_id = Column(String(255), nullable=True, index=True)  # provider message id
    sender_name = Column(String(255), nullable=True)
    sender_jid = Column(String(255), nullable=True)
    sender_profile_pic_url = Column(Text, nullable=True)
    media_url = Column(Text, nullable=True)
    reply_to_id = Column(String(255), nullable=True)
    quoted_body = Column(Text, nullable=True)
    quoted_sender = Column(String(32), nullable=True)
    status = Column(String(16), nullable=False, default=MessageStatus.SENT.value)
    user_id = Column(UUIDType, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
