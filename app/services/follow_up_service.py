"""Auto follow-up schedule maintenance."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.follow_up import ConversationFollowUp, FollowUpTemplate
from app.models.mixins import utcnow


class FollowUpService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_auto_follow_up(self, conversation_id: UUID) -> Optional[ConversationFollowUp]:
        return (
            self.db.query(ConversationFollowUp)
            .filter(
                ConversationFollowUp.conversation_id == conversation_id,
                ConversationFollowUp.auto_send.is_(True),
            )
            .first()
        )

    def first_delay_minutes(self, category_id: UUID) -> Optional[int]:
        return (
            self.db.query(func.min(FollowUpTemplate.time_minutes))
            .filter(FollowUpTemplate.category_id == category_id)
            .scalar()
        )

    def reset_for_inbound(self, conversation_id: UUID) -> Optional[ConversationFollowUp]:
        """
        Restart the follow-up sequence after the customer wrote in.

        Returns the reset follow-up, or None when the conversation has no
        auto-send follow-up or its category has no templates.
        """
        follow_up = self.get_auto_follow_up(conversation_id)
        if follow_up is None:
            return None
        minutes = self.first_delay_minutes(follow_up.category_id)
        if minutes is None:
            return None
        follow_up.current_template_index = 0
        follow_up.completed = False
        follow_up.next_send_at = utcnow() + timedelta(minutes=minutes)
        self.db.commit()
        self.db.refresh(follow_up)
        return follow_up
