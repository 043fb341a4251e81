"""
Conversation tracking: find or open the active conversation for an identity.

At most one pending/open conversation exists per (contact-or-group, instance);
the partial unique indexes on ``conversations`` back this up when two
deliveries race to create it.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants.conversations import ACTIVE_STATUSES, ConversationStatus
from app.core.identity import ChatIdentity, ContactIdentity
from app.models.conversation import Conversation
from app.models.instance import Instance
from app.models.mixins import utcnow

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = [s.value for s in ACTIVE_STATUSES]

# find -> increment, else create -> on conflict re-select and increment
MAX_TRACK_ATTEMPTS = 3


class ConversationTrackingError(Exception):
    """No active conversation could be found or created."""


def _owner_filter(identity: ChatIdentity):
    if isinstance(identity, ContactIdentity):
        return Conversation.contact_id == identity.contact.id
    return Conversation.group_id == identity.group.id


class ConversationTracker:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_active(
        self, identity: ChatIdentity, instance_id: UUID
    ) -> Optional[Conversation]:
        """Most recent pending/open conversation for the identity on this instance."""
        return (
            self.db.query(Conversation)
            .filter(
                _owner_filter(identity),
                Conversation.instance_id == instance_id,
                Conversation.status.in_(_ACTIVE_VALUES),
            )
            .order_by(Conversation.created_at.desc())
            .first()
        )

    def track(self, identity: ChatIdentity, instance: Instance) -> Conversation:
        """
        Count one more message on the active conversation, opening one if needed.

        Raises:
            ConversationTrackingError: every attempt lost a race.
        """
        for _ in range(MAX_TRACK_ATTEMPTS):
            conversation = self.find_active(identity, instance.id)
            if conversation is not None:
                if self._increment_unread(conversation.id):
                    self.db.commit()
                    self.db.refresh(conversation)
                    return conversation
                # Resolved between the read and the update
                self.db.rollback()
                continue

            conversation = self._create(identity, instance)
            if conversation is not None:
                self.db.commit()
                self.db.refresh(conversation)
                logger.info(
                    "Opened conversation %s on instance %s",
                    conversation.id,
                    instance.instance_name,
                )
                return conversation

        raise ConversationTrackingError(
            f"Could not track conversation on instance {instance.instance_name}"
        )

    def resolve(self, conversation_id: UUID) -> Optional[Conversation]:
        """Close a conversation. The next inbound message opens a new one."""
        conversation = (
            self.db.query(Conversation).filter(Conversation.id == conversation_id).first()
        )
        if conversation is None:
            return None
        conversation.status = ConversationStatus.RESOLVED.value
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def _increment_unread(self, conversation_id: UUID) -> bool:
        now = utcnow()
        updated = (
            self.db.query(Conversation)
            .filter(
                Conversation.id == conversation_id,
                Conversation.status.in_(_ACTIVE_VALUES),
            )
            .update(
                {
                    Conversation.unread_count: Conversation.unread_count + 1,
                    Conversation.last_message_at: now,
                    Conversation.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    def _create(
        self, identity: ChatIdentity, instance: Instance
    ) -> Optional[Conversation]:
        is_contact = isinstance(identity, ContactIdentity)
        conversation = Conversation(
            contact_id=identity.contact.id if is_contact else None,
            group_id=None if is_contact else identity.group.id,
            instance_id=instance.id,
            user_id=instance.user_id,
            status=ConversationStatus.PENDING.value,
            unread_count=1,
            message_count=0,
            queue_id=instance.default_queue_id,
            last_message_at=utcnow(),
        )
        try:
            with self.db.begin_nested():
                self.db.add(conversation)
                self.db.flush()
        except IntegrityError:
            logger.info("Conversation created concurrently; re-selecting")
            return None
        return conversation
