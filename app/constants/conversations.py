"""Conversation lifecycle states."""

from enum import StrEnum


class ConversationStatus(StrEnum):
    PENDING = "pending"
    OPEN = "open"
    RESOLVED = "resolved"


# Statuses that count as "the" active conversation for an identity
ACTIVE_STATUSES = (ConversationStatus.PENDING, ConversationStatus.OPEN)
