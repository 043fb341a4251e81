"""Message vocabulary: types, directions, delivery statuses, provider token mapping."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    STICKER = "sticker"
    REACTION = "reaction"


class MessageDirection(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MessageStatus(StrEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


# Types whose bytes are fetched from the provider and copied to blob storage
MEDIA_MESSAGE_TYPES = frozenset(
    {MessageType.IMAGE, MessageType.AUDIO, MessageType.VIDEO, MessageType.DOCUMENT}
)

# Provider token (lowercased) -> internal type. Internal names map to themselves.
PROVIDER_MESSAGE_TYPES: dict[str, MessageType] = {
    "conversation": MessageType.TEXT,
    "extendedtextmessage": MessageType.TEXT,
    "imagemessage": MessageType.IMAGE,
    "audiomessage": MessageType.AUDIO,
    "ptt": MessageType.AUDIO,
    "videomessage": MessageType.VIDEO,
    "documentmessage": MessageType.DOCUMENT,
    "stickermessage": MessageType.STICKER,
    "reactionmessage": MessageType.REACTION,
    **{t.value: t for t in MessageType},
}

# Provider acknowledgement state -> delivery status
ACK_STATES: dict[str, MessageStatus] = {
    "Read": MessageStatus.READ,
    "Delivered": MessageStatus.DELIVERED,
}


def normalize_message_type(token: Optional[str]) -> MessageType:
    """Map a provider message-type token to the internal enum; unknown tokens are text."""
    if not token:
        return MessageType.TEXT
    return PROVIDER_MESSAGE_TYPES.get(str(token).strip().lower(), MessageType.TEXT)


def status_for_ack_state(state: Optional[str]) -> MessageStatus:
    """Read -> read, Delivered -> delivered, anything else -> sent."""
    return ACK_STATES.get(state or "", MessageStatus.SENT)
