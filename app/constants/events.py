"""Provider webhook event vocabulary."""

from enum import StrEnum


class EventKind(StrEnum):
    """How the router treats an incoming event."""

    MESSAGE = "message"
    ACKNOWLEDGEMENT = "acknowledgement"
    IGNORED = "ignored"


MESSAGE_EVENT_TYPE = "messages"
ACK_EVENT_TYPES = frozenset({"messages_update", "message_update", "update", "ack"})
READ_RECEIPT_SUBTYPE = "ReadReceipt"


def classify_event_type(event_type: str | None) -> EventKind:
    if event_type == MESSAGE_EVENT_TYPE:
        return EventKind.MESSAGE
    if event_type in ACK_EVENT_TYPES:
        return EventKind.ACKNOWLEDGEMENT
    return EventKind.IGNORED
