"""
Message recording: normalize a provider message and persist it.

The insert and the conversation's ``message_count`` increment share one
transaction; the new count is read back and handed to the automation
dispatcher.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.constants.messages import (
    MEDIA_MESSAGE_TYPES,
    MessageDirection,
    MessageStatus,
    MessageType,
    normalize_message_type,
)
from app.core.identity import ChatIdentity
from app.models.conversation import Conversation
from app.models.message import Message
from app.schemas.uazapi import UazapiMessageContent, UazapiWebhookEvent
from app.services.media_transfer_service import MediaTransferService

logger = logging.getLogger(__name__)

AGENT_PARTICIPANT_MARKER = "@lid"
QUOTED_SENDER_AGENT = "agent"
QUOTED_SENDER_CUSTOMER = "customer"


class MessagePersistenceError(Exception):
    """The message row could not be written."""


@dataclass
class RecordedMessage:
    message: Message
    message_count: int


@dataclass
class QuoteContext:
    reply_to_id: Optional[str] = None
    quoted_body: Optional[str] = None
    quoted_sender: Optional[str] = None


def _structured_content(event: UazapiWebhookEvent) -> Optional[UazapiMessageContent]:
    content = event.message_block.content
    return content if isinstance(content, UazapiMessageContent) else None


def extract_body(event: UazapiWebhookEvent) -> Optional[str]:
    message = event.message_block
    content = message.content
    candidates = [
        message.text,
        content if isinstance(content, str) else None,
        content.text if isinstance(content, UazapiMessageContent) else None,
    ]
    if event.body is not None and event.body.message is not None:
        candidates.append(event.body.message.text)
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate
    return None


def extract_external_id(event: UazapiWebhookEvent) -> Optional[str]:
    message = event.message_block
    key_id = event.body.key.id if event.body is not None and event.body.key else None
    return message.messageid or message.id or key_id or None


def extract_quote(event: UazapiWebhookEvent) -> QuoteContext:
    content = _structured_content(event)
    context = content.context_info if content is not None else None
    if context is None:
        return QuoteContext()

    reply_to_id = context.stanza_id or event.message_block.quoted
    quoted_body = None
    if context.quoted_message is not None:
        quoted_body = context.quoted_message.conversation
        extended = context.quoted_message.extended_text_message
        if not quoted_body and isinstance(extended, dict):
            quoted_body = extended.get("text")

    if not reply_to_id and not quoted_body:
        return QuoteContext()

    participant = context.participant
    quoted_sender = None
    if participant:
        quoted_sender = (
            QUOTED_SENDER_AGENT
            if AGENT_PARTICIPANT_MARKER in participant
            else QUOTED_SENDER_CUSTOMER
        )
    return QuoteContext(
        reply_to_id=reply_to_id,
        quoted_body=quoted_body,
        quoted_sender=quoted_sender,
    )


def extract_document_meta(event: UazapiWebhookEvent) -> tuple[Optional[str], Optional[str]]:
    """(mimetype, file name) a document message carries, if any."""
    message = event.message_block
    content = _structured_content(event)
    documents = [message.document_message]
    if content is not None:
        documents.insert(0, content.document_message)
    for document in documents:
        if document is not None and (document.mimetype or document.file_name):
            return document.mimetype, document.file_name
    if content is not None:
        return content.mimetype, content.file_name
    return None, None


class MessageRecorder:
    def __init__(
        self, db: Session, media_service: Optional[MediaTransferService] = None
    ) -> None:
        self.db = db
        self.media_service = media_service

    def record(
        self,
        event: UazapiWebhookEvent,
        identity: ChatIdentity,
        conversation: Conversation,
    ) -> RecordedMessage:
        """
        Persist one message for the conversation.

        Raises:
            MessagePersistenceError: the insert (or counter update) failed;
                the transaction is rolled back.
        """
        message_block = event.message_block
        message_type = normalize_message_type(message_block.message_type)
        external_id = extract_external_id(event)
        direction = (
            MessageDirection.OUTBOUND if message_block.from_me else MessageDirection.INBOUND
        )
        quote = extract_quote(event)
        conversation_id = conversation.id
        media_url = self._transfer_media(event, message_type, external_id, conversation_id)

        message = Message(
            conversation_id=conversation_id,
            body=extract_body(event),
            direction=direction.value,
            message_type=message_type.value,
            external_id=external_id,
            sender_name=identity.sender_name,
            sender_jid=identity.sender_jid,
            sender_profile_pic_url=identity.photo_url,
            media_url=media_url,
            reply_to_id=quote.reply_to_id,
            quoted_body=quote.quoted_body,
            quoted_sender=quote.quoted_sender,
            status=MessageStatus.SENT.value,
            user_id=conversation.user_id,
        )
        try:
            self.db.add(message)
            self.db.flush()
            self.db.query(Conversation).filter(
                Conversation.id == conversation_id
            ).update(
                {Conversation.message_count: Conversation.message_count + 1},
                synchronize_session=False,
            )
            message_count = (
                self.db.query(Conversation.message_count)
                .filter(Conversation.id == conversation_id)
                .scalar()
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(
                "Failed to record message %s in conversation %s",
                external_id,
                conversation_id,
            )
            raise MessagePersistenceError(f"Failed to record message: {e}") from e

        self.db.refresh(message)
        logger.info(
            "Recorded %s %s message %s in conversation %s (count=%s)",
            direction.value,
            message_type.value,
            message.id,
            conversation_id,
            message_count,
        )
        return RecordedMessage(message=message, message_count=message_count or 0)

    def _transfer_media(
        self,
        event: UazapiWebhookEvent,
        message_type: MessageType,
        external_id: Optional[str],
        conversation_id,
    ) -> Optional[str]:
        if self.media_service is None or message_type not in MEDIA_MESSAGE_TYPES:
            return None
        if not external_id:
            logger.warning("Media message without external id; storing without media")
            return None
        mimetype, file_name = extract_document_meta(event)
        return self.media_service.transfer(
            message_type, external_id, conversation_id, mimetype, file_name
        )
