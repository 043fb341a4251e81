"""
uazapi webhook payload schemas.

Matches the loosely-typed JSON the provider POSTs to the webhook endpoint.
Every field is optional: the same envelope carries message events,
acknowledgements and housekeeping events, and the provider moves fields
between ``chat``, ``message`` and ``body`` depending on the version.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

_MODEL_CONFIG = ConfigDict(
    populate_by_name=True, extra="allow", coerce_numbers_to_str=True
)


class UazapiChat(BaseModel):
    """Chat block (``chat`` or ``body.chat``)."""

    wa_chatid: Optional[str] = None
    wa_is_group: Optional[bool] = Field(None, alias="wa_isGroup")
    name: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None
    image_preview: Optional[str] = Field(None, alias="imagePreview")

    model_config = _MODEL_CONFIG


class UazapiQuotedMessage(BaseModel):
    conversation: Optional[str] = None
    extended_text_message: Optional[dict[str, Any]] = Field(
        None, alias="extendedTextMessage"
    )

    model_config = _MODEL_CONFIG


class UazapiContextInfo(BaseModel):
    """Reply/quote context (``message.content.contextInfo``)."""

    stanza_id: Optional[str] = Field(None, alias="stanzaID")
    participant: Optional[str] = None
    quoted_message: Optional[UazapiQuotedMessage] = Field(None, alias="quotedMessage")

    model_config = _MODEL_CONFIG


class UazapiDocument(BaseModel):
    mimetype: Optional[str] = None
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = _MODEL_CONFIG


class UazapiMessageContent(BaseModel):
    """Structured ``message.content`` (media and extended text messages)."""

    text: Optional[str] = None
    context_info: Optional[UazapiContextInfo] = Field(None, alias="contextInfo")
    document_message: Optional[UazapiDocument] = Field(None, alias="documentMessage")
    mimetype: Optional[str] = None
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = _MODEL_CONFIG


class UazapiMessage(BaseModel):
    """Message block (``message``)."""

    id: Optional[str] = None
    messageid: Optional[str] = None
    chatid: Optional[str] = None
    from_me: Optional[bool] = Field(False, alias="fromMe")
    is_group: Optional[bool] = Field(None, alias="isGroup")
    message_type: Optional[str] = Field(None, alias="messageType")
    text: Optional[str] = None
    content: Optional[Union[UazapiMessageContent, str]] = None
    quoted: Optional[str] = None
    sender: Optional[str] = None
    sender_pn: Optional[str] = None
    sender_name: Optional[str] = Field(None, alias="senderName")
    group_name: Optional[str] = Field(None, alias="groupName")
    document_message: Optional[UazapiDocument] = Field(None, alias="documentMessage")

    model_config = _MODEL_CONFIG


class UazapiKey(BaseModel):
    id: Optional[str] = None
    remote_jid: Optional[str] = Field(None, alias="remoteJid")

    model_config = _MODEL_CONFIG


class UazapiBody(BaseModel):
    """Legacy nested envelope (``body``) some provider versions still send."""

    chat: Optional[UazapiChat] = None
    message: Optional[UazapiMessage] = None
    key: Optional[UazapiKey] = None

    model_config = _MODEL_CONFIG


class UazapiAckDetails(BaseModel):
    message_ids: list[str] = Field(default_factory=list, alias="MessageIDs")

    model_config = _MODEL_CONFIG


class UazapiWebhookEvent(BaseModel):
    """Webhook payload (root object)."""

    event_type_field: Optional[str] = Field(None, alias="EventType")
    event: Optional[Union[UazapiAckDetails, str]] = None
    type: Optional[str] = None
    state: Optional[str] = None
    message_ids: Optional[list[str]] = Field(None, alias="MessageIDs")
    instance_name: Optional[str] = Field(None, alias="instanceName")
    chat: Optional[UazapiChat] = None
    message: Optional[UazapiMessage] = None
    body: Optional[UazapiBody] = None

    model_config = _MODEL_CONFIG

    @property
    def event_type(self) -> str:
        """EventType, falling back to a string ``event`` then ``type``."""
        if self.event_type_field:
            return self.event_type_field
        if isinstance(self.event, str) and self.event:
            return self.event
        return self.type or "unknown"

    @property
    def acknowledged_ids(self) -> list[str]:
        """External message ids carried by an acknowledgement event."""
        if isinstance(self.event, UazapiAckDetails) and self.event.message_ids:
            return list(self.event.message_ids)
        return list(self.message_ids or [])

    @property
    def chat_block(self) -> UazapiChat:
        """Top-level ``chat`` wins over ``body.chat``; empty block when neither is sent."""
        if self.chat is not None:
            return self.chat
        if self.body is not None and self.body.chat is not None:
            return self.body.chat
        return UazapiChat()

    @property
    def message_block(self) -> UazapiMessage:
        if self.message is not None:
            return self.message
        if self.body is not None and self.body.message is not None:
            return self.body.message
        return UazapiMessage()

    @property
    def is_group(self) -> bool:
        if self.message_block.is_group is not None:
            return bool(self.message_block.is_group)
        return bool(self.chat_block.wa_is_group)
