"""Tests for uazapi webhook schemas."""

from app.schemas.uazapi import UazapiMessageContent, UazapiWebhookEvent


def test_event_type_prefers_event_type_field():
    event = UazapiWebhookEvent.model_validate(
        {"EventType": "messages", "event": "ignored", "type": "also-ignored"}
    )
    assert event.event_type == "messages"


def test_event_type_falls_back_to_event_then_type():
    assert UazapiWebhookEvent.model_validate({"event": "history"}).event_type == "history"
    assert UazapiWebhookEvent.model_validate({"type": "ack"}).event_type == "ack"
    assert UazapiWebhookEvent.model_validate({}).event_type == "unknown"


def test_acknowledged_ids_from_event_object():
    event = UazapiWebhookEvent.model_validate(
        {"EventType": "messages_update", "event": {"MessageIDs": ["A", "B"]}}
    )
    assert event.acknowledged_ids == ["A", "B"]


def test_acknowledged_ids_from_top_level():
    event = UazapiWebhookEvent.model_validate(
        {"EventType": "messages_update", "MessageIDs": ["C"]}
    )
    assert event.acknowledged_ids == ["C"]


def test_chat_and_message_blocks_fall_back_to_body():
    event = UazapiWebhookEvent.model_validate(
        {
            "EventType": "messages",
            "body": {
                "chat": {"wa_chatid": "123@s.whatsapp.net"},
                "message": {"text": "nested"},
            },
        }
    )
    assert event.chat_block.wa_chatid == "123@s.whatsapp.net"
    assert event.message_block.text == "nested"


def test_missing_blocks_are_empty():
    event = UazapiWebhookEvent.model_validate({"EventType": "messages"})
    assert event.chat_block.wa_chatid is None
    assert event.message_block.messageid is None
    assert event.is_group is False


def test_is_group_from_message_or_chat():
    assert UazapiWebhookEvent.model_validate(
        {"message": {"isGroup": True}}
    ).is_group is True
    assert UazapiWebhookEvent.model_validate(
        {"chat": {"wa_isGroup": True}}
    ).is_group is True


def test_structured_content_with_context_info():
    event = UazapiWebhookEvent.model_validate(
        {
            "message": {
                "content": {
                    "text": "reply",
                    "contextInfo": {
                        "stanzaID": "ORIG1",
                        "participant": "123@lid",
                        "quotedMessage": {"conversation": "original"},
                    },
                }
            }
        }
    )
    content = event.message_block.content
    assert isinstance(content, UazapiMessageContent)
    assert content.context_info.stanza_id == "ORIG1"
    assert content.context_info.quoted_message.conversation == "original"


def test_string_content_and_null_from_me():
    event = UazapiWebhookEvent.model_validate(
        {"message": {"content": "plain", "fromMe": None, "messageid": 12345}}
    )
    assert event.message_block.content == "plain"
    assert not event.message_block.from_me
    assert event.message_block.messageid == "12345"
