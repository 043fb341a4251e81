"""Tests for IdentityResolver."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.orm import Session

from app.core.identity import ContactIdentity, GroupIdentity
from app.models.contact import Contact
from app.models.group import Group, GroupMember
from app.schemas.uazapi import UazapiWebhookEvent
from app.services.identity_resolver import (
    DEFAULT_CONTACT_NAME,
    DEFAULT_GROUP_NAME,
    DEFAULT_MEMBER_NAME,
    IdentityResolutionError,
    IdentityResolver,
)
from tests.fixtures.uazapi_payloads import group_message_event, text_message_event


def _event(payload):
    return UazapiWebhookEvent.model_validate(payload)


def test_resolve_creates_contact(db: Session, setup_instance):
    resolver = IdentityResolver(db)
    identity = resolver.resolve(_event(text_message_event(chat_name="Alice")), setup_instance)

    assert isinstance(identity, ContactIdentity)
    assert identity.is_group is False
    contact = identity.contact
    assert contact.number == "5511999990000@s.whatsapp.net"
    assert contact.push_name == "Alice"
    assert contact.instance_id == setup_instance.id
    assert contact.user_id == setup_instance.user_id
    assert identity.sender_name == "Alice"
    assert identity.sender_jid == contact.number


def test_duplicate_delivery_creates_one_contact(db: Session, setup_instance):
    resolver = IdentityResolver(db)
    first = resolver.resolve(_event(text_message_event()), setup_instance)
    second = resolver.resolve(_event(text_message_event()), setup_instance)

    assert first.contact.id == second.contact.id
    assert db.query(Contact).count() == 1


def test_concurrent_create_reselects_winner(db: Session, setup_instance, setup_contact):
    """The initial lookup misses (another request is inserting); the unique index decides."""
    resolver = IdentityResolver(db)
    real_query = db.query
    calls = {"n": 0}

    def racing_query(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            miss = MagicMock()
            miss.filter_by.return_value.first.return_value = None
            return miss
        return real_query(*args, **kwargs)

    with patch.object(db, "query", side_effect=racing_query):
        row, created = resolver._get_or_create(
            Contact, {"number": setup_contact.number}, {"push_name": "Racer"}
        )

    assert created is False
    assert row.id == setup_contact.id
    assert db.query(Contact).count() == 1


def test_contact_name_fallbacks(db: Session, setup_instance):
    resolver = IdentityResolver(db)
    payload = text_message_event(chat_id="111@s.whatsapp.net", chat_name=None)
    payload["chat"]["phone"] = "+55 11 1111"
    identity = resolver.resolve(_event(payload), setup_instance)
    assert identity.contact.push_name == "+55 11 1111"

    payload = text_message_event(chat_id="222@s.whatsapp.net", chat_name=None)
    identity = resolver.resolve(_event(payload), setup_instance)
    assert identity.contact.push_name == DEFAULT_CONTACT_NAME


def test_chat_id_falls_back_to_message_chatid(db: Session, setup_instance):
    payload = text_message_event(chat_id="333@s.whatsapp.net")
    del payload["chat"]
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)
    assert identity.contact.number == "333@s.whatsapp.net"


def test_missing_chat_id_raises(db: Session, setup_instance):
    payload = text_message_event()
    del payload["chat"]
    del payload["message"]["chatid"]
    with pytest.raises(IdentityResolutionError):
        IdentityResolver(db).resolve(_event(payload), setup_instance)


def test_existing_contact_owner_is_backfilled(db: Session, setup_instance):
    contact = Contact(number="444@s.whatsapp.net", push_name="Old Name")
    db.add(contact)
    db.commit()

    identity = IdentityResolver(db).resolve(
        _event(text_message_event(chat_id="444@s.whatsapp.net", chat_name="New Name")),
        setup_instance,
    )
    assert identity.contact.id == contact.id
    assert identity.contact.instance_id == setup_instance.id
    assert identity.contact.user_id == setup_instance.user_id
    assert identity.contact.push_name == "New Name"
    assert identity.sender_name == "New Name"


def test_existing_contact_keeps_name_when_chat_name_missing(db: Session, setup_instance):
    contact = Contact(number="445@s.whatsapp.net", push_name="Kept Name")
    db.add(contact)
    db.commit()

    identity = IdentityResolver(db).resolve(
        _event(text_message_event(chat_id="445@s.whatsapp.net", chat_name=None)),
        setup_instance,
    )
    assert identity.contact.push_name == "Kept Name"


def test_outbound_message_uses_contact_name_not_agent_name(db: Session, setup_instance):
    payload = text_message_event(from_me=True, chat_name="Alice", senderName="Agent Ana")
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)

    assert identity.contact.push_name == "Alice"
    assert identity.sender_name == "Alice"
    assert identity.sender_jid == identity.contact.number


def test_contact_photo_prefers_full_image(db: Session, setup_instance):
    payload = text_message_event()
    payload["chat"]["image"] = "https://pps.whatsapp.net/full.jpg"
    payload["chat"]["imagePreview"] = "https://pps.whatsapp.net/preview.jpg"
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)
    assert identity.contact.profile_pic_url == "https://pps.whatsapp.net/full.jpg"

    payload = text_message_event(chat_id="446@s.whatsapp.net")
    payload["chat"]["imagePreview"] = "https://pps.whatsapp.net/preview.jpg"
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)
    assert identity.contact.profile_pic_url == "https://pps.whatsapp.net/preview.jpg"


def test_resolve_creates_group_and_member(db: Session, setup_instance):
    identity = IdentityResolver(db).resolve(_event(group_message_event()), setup_instance)

    assert isinstance(identity, GroupIdentity)
    assert identity.is_group is True
    assert identity.group.remote_jid == "120363000000000001@g.us"
    assert identity.group.group_name == "Team"
    assert identity.member.number == "5511888880000@s.whatsapp.net"
    assert identity.member.push_name == "Bob"
    assert identity.sender_name == "Bob"


def test_group_duplicate_delivery(db: Session, setup_instance):
    resolver = IdentityResolver(db)
    resolver.resolve(_event(group_message_event()), setup_instance)
    resolver.resolve(_event(group_message_event(message_id="GMSG2")), setup_instance)

    assert db.query(Group).count() == 1
    assert db.query(GroupMember).count() == 1


def test_group_defaults(db: Session, setup_instance):
    payload = group_message_event(group_name=None, sender_name=None)
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)
    assert identity.group.group_name == DEFAULT_GROUP_NAME
    assert identity.member.push_name == DEFAULT_MEMBER_NAME


def test_group_without_sender_has_no_member(db: Session, setup_instance):
    identity = IdentityResolver(db).resolve(
        _event(group_message_event(sender_pn=None)), setup_instance
    )
    assert identity.member is None
    assert db.query(GroupMember).count() == 0


def test_photo_sync_targets_contact(db: Session, setup_instance):
    photos = MagicMock()
    photos.sync.return_value = "https://storage.example.com/avatars/contacts/x.jpg"
    identity = IdentityResolver(db, photos).resolve(
        _event(text_message_event()), setup_instance
    )

    photos.sync.assert_called_once_with(identity.contact)
    assert identity.photo_url == "https://storage.example.com/avatars/contacts/x.jpg"


def test_photo_sync_targets_group_without_photo(db: Session, setup_instance):
    photos = MagicMock()
    identity = IdentityResolver(db, photos).resolve(
        _event(group_message_event()), setup_instance
    )
    photos.sync.assert_called_once_with(identity.group)


def test_photo_sync_targets_member_once_group_has_photo(db: Session, setup_instance):
    db.add(
        Group(
            remote_jid="120363000000000001@g.us",
            group_name="Team",
            group_pic_url="https://storage.example.com/avatars/groups/g.jpg",
        )
    )
    db.commit()
    photos = MagicMock()
    photos.sync.return_value = "https://storage.example.com/avatars/group_members/m.jpg"

    identity = IdentityResolver(db, photos).resolve(
        _event(group_message_event()), setup_instance
    )

    photos.sync.assert_called_once_with(identity.member)
    assert identity.photo_url.endswith("group_members/m.jpg")


def test_group_sender_name_uses_known_member_name(db: Session, setup_instance):
    resolver = IdentityResolver(db)
    resolver.resolve(_event(group_message_event(sender_name="Bob")), setup_instance)

    identity = resolver.resolve(
        _event(group_message_event(sender_name="Robert", message_id="GMSG2")),
        setup_instance,
    )
    assert identity.member.push_name == "Bob"
    assert identity.sender_name == "Bob"


def test_group_photo_prefers_full_image(db: Session, setup_instance):
    payload = group_message_event()
    payload["chat"]["image"] = "https://pps.whatsapp.net/group-full.jpg"
    payload["chat"]["imagePreview"] = "https://pps.whatsapp.net/group-preview.jpg"
    identity = IdentityResolver(db).resolve(_event(payload), setup_instance)
    assert identity.group.group_pic_url == "https://pps.whatsapp.net/group-full.jpg"
