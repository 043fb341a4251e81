"""Tests for ConversationTracker."""

import uuid

from sqlalchemy.orm import Session

from app.constants.conversations import ConversationStatus
from app.core.identity import ContactIdentity, GroupIdentity
from app.models.contact import Contact
from app.models.conversation import Conversation
from app.services.conversation_tracker import ConversationTracker


def _contact_identity(contact):
    return ContactIdentity(
        contact=contact, sender_name=contact.push_name, sender_jid=contact.number
    )


def test_track_opens_pending_conversation(db: Session, setup_instance, setup_contact):
    tracker = ConversationTracker(db)
    conversation = tracker.track(_contact_identity(setup_contact), setup_instance)

    assert conversation.status == ConversationStatus.PENDING
    assert conversation.unread_count == 1
    assert conversation.message_count == 0
    assert conversation.contact_id == setup_contact.id
    assert conversation.group_id is None
    assert conversation.queue_id == setup_instance.default_queue_id
    assert conversation.user_id == setup_instance.user_id
    assert conversation.last_message_at is not None


def test_track_without_default_queue_leaves_queue_empty(db: Session, setup_instance_without_queue):
    contact = Contact(
        number="5511777770000@s.whatsapp.net",
        push_name="Carla",
        instance_id=setup_instance_without_queue.id,
        user_id=setup_instance_without_queue.user_id,
    )
    db.add(contact)
    db.commit()

    conversation = ConversationTracker(db).track(
        _contact_identity(contact), setup_instance_without_queue
    )

    assert conversation.status == ConversationStatus.PENDING
    assert conversation.queue_id is None
    assert conversation.user_id == setup_instance_without_queue.user_id


def test_track_increments_existing(db: Session, setup_instance, setup_contact):
    tracker = ConversationTracker(db)
    identity = _contact_identity(setup_contact)
    first = tracker.track(identity, setup_instance)
    second = tracker.track(identity, setup_instance)

    assert second.id == first.id
    assert second.unread_count == 2
    assert db.query(Conversation).count() == 1


def test_find_active(db: Session, setup_instance, setup_contact, setup_conversation):
    tracker = ConversationTracker(db)
    found = tracker.find_active(_contact_identity(setup_contact), setup_instance.id)
    assert found.id == setup_conversation.id


def test_find_active_ignores_resolved(db: Session, setup_instance, setup_contact, setup_conversation):
    tracker = ConversationTracker(db)
    tracker.resolve(setup_conversation.id)
    assert tracker.find_active(_contact_identity(setup_contact), setup_instance.id) is None


def test_resolved_conversation_is_not_reopened(
    db: Session, setup_instance, setup_contact, setup_conversation
):
    tracker = ConversationTracker(db)
    resolved = tracker.resolve(setup_conversation.id)
    assert resolved.status == ConversationStatus.RESOLVED

    conversation = tracker.track(_contact_identity(setup_contact), setup_instance)

    assert conversation.id != setup_conversation.id
    assert conversation.unread_count == 1
    db.refresh(setup_conversation)
    assert setup_conversation.status == ConversationStatus.RESOLVED
    assert db.query(Conversation).count() == 2


def test_resolve_unknown_conversation(db: Session):
    assert ConversationTracker(db).resolve(uuid.uuid4()) is None


def test_track_group_identity(db: Session, setup_instance, setup_group):
    identity = GroupIdentity(
        group=setup_group, member=None, sender_name="Bob", sender_jid=None
    )
    conversation = ConversationTracker(db).track(identity, setup_instance)

    assert conversation.group_id == setup_group.id
    assert conversation.contact_id is None


def test_lost_create_race_falls_back_to_increment(
    db: Session, setup_instance, setup_contact, setup_conversation
):
    """A concurrent request already opened the conversation; the partial unique index rejects ours."""
    tracker = ConversationTracker(db)
    real_find_active = tracker.find_active
    calls = {"n": 0}

    def racing_find_active(identity, instance_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find_active(identity, instance_id)

    tracker.find_active = racing_find_active
    conversation = tracker.track(_contact_identity(setup_contact), setup_instance)

    assert conversation.id == setup_conversation.id
    assert conversation.unread_count == 2
    assert db.query(Conversation).count() == 1
