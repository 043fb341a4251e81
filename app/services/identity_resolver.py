"""
Identity resolution: provider chat context -> Contact or Group/GroupMember.

Creates are upsert-shaped: insert inside a SAVEPOINT and, when a concurrent
delivery of the same event wins the race, re-select its row.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.identity import ChatIdentity, ContactIdentity, GroupIdentity
from app.models.contact import Contact
from app.models.group import Group, GroupMember
from app.models.instance import Instance
from app.schemas.uazapi import UazapiWebhookEvent
from app.services.profile_photo_service import ProfilePhotoService

logger = logging.getLogger(__name__)

DEFAULT_CONTACT_NAME = "Unknown"
DEFAULT_GROUP_NAME = "Unknown Group"
DEFAULT_MEMBER_NAME = "Unknown Member"


class IdentityResolutionError(ValueError):
    """The event does not carry enough information to identify the chat."""


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _http_url(value: Optional[str]) -> Optional[str]:
    if value and value.startswith(("http://", "https://")):
        return value
    return None


class IdentityResolver:
    def __init__(
        self, db: Session, photo_service: Optional[ProfilePhotoService] = None
    ) -> None:
        self.db = db
        self.photo_service = photo_service

    def resolve(self, event: UazapiWebhookEvent, instance: Instance) -> ChatIdentity:
        """
        Resolve (creating on first sight) the entities behind an event.

        Raises:
            IdentityResolutionError: chat id (1:1) or group id (group) missing.
        """
        if event.is_group:
            identity = self._resolve_group(event, instance)
        else:
            identity = self._resolve_contact(event, instance)
        self.db.commit()
        self._sync_photo(identity)
        return identity

    def _chat_id(self, event: UazapiWebhookEvent) -> Optional[str]:
        return _first(event.chat_block.wa_chatid, event.message_block.chatid)

    def _resolve_contact(
        self, event: UazapiWebhookEvent, instance: Instance
    ) -> ContactIdentity:
        chat = event.chat_block
        message = event.message_block
        number = self._chat_id(event)
        if not number:
            raise IdentityResolutionError("Missing chat id for 1:1 message")

        name = _first(chat.name, chat.phone, message.sender_name) or DEFAULT_CONTACT_NAME
        contact, created = self._get_or_create(
            Contact,
            {"number": number},
            {
                "push_name": name,
                "profile_pic_url": _http_url(chat.image or chat.image_preview),
                "instance_id": instance.id,
                "user_id": instance.user_id,
            },
        )
        if created:
            logger.info("Created contact %s for %s", contact.id, number)
        else:
            self._backfill_owner(contact, instance)
            chat_name = _first(chat.name)
            if chat_name and chat_name != contact.push_name:
                contact.push_name = chat_name

        return ContactIdentity(
            contact=contact,
            sender_name=contact.push_name or name,
            sender_jid=number,
            photo_url=contact.profile_pic_url,
        )

    def _resolve_group(
        self, event: UazapiWebhookEvent, instance: Instance
    ) -> GroupIdentity:
        chat = event.chat_block
        message = event.message_block
        remote_jid = self._chat_id(event)
        if not remote_jid:
            raise IdentityResolutionError("Missing group id for group message")

        group, created = self._get_or_create(
            Group,
            {"remote_jid": remote_jid},
            {
                "group_name": _first(chat.name, message.group_name)
                or DEFAULT_GROUP_NAME,
                "group_pic_url": _http_url(chat.image or chat.image_preview),
                "instance_id": instance.id,
                "user_id": instance.user_id,
            },
        )
        if created:
            logger.info("Created group %s for %s", group.id, remote_jid)
        else:
            self._backfill_owner(group, instance)

        sender_jid = _first(message.sender_pn, message.sender)
        sender_name = _first(message.sender_name) or DEFAULT_MEMBER_NAME
        member = None
        if sender_jid:
            member, _ = self._get_or_create(
                GroupMember,
                {"group_id": group.id, "number": sender_jid},
                {"push_name": sender_name, "user_id": instance.user_id},
            )
        else:
            logger.info("Group message in %s without sender id", remote_jid)

        return GroupIdentity(
            group=group,
            member=member,
            sender_name=_first(member.push_name if member else None) or sender_name,
            sender_jid=sender_jid,
            photo_url=member.profile_pic_url if member else None,
        )

    def _get_or_create(
        self, model: type, lookup: dict[str, Any], defaults: dict[str, Any]
    ) -> tuple[Any, bool]:
        row = self.db.query(model).filter_by(**lookup).first()
        if row is not None:
            return row, False
        try:
            with self.db.begin_nested():
                row = model(**lookup, **defaults)
                self.db.add(row)
                self.db.flush()
        except IntegrityError:
            # Concurrent delivery inserted it first
            row = self.db.query(model).filter_by(**lookup).first()
            if row is None:
                raise
            return row, False
        return row, True

    def _backfill_owner(self, row: Any, instance: Instance) -> None:
        if row.instance_id is None:
            row.instance_id = instance.id
        if row.user_id is None:
            row.user_id = instance.user_id

    def _sync_photo(self, identity: ChatIdentity) -> None:
        if self.photo_service is None:
            return
        if isinstance(identity, ContactIdentity):
            identity.photo_url = self.photo_service.sync(identity.contact)
        elif identity.group.group_pic_url is None or identity.member is None:
            self.photo_service.sync(identity.group)
        else:
            identity.photo_url = self.photo_service.sync(identity.member)
