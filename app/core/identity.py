"""
Resolved chat identity threaded through the ingestion pipeline.

Produced once by the identity resolver; the conversation tracker and message
recorder branch on the variant instead of re-deriving "is this a group".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from app.models.contact import Contact
from app.models.group import Group, GroupMember


@dataclass
class ContactIdentity:
    contact: Contact
    sender_name: str
    sender_jid: str
    photo_url: Optional[str] = None

    is_group = False


@dataclass
class GroupIdentity:
    group: Group
    member: Optional[GroupMember]
    sender_name: str
    sender_jid: Optional[str]
    photo_url: Optional[str] = None

    is_group = True


ChatIdentity = Union[ContactIdentity, GroupIdentity]
