"""Group and GroupMember models."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.mixins import TimestampMixin
from app.models.types import UUIDType


class Group(Base, TimestampMixin):
    """A group chat, keyed by the provider group identifier."""

    __tablename__ = "groups"

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    remote_jid = Column(String(255), unique=True, nullable=False, index=True)
    group_name = Column(String(255), nullable=True)
    group_pic_url = Column(Text, nullable=True)
    instance_id = Column(
        UUIDType, ForeignKey("instances.id", ondelete="SET NULL"), nullable=True
    )
    user_id = Column(UUIDType, nullable=True)

    members = relationship(
        "GroupMember", back_populates="group", cascade="all, delete-orphan"
    )


class GroupMember(Base, TimestampMixin):
    """A participant seen sending in a group. Created lazily per distinct sender."""

    __tablename__ = "group_members"

    __table_args__ = (
        UniqueConstraint("group_id", "number", name="uq_group_members_group_number"),
    )

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    group_id = Column(
        UUIDType, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    number = Column(String(255), nullable=False)
    push_name = Column(String(255), nullable=True)
    profile_pic_url = Column(Text, nullable=True)
    user_id = Column(UUIDType, nullable=True)

    group = relationship("Group", back_populates="members")
