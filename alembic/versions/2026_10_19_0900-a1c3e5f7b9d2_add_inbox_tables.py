"""add inbox tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b9d2"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_FILTER = sa.text("status IN ('pending', 'open')")


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
    ]


def upgrade() -> None:
    """Upgrade schema: instances, contacts, groups, conversations, messages, follow-ups."""
    op.create_table(
        "instances",
        _id_column(),
        sa.Column("instance_name", sa.String(length=255), nullable=False),
        sa.Column("apikey", sa.String(length=512), nullable=False),
        sa.Column("webhook_url", sa.String(length=1024), nullable=True),
        sa.Column("default_queue_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_instances_instance_name", "instances", ["instance_name"], unique=True
    )

    op.create_table(
        "contacts",
        _id_column(),
        sa.Column("number", sa.String(length=255), nullable=False),
        sa.Column("push_name", sa.String(length=255), nullable=True),
        sa.Column("profile_pic_url", sa.Text(), nullable=True),
        sa.Column("instance_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["instance_id"], ["instances.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_contacts_number", "contacts", ["number"], unique=True)

    op.create_table(
        "groups",
        _id_column(),
        sa.Column("remote_jid", sa.String(length=255), nullable=False),
        sa.Column("group_name", sa.String(length=255), nullable=True),
        sa.Column("group_pic_url", sa.Text(), nullable=True),
        sa.Column("instance_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["instance_id"], ["instances.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_groups_remote_jid", "groups", ["remote_jid"], unique=True)

    op.create_table(
        "group_members",
        _id_column(),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("number", sa.String(length=255), nullable=False),
        sa.Column("push_name", sa.String(length=255), nullable=True),
        sa.Column("profile_pic_url", sa.Text(), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("group_id", "number", name="uq_group_members_group_number"),
    )

    op.create_table(
        "conversations",
        _id_column(),
        sa.Column("contact_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("instance_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "status",
            sa.String(length=16),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column(
            "unread_count", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column(
            "message_count", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("queue_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "last_message_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["instance_id"], ["instances.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "(contact_id IS NULL) <> (group_id IS NULL)",
            name="ck_conversations_contact_xor_group",
        ),
        sa.CheckConstraint("unread_count >= 0", name="ck_conversations_unread_count"),
    )
    op.create_index(
        "uq_conversations_active_contact_instance",
        "conversations",
        ["contact_id", "instance_id"],
        unique=True,
        postgresql_where=ACTIVE_FILTER,
    )
    op.create_index(
        "uq_conversations_active_group_instance",
        "conversations",
        ["group_id", "instance_id"],
        unique=True,
        postgresql_where=ACTIVE_FILTER,
    )

    op.create_table(
        "messages",
        _id_column(),
        sa.Column("conversation_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("direction", sa.String(length=16), nullable=False),
        sa.Column("message_type", sa.String(length=32), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("sender_name", sa.String(length=255), nullable=True),
        sa.Column("sender_jid", sa.String(length=255), nullable=True),
        sa.Column("sender_profile_pic_url", sa.Text(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("reply_to_id", sa.String(length=255), nullable=True),
        sa.Column("quoted_body", sa.Text(), nullable=True),
        sa.Column("quoted_sender", sa.String(length=32), nullable=True),
        sa.Column(
            "status",
            sa.String(length=16),
            nullable=False,
            server_default=sa.text("'sent'"),
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("ix_messages_external_id", "messages", ["external_id"], unique=False)
    op.create_index(
        "ix_messages_conversation_id_created_at",
        "messages",
        ["conversation_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "follow_up_templates",
        _id_column(),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("time_minutes", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_follow_up_templates_category_id",
        "follow_up_templates",
        ["category_id"],
        unique=False,
    )

    op.create_table(
        "conversation_follow_ups",
        _id_column(),
        sa.Column("conversation_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "auto_send", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "current_template_index",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("next_send_at", sa.DateTime(), nullable=True),
        sa.Column(
            "completed", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint("conversation_id"),
    )
    op.create_index(
        "ix_conversation_follow_ups_category_id",
        "conversation_follow_ups",
        ["category_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema: drop inbox tables."""
    op.drop_table("conversation_follow_ups")
    op.drop_index("ix_follow_up_templates_category_id", table_name="follow_up_templates")
    op.drop_table("follow_up_templates")
    op.drop_index("ix_messages_conversation_id_created_at", table_name="messages")
    op.drop_index("ix_messages_external_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("uq_conversations_active_group_instance", table_name="conversations")
    op.drop_index("uq_conversations_active_contact_instance", table_name="conversations")
    op.drop_table("conversations")
    op.drop_table("group_members")
    op.drop_index("ix_groups_remote_jid", table_name="groups")
    op.drop_table("groups")
    op.drop_index("ix_contacts_number", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("ix_instances_instance_name", table_name="instances")
    op.drop_table("instances")
