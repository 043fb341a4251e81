from app.models.contact import Contact
from app.models.conversation import Conversation
from app.models.follow_up import ConversationFollowUp, FollowUpTemplate
from app.models.group import Group, GroupMember
from app.models.instance import Instance
from app.models.message import Message

__all__ = [
    "Contact",
    "Conversation",
    "ConversationFollowUp",
    "FollowUpTemplate",
    "Group",
    "GroupMember",
    "Instance",
    "Message",
]
