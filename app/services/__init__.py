from app.services.automation_dispatcher import AutomationDispatcher
from app.services.conversation_tracker import ConversationTracker
from app.services.follow_up_service import FollowUpService
from app.services.identity_resolver import IdentityResolver
from app.services.instance_service import InstanceService
from app.services.media_transfer_service import MediaTransferService
from app.services.message_recorder import MessageRecorder
from app.services.profile_photo_service import ProfilePhotoService
from app.services.status_reconciler import StatusReconciler

__all__ = [
    "AutomationDispatcher",
    "ConversationTracker",
    "FollowUpService",
    "IdentityResolver",
    "InstanceService",
    "MediaTransferService",
    "MessageRecorder",
    "ProfilePhotoService",
    "StatusReconciler",
]
