"""
Post-record automations: transcription, periodic sentiment analysis and the
follow-up reset.

Each action is isolated; none of them can fail the webhook request.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.constants.messages import MessageDirection, MessageType
from app.services.follow_up_service import FollowUpService
from app.services.message_recorder import RecordedMessage
from app.tasks.automation_tasks import analyze_conversation_task, transcribe_audio_task

logger = logging.getLogger(__name__)

ACTION_TRANSCRIBE = "transcribe_audio"
ACTION_ANALYZE = "analyze_conversation"
ACTION_FOLLOW_UP_RESET = "follow_up_reset"


class AutomationDispatcher:
    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.follow_up_service = FollowUpService(db)

    def dispatch(self, recorded: RecordedMessage) -> list[str]:
        """Run every applicable automation. Returns the names of those that fired."""
        fired = []
        for name, action in (
            (ACTION_TRANSCRIBE, self._request_transcription),
            (ACTION_ANALYZE, self._request_analysis),
            (ACTION_FOLLOW_UP_RESET, self._reset_follow_up),
        ):
            try:
                if action(recorded):
                    fired.append(name)
            except Exception:
                logger.exception(
                    "Automation %s failed for message %s", name, recorded.message.id
                )
        return fired

    def should_analyze(self, message_count: int) -> bool:
        every = self.settings.sentiment_analysis_every
        return message_count > 0 and message_count % every == 0

    def _request_transcription(self, recorded: RecordedMessage) -> bool:
        message = recorded.message
        if message.message_type != MessageType.AUDIO.value or not message.media_url:
            return False
        transcribe_audio_task.delay(str(message.id), message.media_url)
        return True

    def _request_analysis(self, recorded: RecordedMessage) -> bool:
        if not self.should_analyze(recorded.message_count):
            return False
        analyze_conversation_task.delay(str(recorded.message.conversation_id))
        return True

    def _reset_follow_up(self, recorded: RecordedMessage) -> bool:
        message = recorded.message
        if message.direction != MessageDirection.INBOUND.value:
            return False
        follow_up = self.follow_up_service.reset_for_inbound(message.conversation_id)
        if follow_up is None:
            return False
        logger.info(
            "Reset follow-up for conversation %s, next send at %s",
            message.conversation_id,
            follow_up.next_send_at,
        )
        return True
