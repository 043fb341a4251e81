"""Celery tasks that hand messages to the external automation jobs."""

from __future__ import annotations

from typing import Any, Optional

import requests

from app.config import get_settings
from app.infra.celery_app import celery_app
from app.infra.logging_config import get_logger

logger = get_logger("automation_tasks")

MAX_RETRIES = 5


def _post_job(url: Optional[str], payload: dict[str, Any], job: str) -> bool:
    """POST to an automation job endpoint. Returns False if the job is not configured."""
    if not url:
        logger.info("%s job URL not configured; skipping", job)
        return False
    settings = get_settings()
    headers = {"Content-Type": "application/json"}
    if settings.automation_job_token:
        headers["Authorization"] = f"Bearer {settings.automation_job_token}"
    resp = requests.post(
        url, json=payload, headers=headers, timeout=settings.http_timeout_seconds
    )
    resp.raise_for_status()
    logger.info("%s job accepted (HTTP %s)", job, resp.status_code)
    return True


@celery_app.task(
    name="app.tasks.automation_tasks.transcribe_audio_task",
    bind=True,
    max_retries=MAX_RETRIES,
    autoretry_for=(requests.RequestException,),
    retry_backoff=True,
)
def transcribe_audio_task(self, message_id: str, media_url: str) -> bool:
    """Ask the transcription job to transcribe one audio message."""
    return _post_job(
        get_settings().transcription_job_url,
        {"messageId": message_id, "mediaUrl": media_url},
        "transcription",
    )


@celery_app.task(
    name="app.tasks.automation_tasks.analyze_conversation_task",
    bind=True,
    max_retries=MAX_RETRIES,
    autoretry_for=(requests.RequestException,),
    retry_backoff=True,
)
def analyze_conversation_task(self, conversation_id: str) -> bool:
    """Ask the sentiment job to analyze a conversation."""
    return _post_job(
        get_settings().sentiment_job_url,
        {"conversationId": conversation_id},
        "sentiment analysis",
    )
