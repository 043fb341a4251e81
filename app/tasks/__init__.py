# Import celery app first
from app.infra.celery_app import celery_app

# Initialize logging configuration for Celery workers
from app.infra.logging_config import LoggingConfig
from app.tasks.automation_tasks import (
    analyze_conversation_task,
    transcribe_audio_task,
)

LoggingConfig()  # Initialize logging

__all__ = [
    "celery_app",
    "analyze_conversation_task",
    "transcribe_audio_task",
]
