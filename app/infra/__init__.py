"""Process-level infrastructure: logging and the Celery app."""
