"""Relay of raw provider events to a per-instance forwarding URL."""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import get_settings

logger = logging.getLogger(__name__)


def relay_event(url: str, payload: Any) -> bool:
    """POST the payload verbatim. Returns False (and logs) on any failure; never raises."""
    settings = get_settings()
    try:
        resp = requests.post(
            url,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "User-Agent": settings.forward_user_agent,
            },
            timeout=settings.http_timeout_seconds,
        )
    except requests.RequestException as e:
        logger.warning("Forwarding to %s failed: %s", url, e)
        return False
    if resp.status_code >= 400:
        logger.warning("Forwarding to %s returned HTTP %s", url, resp.status_code)
        return False
    logger.info("Forwarded event to %s", url)
    return True
