"""
Messaging-provider adapter interface.

Adapters encapsulate provider-specific HTTP and payload shapes and expose
plain Python values to the ingestion services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class ProviderError(Exception):
    """A provider call failed (network, HTTP status, or unusable response)."""


class BaseProviderAdapter(ABC):
    """Contract for provider adapters. New providers implement this interface."""

    @abstractmethod
    def fetch_chat_image_url(self, chat_id: str) -> Optional[str]:
        """Return the current profile/group photo URL for a chat, or None if it has none."""
        ...

    @abstractmethod
    def download_media(self, external_id: str) -> bytes:
        """Return the raw bytes of a media message. Raise ProviderError on failure."""
        ...

    @abstractmethod
    def download_file(self, url: str) -> bytes:
        """Fetch a provider-hosted file (e.g. photo preview). Raise ProviderError on failure."""
        ...
