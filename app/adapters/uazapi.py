"""
uazapi provider adapter.

Parses webhook payloads and calls the provider REST API (chat details, media
download). Every request carries the instance token and a bounded timeout.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Optional

import requests
from pydantic import ValidationError

from app.adapters.base import BaseProviderAdapter, ProviderError
from app.config import get_settings
from app.infra.logging_config import get_logger
from app.schemas.uazapi import UazapiWebhookEvent

logger = get_logger("uazapi")

CHAT_DETAILS_PATH = "/chat/details"
MESSAGE_DOWNLOAD_PATH = "/message/download"

_DATA_URI_PREFIX = re.compile(r"^data:.*?;base64,")
_NON_DIGITS = re.compile(r"\D")


def _first_record(data: Any) -> dict[str, Any]:
    """The provider answers with either an object or a one-element list."""
    if isinstance(data, list):
        data = data[0] if data else {}
    return data if isinstance(data, dict) else {}


def decode_base64_media(raw: str) -> bytes:
    """Decode provider base64, tolerating a data-URI prefix and line breaks."""
    cleaned = _DATA_URI_PREFIX.sub("", raw).replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ProviderError(f"Invalid base64 media payload: {e}") from e


def parse_event(raw_payload: Any) -> UazapiWebhookEvent:
    """Validate a single decoded webhook object. Raise ValueError if it is not one."""
    if not isinstance(raw_payload, dict):
        raise ValueError("Webhook body must be a JSON object")
    try:
        return UazapiWebhookEvent.model_validate(raw_payload)
    except ValidationError as e:
        raise ValueError(f"Invalid uazapi event: {e}") from e


class UazapiAdapter(BaseProviderAdapter):
    """uazapi adapter: one instance per provider API token."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        media_timeout: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key
        self._base_url = (base_url or settings.uazapi_api_url).rstrip("/")
        self._timeout = timeout or settings.http_timeout_seconds
        self._media_timeout = media_timeout or settings.media_download_timeout_seconds

    def _post(self, path: str, payload: dict[str, Any], timeout: float) -> Any:
        url = f"{self._base_url}{path}"
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "token": self._api_key,
        }
        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            raise ProviderError(f"{path} request failed: {e}") from e
        if resp.status_code != 200:
            raise ProviderError(
                f"{path} HTTP {resp.status_code}: {resp.text[:500] if resp.text else 'no body'}"
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"{path} returned invalid JSON: {e}") from e

    def fetch_chat_image_url(self, chat_id: str) -> Optional[str]:
        number = _NON_DIGITS.sub("", chat_id)
        if not number:
            raise ProviderError(f"Chat id {chat_id!r} has no digits")
        data = _first_record(
            self._post(
                CHAT_DETAILS_PATH,
                {"number": number, "preview": False},
                self._timeout,
            )
        )
        url = data.get("imagePreview") or data.get("image")
        if isinstance(url, str) and url.startswith(("http://", "https://")):
            return url
        return None

    def download_media(self, external_id: str) -> bytes:
        data = _first_record(
            self._post(
                MESSAGE_DOWNLOAD_PATH,
                {"id": external_id, "return_base64": True, "return_link": False},
                self._media_timeout,
            )
        )
        raw = data.get("base64Data")
        if not raw or not isinstance(raw, str):
            raise ProviderError(f"No base64 data for message {external_id}")
        return decode_base64_media(raw)

    def download_file(self, url: str) -> bytes:
        try:
            resp = requests.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise ProviderError(f"File download failed: {e}") from e
        if resp.status_code != 200:
            raise ProviderError(f"File download HTTP {resp.status_code}")
        if not resp.content:
            raise ProviderError("File download returned no content")
        return resp.content
