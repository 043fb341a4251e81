"""
Media transfer: provider message media -> media bucket -> public URL.

Never raises. A ``None`` result means the message is stored without media.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from typing import Optional
from uuid import UUID

from app.adapters.base import BaseProviderAdapter, ProviderError
from app.adapters.blob_storage import BlobStorage, StorageError
from app.config import get_settings
from app.constants.messages import MEDIA_MESSAGE_TYPES, MessageType

logger = logging.getLogger(__name__)

# (extension, content type) per media type
MEDIA_FORMATS: dict[MessageType, tuple[str, str]] = {
    MessageType.IMAGE: ("jpg", "image/jpeg"),
    MessageType.AUDIO: ("ogg", "audio/ogg"),
    MessageType.VIDEO: ("mp4", "video/mp4"),
    MessageType.DOCUMENT: ("pdf", "application/pdf"),
}

DOCUMENT_EXTENSIONS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    "application/zip": "zip",
    "text/plain": "txt",
    "text/csv": "csv",
}


def media_format(
    message_type: MessageType,
    mimetype: Optional[str] = None,
    file_name: Optional[str] = None,
) -> tuple[str, str]:
    """Extension and content type for stored media.

    Documents honour the mimetype the sender attached; the extension comes from
    the known-types table, then the file name, then the mimetype registry.
    """
    extension, content_type = MEDIA_FORMATS[message_type]
    if message_type != MessageType.DOCUMENT:
        return extension, content_type

    mimetype = (mimetype or "").split(";")[0].strip().lower()
    if not mimetype and file_name:
        mimetype = mimetypes.guess_type(file_name)[0] or ""
    if not mimetype:
        return extension, content_type

    doc_extension = DOCUMENT_EXTENSIONS.get(mimetype)
    if doc_extension is None and file_name:
        doc_extension = os.path.splitext(file_name)[1].lstrip(".").lower() or None
    if doc_extension is None:
        guessed = mimetypes.guess_extension(mimetype)
        doc_extension = guessed.lstrip(".") if guessed else "bin"
    return doc_extension, mimetype


def media_key(conversation_id: UUID, external_id: str, extension: str) -> str:
    return f"{conversation_id}/{external_id}.{extension}"


class MediaTransferService:
    def __init__(
        self,
        adapter: BaseProviderAdapter,
        storage: BlobStorage,
        bucket: Optional[str] = None,
    ) -> None:
        self.adapter = adapter
        self.storage = storage
        self.bucket = bucket or get_settings().storage_media_bucket

    def transfer(
        self,
        message_type: MessageType,
        external_id: str,
        conversation_id: UUID,
        mimetype: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Optional[str]:
        """Copy a message's media into blob storage and return its public URL."""
        if message_type not in MEDIA_MESSAGE_TYPES:
            return None
        extension, content_type = media_format(message_type, mimetype, file_name)
        key = media_key(conversation_id, external_id, extension)
        try:
            data = self.adapter.download_media(external_id)
            url = self.storage.upload(self.bucket, key, data, content_type)
        except (ProviderError, StorageError) as e:
            logger.warning(
                "Media transfer failed for message %s (%s): %s",
                external_id,
                message_type,
                e,
            )
            return None
        logger.info("Stored %s media for message %s at %s", message_type, external_id, key)
        return url
