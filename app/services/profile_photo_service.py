"""
Profile photo sync: provider chat photo -> avatars bucket -> entity row.

Best effort. At most one provider ``chat/details`` call per sync; every
failure is logged and the URL already on record is returned.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.base import BaseProviderAdapter, ProviderError
from app.adapters.blob_storage import BlobStorage, StorageError
from app.config import get_settings
from app.models.contact import Contact
from app.models.group import Group, GroupMember

logger = logging.getLogger(__name__)

PhotoTarget = Union[Contact, Group, GroupMember]

AVATAR_CONTENT_TYPE = "image/jpeg"


def photo_attribute(target: PhotoTarget) -> str:
    return "group_pic_url" if isinstance(target, Group) else "profile_pic_url"


def photo_chat_id(target: PhotoTarget) -> str:
    return target.remote_jid if isinstance(target, Group) else target.number


def avatar_key(target: PhotoTarget) -> str:
    """Stable per-entity object key; re-uploads overwrite."""
    if isinstance(target, Contact):
        prefix = "contacts"
    elif isinstance(target, Group):
        prefix = "groups"
    else:
        prefix = "group_members"
    return f"{prefix}/{target.id}.jpg"


class ProfilePhotoService:
    def __init__(
        self,
        db: Session,
        adapter: BaseProviderAdapter,
        storage: BlobStorage,
        bucket: Optional[str] = None,
    ) -> None:
        self.db = db
        self.adapter = adapter
        self.storage = storage
        self.bucket = bucket or get_settings().storage_avatars_bucket

    def sync(self, target: PhotoTarget) -> Optional[str]:
        """Refresh the target's photo. Returns the photo URL on record after the attempt."""
        attribute = photo_attribute(target)
        current = getattr(target, attribute)
        try:
            preview_url = self.adapter.fetch_chat_image_url(photo_chat_id(target))
            if not preview_url:
                return current
            data = self.adapter.download_file(preview_url)
            public_url = self.storage.upload(
                self.bucket, avatar_key(target), data, AVATAR_CONTENT_TYPE
            )
        except (ProviderError, StorageError) as e:
            logger.warning(
                "Profile photo sync failed for %s %s: %s",
                type(target).__name__,
                target.id,
                e,
            )
            return current

        try:
            setattr(target, attribute, public_url)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Could not store photo URL for %s %s", type(target).__name__, target.id
            )
            return current
        return public_url
