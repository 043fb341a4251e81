"""
Blob storage adapter (S3 compatible) for profile photos and message media.

Objects are written with ``put_object`` and addressed by a long-lived public
URL built from ``STORAGE_PUBLIC_URL`` (or the endpoint when unset).
"""

from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage operations."""


class BlobStorage:
    """Thin wrapper over a boto3 S3 client.

    Example:
        storage = BlobStorage.from_settings()
        url = storage.upload("media", "conv-id/msg-id.jpg", data, "image/jpeg")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: Optional[str],
        secret_key: Optional[str],
        region: str = "us-east-1",
        public_url: Optional[str] = None,
    ) -> None:
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
        self.region = region
        base = public_url or endpoint_url or f"https://s3.{region}.amazonaws.com"
        self._public_base = base.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BlobStorage":
        settings = settings or get_settings()
        return cls(
            endpoint_url=settings.storage_endpoint_url,
            access_key=settings.storage_access_key,
            secret_key=settings.storage_secret_key,
            region=settings.storage_region,
            public_url=settings.storage_public_url,
        )

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._public_base}/{bucket}/{key}"

    def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: str = "max-age=3600",
    ) -> str:
        """Write (or overwrite) an object and return its public URL."""
        if not data:
            raise StorageError("Cannot store empty object")
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=cache_control,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise StorageError(f"Failed to upload {bucket}/{key}: {error_code}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to upload {bucket}/{key}: {e}") from e
        logger.info(
            "Uploaded object bucket=%s key=%s size=%d content_type=%s",
            bucket,
            key,
            len(data),
            content_type,
        )
        return self.public_url(bucket, key)
