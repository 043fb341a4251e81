"""Tests for MediaTransferService."""

import uuid
from unittest.mock import MagicMock

import pytest

from app.adapters.base import ProviderError
from app.constants.messages import MessageType
from app.services.media_transfer_service import MediaTransferService, media_format
from tests.fixtures.storage_fixtures import TEST_MEDIA_BUCKET, TEST_PUBLIC_URL


@pytest.mark.parametrize(
    "message_type,expected",
    [
        (MessageType.IMAGE, ("jpg", "image/jpeg")),
        (MessageType.AUDIO, ("ogg", "audio/ogg")),
        (MessageType.VIDEO, ("mp4", "video/mp4")),
        (MessageType.DOCUMENT, ("pdf", "application/pdf")),
    ],
)
def test_media_format_table(message_type, expected):
    assert media_format(message_type) == expected


def test_media_format_document_mimetype_override():
    assert media_format(
        MessageType.DOCUMENT,
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ) == (
        "docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )


def test_media_format_document_extension_from_file_name():
    assert media_format(MessageType.DOCUMENT, "application/x-custom", "data.custom") == (
        "custom",
        "application/x-custom",
    )


def test_media_format_ignores_mimetype_for_non_documents():
    assert media_format(MessageType.IMAGE, "image/png") == ("jpg", "image/jpeg")


@pytest.fixture
def provider():
    adapter = MagicMock()
    adapter.download_media.return_value = b"OggS-audio"
    return adapter


def test_transfer_uploads_to_media_bucket(provider, blob_storage, s3_client):
    conversation_id = uuid.uuid4()
    service = MediaTransferService(provider, blob_storage, bucket=TEST_MEDIA_BUCKET)

    url = service.transfer(MessageType.AUDIO, "MSG9", conversation_id)

    key = f"{conversation_id}/MSG9.ogg"
    assert url == f"{TEST_PUBLIC_URL}/{TEST_MEDIA_BUCKET}/{key}"
    provider.download_media.assert_called_once_with("MSG9")
    stored = s3_client.get_object(Bucket=TEST_MEDIA_BUCKET, Key=key)
    assert stored["Body"].read() == b"OggS-audio"
    assert stored["ContentType"] == "audio/ogg"


def test_transfer_provider_failure_returns_none(provider, blob_storage):
    provider.download_media.side_effect = ProviderError("no base64")
    service = MediaTransferService(provider, blob_storage, bucket=TEST_MEDIA_BUCKET)
    assert service.transfer(MessageType.IMAGE, "MSG9", uuid.uuid4()) is None


def test_transfer_storage_failure_returns_none(provider, blob_storage):
    service = MediaTransferService(provider, blob_storage, bucket="missing-bucket")
    assert service.transfer(MessageType.VIDEO, "MSG9", uuid.uuid4()) is None


def test_transfer_skips_non_media(provider, blob_storage):
    service = MediaTransferService(provider, blob_storage, bucket=TEST_MEDIA_BUCKET)
    assert service.transfer(MessageType.TEXT, "MSG9", uuid.uuid4()) is None
    provider.download_media.assert_not_called()
