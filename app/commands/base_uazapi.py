"""
Base command for uazapi-related operations.

Provides a shared way to obtain a provider adapter bound to an instance's
token and the blob storage client.
"""

from __future__ import annotations

from app.adapters.blob_storage import BlobStorage
from app.adapters.uazapi import UazapiAdapter
from app.models.instance import Instance


class BaseUazapiCommand:
    """
    Base for uazapi-related commands.
    Provides configured adapters; tests patch these factories.
    """

    @staticmethod
    def get_uazapi_adapter(instance: Instance) -> UazapiAdapter:
        """Return a UazapiAdapter authenticated with the instance's API token."""
        return UazapiAdapter(api_key=instance.apikey)

    @staticmethod
    def get_blob_storage() -> BlobStorage:
        return BlobStorage.from_settings()
