"""Provider, storage and relay adapters."""

from app.adapters.base import BaseProviderAdapter, ProviderError
from app.adapters.blob_storage import BlobStorage, StorageError
from app.adapters.uazapi import UazapiAdapter

__all__ = [
    "BaseProviderAdapter",
    "BlobStorage",
    "ProviderError",
    "StorageError",
    "UazapiAdapter",
]
