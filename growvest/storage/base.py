from abc import ABC, abstractmethod
from typing import BinaryIO

from growvest.core.config import get_settings


class StorageBackend(ABC):
    """Blob store for uploaded deposit proofs."""

    @abstractmethod
    async def put(self, key: str, body: BinaryIO | bytes, content_type: str | None = None) -> str:
        """Store file; return path or URI."""
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve file bytes."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete file."""
        ...


def get_storage() -> StorageBackend:
    settings = get_settings()
    if settings.storage_backend == "gcs":
        from growvest.storage.gcs import GCSStorage
        return GCSStorage()
    from growvest.storage.local import LocalStorage
    return LocalStorage()
