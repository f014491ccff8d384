"""
BlobStore contract - durable key -> bytes storage with list-by-prefix.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import NotFoundError


class BlobStore(ABC):
    """Abstract blob storage backend.

    Keys are '/'-separated strings such as
    ``<target>/snapshots/<snapshot_id>.json``.
    """

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Store data under key, replacing any previous value."""

    @abstractmethod
    def find(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under key, or None if absent."""

    @abstractmethod
    def list(self, prefix: str) -> List[str]:
        """Return all keys starting with prefix, sorted."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key. Deleting an absent key succeeds."""

    def get(self, key: str) -> bytes:
        """Return the bytes stored under key, raising NotFoundError if absent."""
        data = self.find(key)
        if data is None:
            raise NotFoundError(f"Blob not found: {key}")
        return data

    def exists(self, key: str) -> bool:
        return self.find(key) is not None
