# docket/storage/base.py
"""
Blob store port.

Keys are opaque to the store. Implementations raise ``StorageError`` (or
``StorageTimeoutError``) for every backend failure and never retry on their
own: a write whose outcome is uncertain must not be silently duplicated.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BlobStore(ABC):

    @abstractmethod
    def put(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Write ``data`` under ``key``.

        Args:
            key: storage key derived by the document registry
            data: file bytes
            content_type: MIME type recorded with the object, if supported
            timeout: upper bound in seconds for the write

        Raises:
            StorageError: the write failed
            StorageTimeoutError: the write did not finish within ``timeout``
        """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read the bytes stored under ``key``. StorageError if missing."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete ``key``; False when nothing was stored there."""
