"""Object Storage Port - Domain interface for S3-compatible storage.

Applicant uploads, job offers, contracts and editing deliverables are all
stored through this port. The state machines never see file bytes; they only
record the StoredFile metadata returned here.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class StoredFile:
    """Metadata for a file stored in object storage.

    Attributes:
        storage_key: Unique key in object storage (format: {email}/{kind}/{sha256}.{ext})
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file (e.g., 'application/pdf')
    """
    storage_key: str
    sha256: str
    size_bytes: int
    mime_type: str


class ObjectStoragePort(ABC):
    """Port interface for S3-compatible object storage operations.

    Key Design Principles:
    - Storage keys are prefixed with the applicant email so an admin delete
      can remove every file of one applicant with a single prefix sweep
    - SHA256 calculated during upload for deduplication and integrity
    - Idempotent operations (store_file returns existing if duplicate)

    Example Usage:
        storage = S3StorageAdapter(...)

        with open('passport.pdf', 'rb') as f:
            stored = await storage.store_file(
                file=f,
                owner='alice@example.com',
                kind='passport',
                filename='passport.pdf',
                mime_type='application/pdf'
            )

        file_stream = await storage.retrieve_file(stored.storage_key)
    """

    @abstractmethod
    async def store_file(
        self,
        file: BinaryIO,
        owner: str,
        kind: str,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file in object storage with automatic deduplication.

        Args:
            file: Binary file stream to store (must be readable)
            owner: Applicant email (storage key prefix)
            kind: Document kind (e.g. 'passport', 'edited_cv')
            filename: Original filename (for extension extraction)
            mime_type: MIME type of the file

        Returns:
            StoredFile: Metadata about stored file

        Raises:
            StorageError: If upload fails or storage is unavailable
            ValueError: If file is empty
        """
        pass

    @abstractmethod
    async def retrieve_file(self, storage_key: str) -> BinaryIO:
        """Retrieve a file by its storage key.

        Raises:
            FileNotFoundError: If file doesn't exist in storage
            StorageError: If retrieval fails
        """
        pass

    @abstractmethod
    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file. Returns False if it didn't exist.

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with prefix.

        Args:
            prefix: Key prefix (e.g. 'alice@example.com/')

        Returns:
            int: Number of objects deleted

        Raises:
            StorageError: If listing or deletion fails
        """
        pass

    @abstractmethod
    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in object storage."""
        pass
