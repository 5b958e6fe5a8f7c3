"""Multipart upload intake shared by the application and editing flows.

Uploads are read and validated in full before anything is written to object
storage, so a rejected submission never leaves files behind.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Dict, Iterator, List, Optional

from fastapi import UploadFile

from domain.applications.models import UploadedFile
from domain.documents import (
    is_supported_extension,
    is_supported_mime_type,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)
from domain.documents.ports import ObjectStoragePort
from domain.errors import ValidationError

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


@dataclass
class PendingFile:
    """A validated upload held in memory until it is stored."""
    kind: str
    original_name: str
    safe_name: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


async def read_upload(kind: str, upload: UploadFile, max_size: int) -> PendingFile:
    """Read and validate one multipart file.

    Raises:
        ValidationError: Bad filename, unsupported type or size out of range
    """
    is_valid, error_msg = validate_filename(upload.filename)
    if not is_valid:
        raise ValidationError(f"{kind}: {error_msg}")

    if not is_supported_extension(upload.filename) or not is_supported_mime_type(upload.content_type):
        raise ValidationError(
            f"{kind}: Only PDF, images (JPG, PNG) and Word documents are allowed"
        )

    content = await upload.read()
    is_valid, error_msg = validate_file_size(len(content), max_size)
    if not is_valid:
        raise ValidationError(f"{kind}: {error_msg}")

    return PendingFile(
        kind=kind,
        original_name=upload.filename,
        safe_name=sanitize_filename(upload.filename),
        mime_type=upload.content_type,
        content=content,
    )


async def read_uploads(
    uploads: Dict[str, Optional[List[UploadFile]]],
    max_size: int,
) -> Dict[str, List[PendingFile]]:
    """Read every non-empty form field; fields without files are dropped."""
    pending = {}
    for kind, files in uploads.items():
        files = [f for f in (files or []) if f is not None and f.filename]
        if files:
            pending[kind] = [await read_upload(kind, f, max_size) for f in files]
    return pending


async def store_pending(storage: ObjectStoragePort, owner: str, pending: PendingFile) -> UploadedFile:
    """Write one validated file to object storage and return its metadata."""
    stored = await storage.store_file(
        file=BytesIO(pending.content),
        owner=owner,
        kind=pending.kind,
        filename=pending.safe_name,
        mime_type=pending.mime_type,
    )
    logger.info(
        f"Stored {pending.kind} for {owner}: storage_key={stored.storage_key}, "
        f"size={stored.size_bytes}",
        extra={"email": owner, "kind": pending.kind},
    )
    return UploadedFile(
        filename=pending.safe_name,
        original_name=pending.original_name,
        size=stored.size_bytes,
        storage_key=stored.storage_key,
        mime_type=stored.mime_type,
    )


def stream_chunks(stream: BinaryIO, chunk_size: int = DOWNLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a stored file in chunks for StreamingResponse; closes the stream."""
    try:
        for chunk in iter(lambda: stream.read(chunk_size), b""):
            yield chunk
    finally:
        stream.close()
