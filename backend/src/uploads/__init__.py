"""Multipart upload intake"""

from .intake import PendingFile, read_upload, read_uploads, store_pending, stream_chunks

__all__ = [
    "PendingFile",
    "read_upload",
    "read_uploads",
    "store_pending",
    "stream_chunks",
]
