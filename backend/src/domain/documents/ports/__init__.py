"""Document Port Interfaces"""

from .object_storage_port import ObjectStoragePort, StoredFile

__all__ = [
    "ObjectStoragePort",
    "StoredFile",
]
