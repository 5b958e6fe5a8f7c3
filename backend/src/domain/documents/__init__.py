"""Documents domain module - document kinds, review status, upload validation

Shared by the application review engine and the editing service.
"""

from .document_status import (
    DocumentKind,
    ReviewStatus,
    APPLICANT_DOCUMENT_KINDS,
    REQUIRED_DOCUMENT_KINDS,
    OPTIONAL_DOCUMENT_KINDS,
    MAX_FILES_PER_KIND,
    parse_document_kind,
    is_applicant_document,
)
from .validation import (
    is_supported_mime_type,
    is_supported_extension,
    validate_file_size,
    validate_filename,
    sanitize_filename,
    SUPPORTED_MIME_TYPES,
    SUPPORTED_EXTENSIONS,
    MAX_FILE_SIZE,
)

__all__ = [
    "DocumentKind",
    "ReviewStatus",
    "APPLICANT_DOCUMENT_KINDS",
    "REQUIRED_DOCUMENT_KINDS",
    "OPTIONAL_DOCUMENT_KINDS",
    "MAX_FILES_PER_KIND",
    "parse_document_kind",
    "is_applicant_document",
    "is_supported_mime_type",
    "is_supported_extension",
    "validate_file_size",
    "validate_filename",
    "sanitize_filename",
    "SUPPORTED_MIME_TYPES",
    "SUPPORTED_EXTENSIONS",
    "MAX_FILE_SIZE",
]
