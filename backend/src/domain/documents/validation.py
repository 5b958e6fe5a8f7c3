"""File validation utilities for applicant uploads

Checks the metadata an upload handler produces before any file reaches
object storage.
"""

import os
import re
from typing import Optional, Tuple


# Supported MIME types (PDF, images, Word documents)
SUPPORTED_MIME_TYPES = {
    'application/pdf',
    'image/jpeg',
    'image/png',
    'application/msword',  # .doc
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',  # .docx
}

SUPPORTED_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png', '.doc', '.docx'}

# File size limit (default 10MB, configurable via env)
MAX_FILE_SIZE = int(os.getenv('MAX_UPLOAD_SIZE_BYTES', 10 * 1024 * 1024))


def is_supported_mime_type(mime_type: str) -> bool:
    """Check if MIME type is supported for upload

    Example:
        >>> is_supported_mime_type('application/pdf')
        True
        >>> is_supported_mime_type('text/csv')
        False
    """
    return mime_type in SUPPORTED_MIME_TYPES


def is_supported_extension(filename: str) -> bool:
    """Check if the filename carries an allowed extension"""
    return os.path.splitext(filename)[1].lower() in SUPPORTED_EXTENSIONS


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: str) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal or directory separators
    - No null bytes or control characters
    - Allowed extension (pdf, jpg, jpeg, png, doc, docx)

    Example:
        >>> validate_filename('passport.pdf')
        (True, None)
        >>> validate_filename('../../etc/passwd')
        (False, 'Filename contains path traversal or directory separators')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    if not is_supported_extension(filename):
        return False, "Only PDF, images (JPG, PNG) and Word documents are allowed"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage

    Example:
        >>> sanitize_filename('../../cv.pdf')
        'cv.pdf'
        >>> sanitize_filename('my cv (final).pdf')
        'my_cv_final_.pdf'
    """
    filename = os.path.basename(filename.replace('\\', '/'))

    # Keep letters, digits, dots and dashes
    filename = re.sub(r'[^\w.-]', '_', filename)
    filename = re.sub(r'_+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext

    return filename
