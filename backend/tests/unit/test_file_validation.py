"""Unit tests for applicant upload file validation"""

import pytest
from domain.documents import (
    is_supported_extension,
    is_supported_mime_type,
    validate_file_size,
    validate_filename,
    sanitize_filename,
    SUPPORTED_MIME_TYPES,
    MAX_FILE_SIZE,
)


class TestMimeTypeValidation:
    """Test MIME type validation for uploads"""

    def test_supported_mime_types_constant(self):
        """Test SUPPORTED_MIME_TYPES contains PDF, images and Word"""
        assert 'application/pdf' in SUPPORTED_MIME_TYPES
        assert 'image/jpeg' in SUPPORTED_MIME_TYPES
        assert 'image/png' in SUPPORTED_MIME_TYPES
        assert 'application/msword' in SUPPORTED_MIME_TYPES

    def test_docx_mime_type_supported(self):
        """Test Word .docx MIME type is supported"""
        assert is_supported_mime_type(
            'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
        ) is True

    def test_unsupported_mime_types(self):
        """Test spreadsheets, text and executables are rejected"""
        assert is_supported_mime_type('text/csv') is False
        assert is_supported_mime_type('text/plain') is False
        assert is_supported_mime_type('application/vnd.ms-excel') is False
        assert is_supported_mime_type('application/x-msdownload') is False


class TestExtensionValidation:
    """Test extension checks"""

    @pytest.mark.parametrize("filename", ["cv.pdf", "photo.JPG", "photo.jpeg", "scan.png", "letter.doc", "letter.docx"])
    def test_supported_extensions(self, filename):
        """Test allowed extensions, case-insensitively"""
        assert is_supported_extension(filename) is True

    @pytest.mark.parametrize("filename", ["script.exe", "data.csv", "notes.txt", "noextension"])
    def test_unsupported_extensions(self, filename):
        """Test other extensions are rejected"""
        assert is_supported_extension(filename) is False


class TestFileSizeValidation:
    """Test file size validation"""

    def test_valid_small_file(self):
        """Test valid small file (1KB)"""
        is_valid, error = validate_file_size(1024)
        assert is_valid is True
        assert error is None

    def test_file_at_exact_limit(self):
        """Test file at exactly MAX_FILE_SIZE"""
        is_valid, error = validate_file_size(MAX_FILE_SIZE)
        assert is_valid is True
        assert error is None

    def test_empty_file_rejected(self):
        """Test empty file (0 bytes) is rejected"""
        is_valid, error = validate_file_size(0)
        assert is_valid is False
        assert error == "File is empty (0 bytes)"

    def test_file_over_limit(self):
        """Test file one byte over the limit"""
        is_valid, error = validate_file_size(MAX_FILE_SIZE + 1)
        assert is_valid is False
        assert "exceeds maximum size" in error

    def test_custom_max_size(self):
        """Test custom max_size parameter"""
        assert validate_file_size(600, max_size=500) == (
            False, "File exceeds maximum size of 500 bytes (got 600 bytes)"
        )
        assert validate_file_size(400, max_size=500) == (True, None)


class TestFilenameValidation:
    """Test filename validation"""

    def test_valid_filename(self):
        """Test normal filenames pass"""
        assert validate_filename('passport.pdf') == (True, None)
        assert validate_filename('Alice CV 2026.docx') == (True, None)

    def test_empty_filename_rejected(self):
        """Test empty and whitespace-only filenames"""
        assert validate_filename('') == (False, "Filename cannot be empty")
        assert validate_filename('   ') == (False, "Filename cannot be empty")

    def test_long_filename_rejected(self):
        """Test filenames over 255 characters"""
        is_valid, error = validate_filename('a' * 252 + '.pdf')
        assert is_valid is False
        assert "255 characters" in error

    def test_path_traversal_rejected(self):
        """Test path traversal and separators"""
        expected = (False, "Filename contains path traversal or directory separators")
        assert validate_filename('../../etc/passwd') == expected
        assert validate_filename('docs/cv.pdf') == expected
        assert validate_filename('docs\\cv.pdf') == expected

    def test_null_byte_rejected(self):
        """Test null bytes"""
        assert validate_filename('cv\x00.pdf') == (False, "Filename contains null bytes")

    def test_control_characters_rejected(self):
        """Test control characters"""
        assert validate_filename('cv\n.pdf') == (False, "Filename contains control characters")

    def test_unsupported_extension_rejected(self):
        """Test extension check is last"""
        assert validate_filename('malware.exe') == (
            False, "Only PDF, images (JPG, PNG) and Word documents are allowed"
        )


class TestSanitizeFilename:
    """Test filename sanitization"""

    def test_strips_directories(self):
        """Test directories are removed"""
        assert sanitize_filename('../../cv.pdf') == 'cv.pdf'
        assert sanitize_filename('C:\\Users\\alice\\cv.pdf') == 'cv.pdf'

    def test_replaces_unsafe_characters(self):
        """Test spaces and punctuation become single underscores"""
        assert sanitize_filename('my cv (final).pdf') == 'my_cv_final_.pdf'

    def test_keeps_safe_names(self):
        """Test already-safe names are unchanged"""
        assert sanitize_filename('passport-scan_01.png') == 'passport-scan_01.png'

    def test_truncates_keeping_extension(self):
        """Test long names are cut to 255 with the extension kept"""
        result = sanitize_filename('a' * 300 + '.pdf')
        assert len(result) == 255
        assert result.endswith('.pdf')
