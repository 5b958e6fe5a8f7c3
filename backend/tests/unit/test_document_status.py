"""Unit tests for document kinds and review status"""

import pytest
from domain.documents import (
    DocumentKind,
    ReviewStatus,
    APPLICANT_DOCUMENT_KINDS,
    REQUIRED_DOCUMENT_KINDS,
    OPTIONAL_DOCUMENT_KINDS,
    MAX_FILES_PER_KIND,
    parse_document_kind,
    is_applicant_document,
)


class TestDocumentKind:
    """Test the document kind vocabulary"""

    def test_wire_values(self):
        """Test kinds serialize to the values clients send"""
        assert DocumentKind.COVER_LETTER.value == "coverLetter"
        assert DocumentKind.JOB_OFFER.value == "jobOffer"
        assert DocumentKind.EDITED_CV.value == "edited_cv"

    def test_required_kinds(self):
        """Test the four required kinds"""
        assert REQUIRED_DOCUMENT_KINDS == {
            DocumentKind.PASSPORT,
            DocumentKind.PHOTO,
            DocumentKind.CV,
            DocumentKind.QUALIFICATIONS,
        }

    def test_required_and_optional_are_applicant_kinds(self):
        """Test required and optional sets are disjoint subsets of applicant kinds"""
        assert REQUIRED_DOCUMENT_KINDS <= APPLICANT_DOCUMENT_KINDS
        assert OPTIONAL_DOCUMENT_KINDS <= APPLICANT_DOCUMENT_KINDS
        assert not REQUIRED_DOCUMENT_KINDS & OPTIONAL_DOCUMENT_KINDS

    def test_attachments_are_not_applicant_kinds(self):
        """Test job offer, contract and edited files are not reviewable"""
        for kind in (DocumentKind.JOB_OFFER, DocumentKind.CONTRACT,
                     DocumentKind.EDITED_CV, DocumentKind.EDITED_COVER):
            assert kind not in APPLICANT_DOCUMENT_KINDS

    def test_file_limits(self):
        """Test single-file kinds and multi-file kinds"""
        assert MAX_FILES_PER_KIND[DocumentKind.PASSPORT] == 1
        assert MAX_FILES_PER_KIND[DocumentKind.CV] == 1
        assert MAX_FILES_PER_KIND[DocumentKind.QUALIFICATIONS] == 5
        assert set(MAX_FILES_PER_KIND) == APPLICANT_DOCUMENT_KINDS


class TestParseDocumentKind:
    """Test kind parsing"""

    def test_parse_valid(self):
        """Test known values parse"""
        assert parse_document_kind("cv") == DocumentKind.CV
        assert parse_document_kind("coverLetter") == DocumentKind.COVER_LETTER

    def test_parse_unknown(self):
        """Test unknown values raise ValueError"""
        with pytest.raises(ValueError, match="Unknown document kind: 'visa'"):
            parse_document_kind("visa")

    def test_parse_is_case_sensitive(self):
        """Test wire values must match exactly"""
        with pytest.raises(ValueError):
            parse_document_kind("coverletter")

    def test_is_applicant_document(self):
        """Test applicant kind check on raw strings"""
        assert is_applicant_document("passport") is True
        assert is_applicant_document("documents") is True
        assert is_applicant_document("jobOffer") is False
        assert is_applicant_document("unknown") is False


class TestReviewStatus:
    """Test review status values"""

    def test_values(self):
        """Test the three review states"""
        assert {s.value for s in ReviewStatus} == {"pending", "approved", "rejected"}
