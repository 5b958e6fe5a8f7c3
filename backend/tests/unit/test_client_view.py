"""Unit tests for the applicant-facing projection of a record"""

import pytest

from domain.applications import client_view, document_counts


@pytest.fixture
def record(engine, alice, alice_prefs, uploaded_file):
    files = {k: [uploaded_file(k)] for k in ("passport", "photo", "cv", "qualifications", "experience")}
    record = engine.submit_upload(None, files, alice, alice_prefs).record
    record = engine.review_document(record, "passport", "approved", "looks fine").record
    record = engine.review_document(record, "cv", "rejected", "blurry").record
    return engine.add_comment(record, "Please call us", author="maria").record


class TestDocumentCounts:

    def test_counts_uploaded_kinds_only(self, record):
        """Test counts by review status over uploaded kinds"""
        assert document_counts(record) == {"total": 5, "approved": 1, "rejected": 1, "pending": 3}


class TestClientView:

    def test_upload_info(self, record):
        view = client_view(record)
        assert view["upload_info"]["upload_count"] == 1
        assert view["upload_info"]["remaining_uploads"] == 2
        assert view["upload_info"]["history"][0]["upload_number"] == 1

    def test_custom_upload_cap(self, record):
        """Test the cap passed in is reported"""
        view = client_view(record, max_uploads=5)
        assert view["upload_info"]["max_uploads"] == 5
        assert view["upload_info"]["remaining_uploads"] == 4

    def test_only_rejection_comments_shown(self, record):
        """Test review comments are shown for rejected documents only"""
        view = client_view(record)
        assert view["documents"]["cv"]["comments"] == "blurry"
        assert view["documents"]["passport"]["comments"] is None
        assert "coverLetter" not in view["documents"]

    def test_only_admin_comments_shown(self, record):
        """Test system comments are suppressed"""
        view = client_view(record)
        assert [(c["author"], c["text"]) for c in view["comments"]] == [("maria", "Please call us")]

    def test_no_storage_keys(self, record):
        assert "alice@example.com/" not in str(client_view(record))
