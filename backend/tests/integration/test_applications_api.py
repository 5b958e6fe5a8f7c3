"""Integration tests for the applications API

Tests the applicant and admin workflow over HTTP:
- Upload with validation, storage and record creation
- Re-upload and the upload cap
- Document review, re-upload requests, status transitions
- Error mapping for portal errors
"""

import pytest

pytestmark = pytest.mark.integration

API = "/api/v1"
ALICE = "alice@example.com"


def required_files(pdf):
    return [
        ("passport", pdf("passport.pdf")),
        ("photo", pdf("photo.png", b"\x89PNG fake image", "image/png")),
        ("cv", pdf("cv.pdf")),
        ("qualifications", pdf("degree.pdf")),
    ]


@pytest.fixture
def submitted(client, applicant_form, pdf):
    """Alice's first upload with the four required documents."""
    response = client.post(f"{API}/applications/upload", data=applicant_form, files=required_files(pdf))
    assert response.status_code == 200
    return response.json()


def review(client, document_type, decision, comments=None, reviewer="maria"):
    return client.post(
        f"{API}/admin/applications/{ALICE}/document/review",
        json={"document_type": document_type, "status": decision, "comments": comments},
        headers={"X-Admin-User": reviewer},
    )


class TestUpload:
    """Tests for POST /api/v1/applications/upload"""

    def test_first_upload(self, submitted):
        """Test a complete first upload creates a received application"""
        assert submitted["success"] is True
        assert submitted["email"] == ALICE
        assert submitted["status"] == "received"
        assert submitted["is_reupload"] is False
        assert submitted["upload_count"] == 1
        assert submitted["remaining_uploads"] == 2
        assert sorted(submitted["documents"]) == ["cv", "passport", "photo", "qualifications"]

    def test_files_are_stored_under_applicant(self, client, submitted, storage):
        """Test the stored keys are scoped by email and kind"""
        record = client.get(f"{API}/admin/applications/{ALICE}").json()["application"]
        key = record["document_slots"]["cv"][0]["storage_key"]
        assert key.startswith(f"{ALICE}/cv/")
        assert key.endswith(".pdf")

    def test_missing_personal_info(self, client, pdf):
        """Test a new applicant without personal info gets 400"""
        response = client.post(
            f"{API}/applications/upload",
            data={"email": "bob@example.com"},
            files=[("cv", pdf("cv.pdf"))],
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"].startswith("Missing required fields")

    def test_no_files(self, client, applicant_form):
        """Test an upload without files is rejected"""
        response = client.post(f"{API}/applications/upload", data=applicant_form)
        assert response.status_code == 400
        assert "No files uploaded" in response.json()["message"]

    def test_unsupported_file_type(self, client, applicant_form, pdf):
        """Test non-document uploads are rejected before storage"""
        response = client.post(
            f"{API}/applications/upload",
            data=applicant_form,
            files=[("cv", pdf("cv.exe", b"MZ", "application/x-msdownload"))],
        )
        assert response.status_code == 400
        assert response.json()["message"].startswith("cv:")
        assert client.get(f"{API}/applications/{ALICE}/status").status_code == 404

    def test_empty_file(self, client, applicant_form, pdf):
        """Test zero-byte files are rejected"""
        response = client.post(
            f"{API}/applications/upload",
            data=applicant_form,
            files=[("cv", pdf("cv.pdf", b""))],
        )
        assert response.status_code == 400
        assert "File is empty" in response.json()["message"]

    def test_missing_email_field(self, client, pdf):
        """Test the email form field is required"""
        response = client.post(f"{API}/applications/upload", files=[("cv", pdf("cv.pdf"))])
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_reupload_and_cap(self, client, submitted, pdf):
        """Test re-uploads only need the email, and the fourth upload is refused"""
        for expected in (2, 3):
            response = client.post(
                f"{API}/applications/upload",
                data={"email": ALICE},
                files=[("cv", pdf(f"cv-v{expected}.pdf", f"version {expected}".encode()))],
            )
            assert response.status_code == 200
            assert response.json()["is_reupload"] is True
            assert response.json()["upload_count"] == expected

        assert response.json()["max_uploads_reached"] is True

        response = client.post(
            f"{API}/applications/upload",
            data={"email": ALICE},
            files=[("cv", pdf("cv-v4.pdf", b"version 4"))],
        )
        assert response.status_code == 400
        assert response.json()["error"] == "limit_exceeded"

        status = client.get(f"{API}/applications/{ALICE}/status").json()["application"]
        assert status["upload_info"]["upload_count"] == 3
        assert status["documents"]["cv"]["files"] == ["cv.pdf", "cv-v2.pdf", "cv-v3.pdf"]

    def test_cover_letter_field_alias(self, client, applicant_form, pdf):
        """Test the coverLetter form field"""
        response = client.post(
            f"{API}/applications/upload",
            data=applicant_form,
            files=[("coverLetter", pdf("letter.docx", b"PK docx",
                                       "application/vnd.openxmlformats-officedocument.wordprocessingml.document"))],
        )
        assert response.status_code == 200
        assert response.json()["documents"] == ["coverLetter"]


class TestClientStatus:
    """Tests for GET /api/v1/applications/{email}/status"""

    def test_unknown_applicant(self, client):
        """Test 404 for unknown email"""
        response = client.get(f"{API}/applications/nobody@example.com/status")
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "Application not found"}

    def test_status_hides_internal_details(self, client, submitted):
        """Test system comments and storage keys are not shown to the applicant"""
        review(client, "cv", "rejected", "blurry")
        client.put(
            f"{API}/admin/applications/{ALICE}/status",
            json={"status": "changes-required", "notes": "Please send a sharper scan"},
        )

        response = client.get(f"{API}/applications/{ALICE.upper()}/status")
        assert response.status_code == 200
        application = response.json()["application"]

        assert application["status"] == "changes-required"
        assert application["documents"]["cv"] == {
            "files": ["cv.pdf"],
            "status": "rejected",
            "comments": "blurry",
        }
        assert application["rejection_counts"] == {"cv": 1}
        assert [c["text"] for c in application["comments"]] == ["Please send a sharper scan"]
        assert application["reupload_requests"][0]["documents"] == ["cv"]
        assert "storage_key" not in response.text


class TestReview:
    """Tests for admin review endpoints"""

    def test_reject_then_reupload_then_approve(self, client, submitted, pdf):
        """Test the full reject / re-upload / approve sequence"""
        response = review(client, "cv", "rejected", "blurry")
        assert response.status_code == 200
        body = response.json()
        assert body["overall_status"] == "changes-required"
        assert body["rejected_documents"] == ["cv"]
        assert body["reupload_request_created"] is True

        response = client.post(
            f"{API}/applications/upload",
            data={"email": ALICE},
            files=[("cv", pdf("cv-sharp.pdf", b"%PDF sharp"))],
        )
        assert response.json()["status"] == "received"
        assert response.json()["upload_count"] == 2

        for kind in ("passport", "photo", "qualifications", "cv"):
            body = review(client, kind, "approved").json()
        assert body["overall_status"] == "documents-approved"
        assert body["rejection_counts"] == {"cv": 1}
        assert body["completed_requests"] == 1

        record = client.get(f"{API}/admin/applications/{ALICE}").json()["application"]
        assert record["reupload_requests"][0]["status"] == "completed"
        assert record["document_reviews"]["passport"]["reviewed_by"] == "maria"

    def test_review_unknown_kind(self, client, submitted):
        """Test 400 for unknown document kinds"""
        response = review(client, "visa", "approved")
        assert response.status_code == 400

    def test_review_unknown_application(self, client):
        """Test 404 for unknown email"""
        response = review(client, "cv", "approved")
        assert response.status_code == 404

    def test_request_reupload(self, client, submitted):
        """Test re-upload request for a rejected document"""
        review(client, "photo", "rejected", "too dark")
        response = client.post(
            f"{API}/admin/applications/{ALICE}/request-reupload",
            json={"document_types": ["photo"], "message": "Please retake the photo"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "reupload-requested"
        assert body["documents"] == ["photo"]
        assert body["created"] is False

    def test_request_reupload_for_approved_document(self, client, submitted):
        """Test 400 when nothing requested is rejected"""
        review(client, "photo", "approved")
        response = client.post(
            f"{API}/admin/applications/{ALICE}/request-reupload",
            json={"document_types": ["photo"]},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"


class TestStatusTransitions:
    """Tests for PUT /admin/applications/{email}/status"""

    def test_documents_approved_precondition(self, client, submitted):
        """Test 403 when required documents are not approved"""
        response = client.put(
            f"{API}/admin/applications/{ALICE}/status",
            json={"status": "documents-approved"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "precondition_failed"

    def test_invalid_status(self, client, submitted):
        """Test 400 for unknown statuses"""
        response = client.put(f"{API}/admin/applications/{ALICE}/status", json={"status": "archived"})
        assert response.status_code == 400

    def test_processed(self, client, submitted):
        """Test a free transition"""
        response = client.put(
            f"{API}/admin/applications/{ALICE}/status",
            json={"status": "processed", "notes": "Forwarded to employer"},
        )
        assert response.status_code == 200
        assert response.json()["old_status"] == "received"
        assert response.json()["new_status"] == "processed"


class TestAdminListing:
    """Tests for admin listings"""

    def test_list_and_pending_review(self, client, submitted, applicant_form, pdf):
        """Test listing order and the review queue"""
        bob = dict(applicant_form, email="bob@example.com", full_name="Bob")
        client.post(f"{API}/applications/upload", data=bob, files=[("cv", pdf("cv.pdf"))])
        client.put(f"{API}/admin/applications/bob@example.com/status", json={"status": "processed"})

        listing = client.get(f"{API}/admin/applications").json()
        assert listing["total"] == 2

        pending = client.get(f"{API}/admin/applications/pending-review").json()
        assert [a["email"] for a in pending["applications"]] == [ALICE]

    def test_delete_application(self, client, submitted, storage):
        """Test delete removes the record and its files"""
        response = client.delete(f"{API}/admin/applications/{ALICE}")
        assert response.status_code == 200
        assert response.json()["files_removed"] == 4
        assert client.get(f"{API}/admin/applications/{ALICE}").status_code == 404


class TestAttachmentsAndPayments:
    """Tests for job offer, contract and payment endpoints"""

    def test_job_offer_flow(self, client, submitted, pdf):
        """Test upload then admin review of a job offer"""
        response = client.post(
            f"{API}/applications/{ALICE}/job-offer",
            files={"file": pdf("offer.pdf")},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "uploaded"

        response = client.put(
            f"{API}/admin/applications/{ALICE}/job-offer/status",
            json={"status": "reviewed"},
        )
        assert response.json() == {"success": True, "status": "reviewed"}

        status = client.get(f"{API}/applications/{ALICE}/status").json()["application"]
        assert status["job_offer"] == "reviewed"

    def test_contract_status_without_contract(self, client, submitted):
        """Test 400 when no contract was uploaded"""
        response = client.put(
            f"{API}/admin/applications/{ALICE}/contract/status",
            json={"status": "reviewed"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "No contract found"

    def test_record_payment(self, client, submitted):
        """Test payment verification flips payment status"""
        response = client.post(
            f"{API}/admin/applications/{ALICE}/verify-payment",
            json={"transaction_id": "TX-42", "amount": 150.0, "service_type": "visa"},
        )
        assert response.json()["payment_status"] == "paid"

        payments = client.get(f"{API}/admin/applications/{ALICE}/payments").json()
        assert payments["payment_status"] == "paid"
        assert payments["payments"][0]["transaction_id"] == "TX-42"

    def test_comment(self, client, submitted):
        """Test admin comments reach the applicant"""
        response = client.post(
            f"{API}/admin/applications/{ALICE}/comment",
            json={"text": "Interview next week"},
            headers={"X-Admin-User": "maria"},
        )
        assert response.status_code == 201

        status = client.get(f"{API}/applications/{ALICE}/status").json()["application"]
        assert status["comments"][-1]["author"] == "maria"


class TestAdminFiles:
    """Tests for listing and streaming stored applicant files"""

    def test_list_files(self, client, submitted, pdf):
        """Test documents and attachments are listed per kind"""
        client.post(f"{API}/applications/{ALICE}/job-offer", files={"file": pdf("offer.pdf")})

        response = client.get(f"{API}/admin/applications/{ALICE}/files")
        assert response.status_code == 200
        files = response.json()["files"]
        assert sorted((f["kind"], f["index"]) for f in files) == [
            ("cv", 0), ("jobOffer", 0), ("passport", 0), ("photo", 0), ("qualifications", 0),
        ]
        assert "storage_key" not in files[0]

    def test_download_document(self, client, applicant_form, pdf):
        """Test an admin receives the exact bytes the applicant uploaded"""
        files = required_files(pdf)
        files[2] = ("cv", pdf("my cv.pdf", b"%PDF-1.4 alice cv"))
        client.post(f"{API}/applications/upload", data=applicant_form, files=files)

        response = client.get(f"{API}/admin/applications/{ALICE}/files/cv/0")
        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 alice cv"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="my_cv.pdf"'

    def test_download_second_upload(self, client, submitted, pdf):
        """Test the index selects files across re-uploads, oldest first"""
        client.post(
            f"{API}/applications/upload",
            data={"email": ALICE},
            files=[("cv", pdf("cv-v2.pdf", b"%PDF-1.4 second cv"))],
        )

        response = client.get(f"{API}/admin/applications/{ALICE}/files/cv/1")
        assert response.content == b"%PDF-1.4 second cv"

    def test_missing_index(self, client, submitted):
        """Test 404 past the last file of a kind"""
        response = client.get(f"{API}/admin/applications/{ALICE}/files/passport/3")
        assert response.status_code == 404
        assert response.json()["message"] == "File not found"

    def test_unknown_kind(self, client, submitted):
        """Test 400 for kinds outside the application"""
        response = client.get(f"{API}/admin/applications/{ALICE}/files/edited_cv/0")
        assert response.status_code == 400
