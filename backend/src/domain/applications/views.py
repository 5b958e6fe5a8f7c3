"""Client-facing projection of an ApplicationRecord.

Storage keys, reviewer names and system/internal comments never leave this
module; only admin-authored comments are shown to the applicant.
"""

from typing import Any, Dict

from domain.documents import APPLICANT_DOCUMENT_KINDS, ReviewStatus

from .models import MAX_UPLOADS, ApplicationRecord


def document_counts(record: ApplicationRecord) -> Dict[str, int]:
    """Count uploaded applicant kinds by their current review status."""
    counts = {"total": 0, "approved": 0, "rejected": 0, "pending": 0}
    for kind in APPLICANT_DOCUMENT_KINDS:
        if not record.has_uploaded(kind):
            continue
        counts["total"] += 1
        counts[record.review_status(kind).value] += 1
    return counts


def client_view(record: ApplicationRecord, max_uploads: int = MAX_UPLOADS) -> Dict[str, Any]:
    documents = {}
    for kind in APPLICANT_DOCUMENT_KINDS:
        if not record.has_uploaded(kind):
            continue
        review = record.document_reviews.get(kind)
        documents[kind.value] = {
            "files": [f.original_name for f in record.document_slots[kind]],
            "status": record.review_status(kind).value,
            "comments": review.comments if review and review.status == ReviewStatus.REJECTED else None,
        }

    return {
        "email": record.email,
        "full_name": record.personal_info.full_name,
        "status": record.status.value,
        "preferred_country": record.job_preferences.preferred_country,
        "preferred_job": record.job_preferences.preferred_job,
        "upload_info": {
            "upload_count": record.upload_count,
            "max_uploads": max_uploads,
            "remaining_uploads": max(max_uploads - record.upload_count, 0),
            "max_uploads_reached": record.upload_count >= max_uploads,
            "last_upload_at": record.last_upload_at,
            "history": [
                {
                    "upload_number": entry.upload_number,
                    "timestamp": entry.timestamp,
                    "files": [k.value for k in entry.files],
                }
                for entry in record.upload_history
            ],
        },
        "documents": documents,
        "document_counts": document_counts(record),
        "rejection_counts": record.rejection_counts(),
        "reupload_requests": [
            {
                "documents": [k.value for k in r.documents],
                "message": r.message,
                "requested_at": r.requested_at,
            }
            for r in record.pending_reupload_requests()
        ],
        "comments": [
            {"text": c.text, "timestamp": c.timestamp, "author": c.author}
            for c in record.client_comments()
        ],
        "job_offer": record.job_offer.status.value if record.job_offer else None,
        "contract": record.contract.status.value if record.contract else None,
        "payment_status": record.payment_status.value,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
