"""Applications domain module - applicant record, review state machine

The engine is pure: it takes a record and an event and returns the next
record. Persistence and file storage live behind the ports.
"""

from .models import (
    MAX_UPLOADS,
    PREFERRED_COUNTRIES,
    PREFERRED_JOBS,
    PENDING_REVIEW_STATUSES,
    ApplicationRecord,
    ApplicationStatus,
    Attachment,
    AttachmentStatus,
    Comment,
    CommentVisibility,
    DocumentReview,
    JobPreferences,
    PaymentRecord,
    PaymentStatus,
    PersonalInfo,
    ReuploadRequest,
    ReuploadRequestStatus,
    UploadedFile,
    UploadHistoryEntry,
)
from .engine import (
    ApplicationStatusEngine,
    RecordResult,
    ReuploadResult,
    ReviewResult,
    StatusChangeResult,
    UploadResult,
    normalize_email,
    utc_now,
)
from .views import client_view, document_counts

__all__ = [
    "MAX_UPLOADS",
    "PREFERRED_COUNTRIES",
    "PREFERRED_JOBS",
    "PENDING_REVIEW_STATUSES",
    "ApplicationRecord",
    "ApplicationStatus",
    "Attachment",
    "AttachmentStatus",
    "Comment",
    "CommentVisibility",
    "DocumentReview",
    "JobPreferences",
    "PaymentRecord",
    "PaymentStatus",
    "PersonalInfo",
    "ReuploadRequest",
    "ReuploadRequestStatus",
    "UploadedFile",
    "UploadHistoryEntry",
    "ApplicationStatusEngine",
    "RecordResult",
    "ReuploadResult",
    "ReviewResult",
    "StatusChangeResult",
    "UploadResult",
    "normalize_email",
    "utc_now",
    "client_view",
    "document_counts",
]
