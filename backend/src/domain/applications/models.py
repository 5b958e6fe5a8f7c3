"""Applicant record aggregate and its value objects.

The whole record is persisted as one JSON document per applicant email, so
every model here round-trips through ``model_dump(mode="json")`` /
``model_validate``.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.documents import DocumentKind, ReviewStatus


MAX_UPLOADS = 3

PREFERRED_COUNTRIES = (
    "Canada", "Germany", "Luxembourg", "Scotland", "Netherlands", "Australia", "Europe",
)

PREFERRED_JOBS = (
    # Skilled positions
    "Nurses", "Plant Operators", "Electricians", "Plumbers", "Mechanics", "Chefs",
    "Beauticians", "Caregivers",
    # Unskilled positions
    "Drivers", "Factory Workers", "Food Packers", "Security Guards", "Farm Workers",
    "Storekeepers", "Housekeepers", "Cleaners", "Waitresses", "Cashiers",
)


class ApplicationStatus(str, Enum):
    """Overall application status.

    State flow:
        received -> review -> documents-approved -> processed
        review -> changes-required -> reupload-requested -> received (re-upload)
    """
    RECEIVED = "received"
    REVIEW = "review"
    DOCUMENTS_APPROVED = "documents-approved"
    CHANGES_REQUIRED = "changes-required"
    REUPLOAD_REQUESTED = "reupload-requested"
    PROCESSED = "processed"
    EDITING_IN_PROGRESS = "editing_in_progress"
    EDITING_COMPLETED = "editing_completed"
    EDITING_PAID = "editing_paid"


# Statuses that put an application in the admin review queue
PENDING_REVIEW_STATUSES = frozenset({
    ApplicationStatus.RECEIVED,
    ApplicationStatus.REUPLOAD_REQUESTED,
    ApplicationStatus.CHANGES_REQUIRED,
})


class CommentVisibility(str, Enum):
    """Who a comment is meant for. SYSTEM entries never reach a client view."""
    SYSTEM = "system"
    ADMIN = "admin"
    CLIENT = "client"


class ReuploadRequestStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class AttachmentStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    REVIEWED = "reviewed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class UploadedFile(BaseModel):
    """Metadata of one stored file. The engine never sees file bytes."""

    filename: str
    original_name: str
    size: int = Field(ge=0)
    storage_key: str
    mime_type: Optional[str] = None
    upload_number: int = 1
    uploaded_at: Optional[datetime] = None


class PersonalInfo(BaseModel):
    """Applicant personal data. Fields are optional so the engine can report
    every missing field at once instead of failing on the first."""

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    country: Optional[str] = None
    visa_type: Optional[str] = None


class JobPreferences(BaseModel):
    preferred_country: Optional[str] = None
    preferred_job: Optional[str] = None
    additional_info: Optional[str] = None


class DocumentReview(BaseModel):
    status: ReviewStatus = ReviewStatus.PENDING
    comments: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    rejection_count: int = Field(default=0, ge=0)


class ReuploadRequest(BaseModel):
    documents: List[DocumentKind]
    message: str
    requested_at: datetime
    status: ReuploadRequestStatus = ReuploadRequestStatus.PENDING
    completed_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ReuploadRequestStatus.PENDING

    def targets(self, kinds) -> bool:
        """True if this request covers exactly the given kinds (order-independent)."""
        return sorted(k.value for k in self.documents) == sorted(DocumentKind(k).value for k in kinds)

    def complete(self, at: datetime) -> None:
        self.status = ReuploadRequestStatus.COMPLETED
        self.completed_at = at


class Comment(BaseModel):
    text: str
    timestamp: datetime
    author: str
    visibility: CommentVisibility


class UploadHistoryEntry(BaseModel):
    timestamp: datetime
    upload_number: int
    files: List[DocumentKind]


class Attachment(BaseModel):
    """Job offer or employment contract uploaded after approval."""

    file: UploadedFile
    status: AttachmentStatus = AttachmentStatus.PENDING
    uploaded_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None


class PaymentRecord(BaseModel):
    transaction_id: str
    amount: float
    service_type: Optional[str] = None
    verified_at: datetime
    verified_by: str
    notes: str = ""
    status: str = "verified"


class ApplicationRecord(BaseModel):
    """Per-email applicant aggregate."""

    personal_info: PersonalInfo
    job_preferences: JobPreferences = Field(default_factory=JobPreferences)
    status: ApplicationStatus = ApplicationStatus.RECEIVED
    upload_count: int = Field(default=1, ge=1)
    document_slots: Dict[DocumentKind, List[UploadedFile]] = Field(default_factory=dict)
    document_reviews: Dict[DocumentKind, DocumentReview] = Field(default_factory=dict)
    reupload_requests: List[ReuploadRequest] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    upload_history: List[UploadHistoryEntry] = Field(default_factory=list)
    job_offer: Optional[Attachment] = None
    contract: Optional[Attachment] = None
    payments: List[PaymentRecord] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    last_upload_at: Optional[datetime] = None

    @property
    def email(self) -> str:
        return self.personal_info.email

    @property
    def payment_status(self) -> PaymentStatus:
        if any(p.status == "verified" for p in self.payments):
            return PaymentStatus.PAID
        return PaymentStatus.PENDING

    def review_status(self, kind: DocumentKind) -> ReviewStatus:
        review = self.document_reviews.get(kind)
        return review.status if review else ReviewStatus.PENDING

    def rejected_kinds(self) -> List[DocumentKind]:
        """Kinds currently rejected, sorted by value for stable comparison."""
        return sorted(
            (kind for kind, review in self.document_reviews.items()
             if review.status == ReviewStatus.REJECTED),
            key=lambda k: k.value,
        )

    def has_uploaded(self, kind: DocumentKind) -> bool:
        return bool(self.document_slots.get(kind))

    def pending_reupload_requests(self) -> List[ReuploadRequest]:
        return [r for r in self.reupload_requests if r.is_pending]

    def rejection_counts(self) -> Dict[str, int]:
        return {
            kind.value: review.rejection_count
            for kind, review in self.document_reviews.items()
            if review.rejection_count
        }

    def client_comments(self) -> List[Comment]:
        return [c for c in self.comments if c.visibility == CommentVisibility.ADMIN]
