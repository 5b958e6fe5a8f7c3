"""Pydantic schemas for the applications API

Request/response models for applicant and admin endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from domain.applications import ApplicationRecord


# ============================================================================
# Applicant
# ============================================================================

class UploadResponse(BaseModel):
    """Response for POST /applications/upload"""
    success: bool = True
    message: str
    email: str
    status: str
    is_reupload: bool
    documents: List[str]
    upload_count: int
    remaining_uploads: int
    max_uploads_reached: bool


class AttachmentResponse(BaseModel):
    success: bool = True
    message: str
    status: str


# ============================================================================
# Admin requests
# ============================================================================

class ReviewDocumentRequest(BaseModel):
    """Approve or reject one document kind"""
    document_type: str = Field(..., description="Document kind, e.g. passport or coverLetter")
    status: str = Field(..., description="approved | rejected")
    comments: Optional[str] = Field(None, description="Reason shown to the applicant on rejection")


class ReuploadRequestBody(BaseModel):
    document_types: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class CommentRequest(BaseModel):
    text: str


class AttachmentStatusRequest(BaseModel):
    status: str = Field(..., description="pending | uploaded | reviewed")


class PaymentRequest(BaseModel):
    transaction_id: str
    amount: float
    service_type: Optional[str] = None
    notes: Optional[str] = ""


# ============================================================================
# Admin responses
# ============================================================================

class ReviewDocumentResponse(BaseModel):
    success: bool = True
    email: str
    document_type: str
    review_status: str
    overall_status: str
    rejected_documents: List[str]
    rejection_counts: Dict[str, int]
    reupload_request_created: bool
    completed_requests: int


class ReuploadResponse(BaseModel):
    success: bool = True
    email: str
    status: str
    documents: List[str]
    message: str
    created: bool


class StatusUpdateResponse(BaseModel):
    success: bool = True
    email: str
    old_status: str
    new_status: str
    completed_requests: int


class ApplicationSummary(BaseModel):
    """Row in the admin application list"""
    email: str
    full_name: Optional[str] = None
    status: str
    upload_count: int
    preferred_country: Optional[str] = None
    preferred_job: Optional[str] = None
    rejected_documents: List[str]
    payment_status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ApplicationRecord) -> "ApplicationSummary":
        return cls(
            email=record.email,
            full_name=record.personal_info.full_name,
            status=record.status.value,
            upload_count=record.upload_count,
            preferred_country=record.job_preferences.preferred_country,
            preferred_job=record.job_preferences.preferred_job,
            rejected_documents=[k.value for k in record.rejected_kinds()],
            payment_status=record.payment_status.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationSummary]
    total: int


class ApplicationDetailResponse(BaseModel):
    application: Dict[str, Any]


class PaymentListResponse(BaseModel):
    email: str
    payment_status: str
    payments: List[Dict[str, Any]]


class StoredFileInfo(BaseModel):
    """One stored file; fetch it from /files/{kind}/{index}."""
    kind: str
    index: int
    filename: str
    original_name: str
    size: int
    mime_type: Optional[str] = None
    upload_number: int
    uploaded_at: Optional[datetime] = None


class StoredFileListResponse(BaseModel):
    email: str
    files: List[StoredFileInfo]
