"""Applications API endpoints

Applicant endpoints (upload, status, job offer/contract) and admin review
endpoints. Portal errors raised by the service are mapped to HTTP responses
by the exception handler registered in main.py.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import StreamingResponse

from config import Settings, get_settings
from dependencies import get_application_service, get_reviewer
from domain.applications import JobPreferences, PersonalInfo, normalize_email
from domain.documents import DocumentKind
from uploads import read_upload, read_uploads, stream_chunks
from .schemas import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationSummary,
    AttachmentResponse,
    AttachmentStatusRequest,
    CommentRequest,
    PaymentListResponse,
    PaymentRequest,
    ReuploadRequestBody,
    ReuploadResponse,
    ReviewDocumentRequest,
    ReviewDocumentResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    StoredFileInfo,
    StoredFileListResponse,
    UploadResponse,
)
from .service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])
admin_router = APIRouter(prefix="/admin/applications", tags=["Admin"])

Service = Annotated[ApplicationService, Depends(get_application_service)]
Reviewer = Annotated[str, Depends(get_reviewer)]
FileList = Optional[List[UploadFile]]


# =============================================================================
# APPLICANT ENDPOINTS
# =============================================================================

@router.post("/upload", response_model=UploadResponse)
async def upload_application(
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
    email: Annotated[str, Form()],
    full_name: Annotated[Optional[str], Form()] = None,
    phone: Annotated[Optional[str], Form()] = None,
    age: Annotated[Optional[int], Form()] = None,
    gender: Annotated[Optional[str], Form()] = None,
    marital_status: Annotated[Optional[str], Form()] = None,
    country: Annotated[Optional[str], Form()] = None,
    visa_type: Annotated[Optional[str], Form()] = None,
    preferred_country: Annotated[Optional[str], Form()] = None,
    preferred_job: Annotated[Optional[str], Form()] = None,
    additional_info: Annotated[Optional[str], Form()] = None,
    passport: Annotated[FileList, File()] = None,
    photo: Annotated[FileList, File()] = None,
    cv: Annotated[FileList, File()] = None,
    cover_letter: Annotated[FileList, File(alias="coverLetter")] = None,
    qualifications: Annotated[FileList, File()] = None,
    experience: Annotated[FileList, File()] = None,
    documents: Annotated[FileList, File()] = None,
):
    """Submit a new application or re-upload documents.

    The first upload for an email creates the application and requires the
    full personal information and job preferences. Later uploads (at most
    MAX_UPLOADS in total) only need the email and the files.

    Example:
        curl -X POST http://localhost:8000/api/v1/applications/upload \\
             -F "email=alice@example.com" -F "full_name=Alice" ... \\
             -F "passport=@passport.pdf" -F "cv=@cv.pdf"
    """
    uploads = await read_uploads(
        {
            DocumentKind.PASSPORT.value: passport,
            DocumentKind.PHOTO.value: photo,
            DocumentKind.CV.value: cv,
            DocumentKind.COVER_LETTER.value: cover_letter,
            DocumentKind.QUALIFICATIONS.value: qualifications,
            DocumentKind.EXPERIENCE.value: experience,
            DocumentKind.DOCUMENTS.value: documents,
        },
        settings.MAX_UPLOAD_SIZE_BYTES,
    )
    personal_info = PersonalInfo(
        full_name=full_name,
        email=email,
        phone=phone,
        age=age,
        gender=gender,
        marital_status=marital_status,
        country=country,
        visa_type=visa_type,
    )
    job_preferences = JobPreferences(
        preferred_country=preferred_country,
        preferred_job=preferred_job,
        additional_info=additional_info,
    )

    result = await service.submit_upload(personal_info, job_preferences, uploads)

    if result.is_reupload:
        message = f"Documents re-uploaded successfully (upload {result.upload_count})"
    else:
        message = "Application submitted successfully"
    return UploadResponse(
        message=message,
        email=result.record.email,
        status=result.record.status.value,
        is_reupload=result.is_reupload,
        documents=[k.value for k in result.kinds],
        upload_count=result.upload_count,
        remaining_uploads=result.remaining_uploads,
        max_uploads_reached=result.max_uploads_reached,
    )


@router.get("/{email}/status")
def get_application_status(email: str, service: Service) -> dict:
    """Client view: review progress, re-upload requests and admin comments."""
    return {"success": True, "application": service.client_status(email)}


@router.post("/{email}/job-offer", response_model=AttachmentResponse)
async def upload_job_offer(
    email: str,
    file: Annotated[UploadFile, File()],
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
):
    pending = await read_upload(DocumentKind.JOB_OFFER.value, file, settings.MAX_UPLOAD_SIZE_BYTES)
    record = await service.attach_document(email, DocumentKind.JOB_OFFER.value, pending)
    return AttachmentResponse(message="Job offer uploaded successfully", status=record.job_offer.status.value)


@router.post("/{email}/contract", response_model=AttachmentResponse)
async def upload_contract(
    email: str,
    file: Annotated[UploadFile, File()],
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
):
    pending = await read_upload(DocumentKind.CONTRACT.value, file, settings.MAX_UPLOAD_SIZE_BYTES)
    record = await service.attach_document(email, DocumentKind.CONTRACT.value, pending)
    return AttachmentResponse(message="Contract uploaded successfully", status=record.contract.status.value)


# =============================================================================
# ADMIN ENDPOINTS
# =============================================================================

@admin_router.get("", response_model=ApplicationListResponse)
def list_applications(service: Service):
    """All applications, newest first."""
    records = service.list_applications()
    return ApplicationListResponse(
        applications=[ApplicationSummary.from_record(r) for r in records],
        total=len(records),
    )


@admin_router.get("/pending-review", response_model=ApplicationListResponse)
def list_pending_review(service: Service):
    """Applications waiting for an admin (received, re-upload requested, changes required)."""
    records = service.list_pending_review()
    return ApplicationListResponse(
        applications=[ApplicationSummary.from_record(r) for r in records],
        total=len(records),
    )


@admin_router.get("/{email}", response_model=ApplicationDetailResponse)
def get_application(email: str, service: Service):
    return ApplicationDetailResponse(application=service.get_record(email).model_dump(mode="json"))


@admin_router.delete("/{email}")
async def delete_application(email: str, service: Service) -> dict:
    removed = await service.delete_application(email)
    return {"success": True, "message": "Application deleted", "files_removed": removed}


@admin_router.post("/{email}/document/review", response_model=ReviewDocumentResponse)
async def review_document(email: str, body: ReviewDocumentRequest, service: Service, reviewer: Reviewer):
    """Approve or reject one document; the overall status is re-derived."""
    result = await service.review_document(email, body.document_type, body.status, body.comments, reviewer)
    return ReviewDocumentResponse(
        email=result.record.email,
        document_type=result.kind.value,
        review_status=result.review.status.value,
        overall_status=result.overall_status.value,
        rejected_documents=[k.value for k in result.rejected_kinds],
        rejection_counts=result.record.rejection_counts(),
        reupload_request_created=result.created_request is not None,
        completed_requests=result.completed_requests,
    )


@admin_router.post("/{email}/request-reupload", response_model=ReuploadResponse)
async def request_reupload(email: str, body: ReuploadRequestBody, service: Service):
    result = await service.request_reupload(email, body.document_types, body.message)
    return ReuploadResponse(
        email=result.record.email,
        status=result.record.status.value,
        documents=[k.value for k in result.request.documents],
        message=result.request.message,
        created=result.created,
    )


@admin_router.put("/{email}/status", response_model=StatusUpdateResponse)
async def update_status(email: str, body: StatusUpdateRequest, service: Service, reviewer: Reviewer):
    result = await service.transition_status(email, body.status, body.notes, reviewer)
    return StatusUpdateResponse(
        email=result.record.email,
        old_status=result.old_status.value,
        new_status=result.new_status.value,
        completed_requests=result.completed_requests,
    )


@admin_router.post("/{email}/comment", status_code=status.HTTP_201_CREATED)
async def add_comment(email: str, body: CommentRequest, service: Service, reviewer: Reviewer) -> dict:
    record = await service.add_comment(email, body.text, reviewer)
    return {"success": True, "comments": len(record.comments)}


@admin_router.put("/{email}/job-offer/status")
async def update_job_offer_status(email: str, body: AttachmentStatusRequest, service: Service) -> dict:
    record = await service.set_attachment_status(email, DocumentKind.JOB_OFFER.value, body.status)
    return {"success": True, "status": record.job_offer.status.value}


@admin_router.put("/{email}/contract/status")
async def update_contract_status(email: str, body: AttachmentStatusRequest, service: Service) -> dict:
    record = await service.set_attachment_status(email, DocumentKind.CONTRACT.value, body.status)
    return {"success": True, "status": record.contract.status.value}


@admin_router.post("/{email}/verify-payment")
async def verify_payment(email: str, body: PaymentRequest, service: Service, reviewer: Reviewer) -> dict:
    record = await service.record_payment(
        email, body.transaction_id, body.amount, body.service_type, body.notes or "", reviewer,
    )
    return {"success": True, "payment_status": record.payment_status.value}


@admin_router.get("/{email}/payments", response_model=PaymentListResponse)
def list_payments(email: str, service: Service):
    record = service.get_record(email)
    return PaymentListResponse(
        email=record.email,
        payment_status=record.payment_status.value,
        payments=[p.model_dump(mode="json") for p in record.payments],
    )


@admin_router.get("/{email}/files", response_model=StoredFileListResponse)
def list_files(email: str, service: Service):
    """Stored documents, job offer and contract of one application."""
    files = service.list_files(email)
    return StoredFileListResponse(
        email=normalize_email(email),
        files=[
            StoredFileInfo(
                kind=kind.value,
                index=index,
                filename=uploaded.filename,
                original_name=uploaded.original_name,
                size=uploaded.size,
                mime_type=uploaded.mime_type,
                upload_number=uploaded.upload_number,
                uploaded_at=uploaded.uploaded_at,
            )
            for kind, index, uploaded in files
        ],
    )


@admin_router.get("/{email}/files/{kind}/{index}")
async def download_file(email: str, kind: str, index: int, service: Service):
    """Stream one stored file (index within the kind, oldest first)."""
    uploaded, stream = await service.open_file(email, kind, index)
    return StreamingResponse(
        stream_chunks(stream),
        media_type=uploaded.mime_type or "application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{uploaded.filename}"',
            "Cache-Control": "no-store",
        },
    )
