"""Editing API endpoints

Client: submit a request, check status, report payment, download with a
token. Admin: list, inspect, upload edited files, verify payment and issue
download tokens.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from config import Settings, get_settings
from dependencies import get_editing_service, get_reviewer
from domain.documents import DocumentKind
from domain.editing import Deliverable, EditingContact
from uploads import read_uploads, stream_chunks
from .schemas import (
    DownloadTokenResponse,
    EditingListResponse,
    EditingRequestResponse,
    EditingStatusResponse,
    SubmitPaymentRequest,
    VerifyPaymentRequest,
)
from .service import EditingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/editing", tags=["Editing"])

Service = Annotated[EditingService, Depends(get_editing_service)]
AppSettings = Annotated[Settings, Depends(get_settings)]
OptionalFile = Optional[UploadFile]


def _as_list(upload: OptionalFile) -> list:
    return [upload] if upload is not None else []


# =============================================================================
# CLIENT ENDPOINTS
# =============================================================================

@router.post("/request", response_model=EditingRequestResponse)
async def submit_editing_request(
    service: Service,
    settings: AppSettings,
    full_name: Annotated[str, Form()],
    email: Annotated[str, Form()],
    phone: Annotated[str, Form()],
    service_type: Annotated[str, Form()],
    amount: Annotated[float, Form()],
    instructions: Annotated[Optional[str], Form()] = None,
    cv: Annotated[OptionalFile, File()] = None,
    cover: Annotated[OptionalFile, File()] = None,
):
    uploads = await read_uploads(
        {Deliverable.CV.value: _as_list(cv), Deliverable.COVER.value: _as_list(cover)},
        settings.MAX_UPLOAD_SIZE_BYTES,
    )
    contact = EditingContact(full_name=full_name, email=email, phone=phone)
    record = await service.create_request(contact, service_type, amount, instructions, uploads)
    return EditingRequestResponse(
        message="Editing request submitted successfully",
        email=record.email,
        status=record.status.value,
    )


@router.get("/status/{email}", response_model=EditingStatusResponse)
def get_editing_status(email: str, service: Service):
    """Client status. No file paths or storage keys."""
    return EditingStatusResponse(status=service.client_status(email))


@router.post("/submit-payment/{email}")
async def submit_payment(email: str, body: SubmitPaymentRequest, service: Service) -> dict:
    await service.submit_payment(email, body.transaction_id)
    return {"success": True, "message": "Payment information submitted. Awaiting admin verification."}


@router.get("/download/{token}/{kind}")
async def download_edited_file(token: str, kind: str, service: Service):
    """Single-use download of a paid deliverable (kind: cv | cover)."""
    filename, stream = await service.download(token, kind)
    return StreamingResponse(
        stream_chunks(stream),
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


# =============================================================================
# ADMIN ENDPOINTS
# =============================================================================

@router.get("/admin/all", response_model=EditingListResponse)
def list_editing_requests(service: Service):
    return EditingListResponse(
        requests=[r.model_dump(mode="json") for r in service.list_requests()],
    )


@router.get("/admin/status/{email}", response_model=EditingStatusResponse)
def get_admin_editing_status(email: str, service: Service):
    """Full record including storage keys and the pending transaction."""
    return EditingStatusResponse(status=service.get_record(email).model_dump(mode="json"))


@router.post("/upload-edited/{email}")
async def upload_edited_files(
    email: str,
    service: Service,
    settings: AppSettings,
    edited_cv: Annotated[OptionalFile, File()] = None,
    edited_cover: Annotated[OptionalFile, File()] = None,
) -> dict:
    uploads = await read_uploads(
        {
            DocumentKind.EDITED_CV.value: _as_list(edited_cv),
            DocumentKind.EDITED_COVER.value: _as_list(edited_cover),
        },
        settings.MAX_UPLOAD_SIZE_BYTES,
    )
    record = await service.upload_edited_files(email, uploads)
    return {"success": True, "status": record.status.value}


@router.post("/verify-payment/{email}")
async def verify_payment(
    email: str,
    body: VerifyPaymentRequest,
    service: Service,
    reviewer: Annotated[str, Depends(get_reviewer)],
) -> dict:
    record = await service.verify_payment(email, body.transaction_id, body.amount, reviewer)
    return {"success": True, "message": "Payment verified successfully", "status": record.status.value}


@router.post("/generate-download-token/{email}", response_model=DownloadTokenResponse)
def generate_download_token(email: str, service: Service, settings: AppSettings):
    token = service.generate_download_token(email)
    return DownloadTokenResponse(
        token=token.token,
        expires_at=token.expires_at,
        expires_in=settings.DOWNLOAD_TOKEN_TTL_SECONDS,
    )
