"""Application service - load, transition, save.

Each operation loads one record, applies one ApplicationStatusEngine
transition and saves the result while holding the record lock for that
email, so operations on one email are serialized within a process.
"""

import logging
from typing import BinaryIO, Dict, List, Optional, Tuple

from domain.applications import (
    PENDING_REVIEW_STATUSES,
    ApplicationRecord,
    ApplicationStatusEngine,
    JobPreferences,
    PersonalInfo,
    ReuploadResult,
    ReviewResult,
    StatusChangeResult,
    UploadResult,
    UploadedFile,
    client_view,
    normalize_email,
)
from domain.applications.ports import ApplicationRepositoryPort
from domain.documents import APPLICANT_DOCUMENT_KINDS, DocumentKind, parse_document_kind
from domain.documents.ports import ObjectStoragePort
from domain.errors import NotFoundError, ValidationError
from infrastructure.locking import RecordLocks
from observability.metrics import (
    application_status_changes_total,
    application_uploads_total,
    document_reviews_total,
)
from observability.operations import log_rejection
from uploads import PendingFile, store_pending

logger = logging.getLogger(__name__)

# Storage kinds removed together with an application record
APPLICATION_STORAGE_KINDS = tuple(k.value for k in APPLICANT_DOCUMENT_KINDS) + (
    DocumentKind.JOB_OFFER.value,
    DocumentKind.CONTRACT.value,
)


class ApplicationService:
    """Applicant-facing and admin operations on application records."""

    def __init__(
        self,
        repository: ApplicationRepositoryPort,
        storage: ObjectStoragePort,
        engine: Optional[ApplicationStatusEngine] = None,
        locks: Optional[RecordLocks] = None,
    ):
        self.repository = repository
        self.storage = storage
        self.engine = engine or ApplicationStatusEngine()
        self.locks = locks or RecordLocks()

    def _locked(self, email: str):
        return self.locks.hold(f"application:{normalize_email(email)}")

    def get_record(self, email: str) -> ApplicationRecord:
        """Raises NotFoundError if no application exists for email."""
        record = self.repository.load(normalize_email(email))
        if record is None:
            raise NotFoundError("Application not found")
        return record

    # ------------------------------------------------------------------
    # Applicant operations
    # ------------------------------------------------------------------

    async def submit_upload(
        self,
        personal_info: PersonalInfo,
        job_preferences: JobPreferences,
        uploads: Dict[str, List[PendingFile]],
    ) -> UploadResult:
        email = normalize_email(personal_info.email)
        with log_rejection("Upload", email):
            async with self._locked(email):
                existing = self.repository.load(email) if email else None
                self.engine.validate_upload(
                    existing,
                    {kind: len(files) for kind, files in uploads.items()},
                    personal_info,
                    job_preferences,
                )

                stored = {}
                for kind, files in uploads.items():
                    stored[kind] = [await store_pending(self.storage, email, f) for f in files]

                result = self.engine.submit_upload(existing, stored, personal_info, job_preferences)
                self.repository.save(result.record)

        application_uploads_total.labels(kind="reupload" if result.is_reupload else "new").inc()
        logger.info(
            f"Upload {result.upload_count}/{self.engine.max_uploads} accepted for {email}: "
            f"{', '.join(k.value for k in result.kinds)}",
            extra={"email": email, "status": result.record.status.value},
        )
        return result

    def client_status(self, email: str) -> dict:
        with log_rejection("Status lookup", email):
            record = self.get_record(email)
        return client_view(record, self.engine.max_uploads)

    async def attach_document(self, email: str, which: str, pending: PendingFile) -> ApplicationRecord:
        """Store a job offer or contract for an existing application."""
        email = normalize_email(email)
        with log_rejection(f"{which} upload", email):
            async with self._locked(email):
                record = self.get_record(email)
                uploaded = await store_pending(self.storage, email, pending)

                if which == DocumentKind.JOB_OFFER.value:
                    result = self.engine.attach_job_offer(record, uploaded)
                else:
                    result = self.engine.attach_contract(record, uploaded)
                self.repository.save(result.record)

        logger.info(f"{which} attached for {email}", extra={"email": email})
        return result.record

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    async def review_document(
        self,
        email: str,
        kind: str,
        decision: str,
        comments: Optional[str] = None,
        reviewer: str = "admin",
    ) -> ReviewResult:
        with log_rejection("Document review", email):
            async with self._locked(email):
                record = self.get_record(email)
                result = self.engine.review_document(record, kind, decision, comments, reviewer)
                self.repository.save(result.record)

        document_reviews_total.labels(document_kind=result.kind.value, decision=decision).inc()
        if result.record.status != record.status:
            application_status_changes_total.labels(status=result.record.status.value).inc()
        logger.info(
            f"Document {result.kind.value} {decision} by {reviewer}; "
            f"application now {result.overall_status.value}",
            extra={
                "email": result.record.email,
                "kind": result.kind.value,
                "decision": decision,
                "status": result.overall_status.value,
            },
        )
        return result

    async def request_reupload(
        self, email: str, document_kinds: List[str], message: Optional[str] = None,
    ) -> ReuploadResult:
        with log_rejection("Re-upload request", email):
            async with self._locked(email):
                record = self.get_record(email)
                result = self.engine.request_reupload(record, document_kinds, message)
                self.repository.save(result.record)

        application_status_changes_total.labels(status=result.record.status.value).inc()
        logger.info(
            f"Re-upload requested for {', '.join(k.value for k in result.request.documents)}"
            f" (new request: {result.created})",
            extra={"email": result.record.email, "status": result.record.status.value},
        )
        return result

    async def transition_status(
        self,
        email: str,
        new_status: str,
        reviewer_notes: Optional[str] = None,
        reviewer: str = "admin",
    ) -> StatusChangeResult:
        with log_rejection("Status change", email):
            async with self._locked(email):
                record = self.get_record(email)
                result = self.engine.transition_status(record, new_status, reviewer_notes, reviewer)
                self.repository.save(result.record)

        application_status_changes_total.labels(status=result.new_status.value).inc()
        logger.info(
            f"Status changed {result.old_status.value} -> {result.new_status.value} by {reviewer}",
            extra={"email": result.record.email, "status": result.new_status.value},
        )
        return result

    async def add_comment(self, email: str, text: str, author: str = "Admin") -> ApplicationRecord:
        with log_rejection("Comment", email):
            async with self._locked(email):
                result = self.engine.add_comment(self.get_record(email), text, author)
                self.repository.save(result.record)
        return result.record

    async def set_attachment_status(self, email: str, which: str, status: str) -> ApplicationRecord:
        with log_rejection(f"{which} status update", email):
            async with self._locked(email):
                result = self.engine.set_attachment_status(self.get_record(email), which, status)
                self.repository.save(result.record)
        logger.info(f"{which} marked {status}", extra={"email": result.record.email})
        return result.record

    async def record_payment(
        self,
        email: str,
        transaction_id: str,
        amount: float,
        service_type: Optional[str] = None,
        notes: str = "",
        verifier: str = "Admin",
    ) -> ApplicationRecord:
        with log_rejection("Payment verification", email):
            async with self._locked(email):
                result = self.engine.record_payment(
                    self.get_record(email), transaction_id, amount, service_type, notes, verifier,
                )
                self.repository.save(result.record)
        logger.info(f"Payment {transaction_id} recorded by {verifier}", extra={"email": result.record.email})
        return result.record

    def list_files(self, email: str) -> List[Tuple[DocumentKind, int, UploadedFile]]:
        """Every stored file of an application as (kind, index, metadata)."""
        with log_rejection("File listing", email):
            record = self.get_record(email)
        return [
            (kind, index, uploaded)
            for kind in DocumentKind
            if kind.value in APPLICATION_STORAGE_KINDS
            for index, uploaded in enumerate(self._files_of(record, kind))
        ]

    async def open_file(self, email: str, kind: str, index: int = 0) -> Tuple[UploadedFile, BinaryIO]:
        """Open one stored applicant document, job offer or contract.

        Raises:
            ValidationError: Not an application file kind
            NotFoundError: No such file on the record or in storage
        """
        with log_rejection("File download", email):
            record = self.get_record(email)
            try:
                doc_kind = parse_document_kind(kind)
            except ValueError:
                doc_kind = None
            if doc_kind is None or doc_kind.value not in APPLICATION_STORAGE_KINDS:
                raise ValidationError(f"Unknown document kind: {kind!r}")

            files = self._files_of(record, doc_kind)
            if not 0 <= index < len(files):
                raise NotFoundError("File not found")
            uploaded = files[index]
            if not await self.storage.file_exists(uploaded.storage_key):
                raise NotFoundError("File not found")
            stream = await self.storage.retrieve_file(uploaded.storage_key)
        return uploaded, stream

    @staticmethod
    def _files_of(record: ApplicationRecord, kind: DocumentKind) -> List[UploadedFile]:
        if kind == DocumentKind.JOB_OFFER:
            return [record.job_offer.file] if record.job_offer else []
        if kind == DocumentKind.CONTRACT:
            return [record.contract.file] if record.contract else []
        return record.document_slots.get(kind, [])

    def list_applications(self) -> List[ApplicationRecord]:
        """All applications, newest first."""
        return self.repository.list_all()

    def list_pending_review(self) -> List[ApplicationRecord]:
        return [r for r in self.repository.list_all() if r.status in PENDING_REVIEW_STATUSES]

    async def delete_application(self, email: str) -> int:
        """Delete the record and its stored files. Returns files removed."""
        email = normalize_email(email)
        with log_rejection("Delete", email):
            async with self._locked(email):
                self.get_record(email)
                removed = 0
                for kind in APPLICATION_STORAGE_KINDS:
                    removed += await self.storage.delete_prefix(f"{email}/{kind}/")
                self.repository.delete(email)

        logger.info(f"Application deleted with {removed} files", extra={"email": email})
        return removed
