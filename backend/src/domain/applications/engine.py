"""Application status state machine.

ApplicationStatusEngine applies one event (upload, review, re-upload request,
manual status change, ...) to one ApplicationRecord and returns a result
descriptor holding the next record state. The input record is never mutated;
callers persist ``result.record``.

Overall-status derivation after every review:
    1. any reviewed document rejected            -> changes-required
    2. all required + uploaded optional approved -> documents-approved
    3. otherwise                                 -> review
       (changes-required is kept, never silently cleared)
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from domain.documents import (
    APPLICANT_DOCUMENT_KINDS,
    MAX_FILES_PER_KIND,
    OPTIONAL_DOCUMENT_KINDS,
    REQUIRED_DOCUMENT_KINDS,
    DocumentKind,
    ReviewStatus,
)
from domain.errors import (
    InvalidRequestError,
    LimitExceededError,
    PreconditionError,
    ValidationError,
)
from .models import (
    MAX_UPLOADS,
    PREFERRED_COUNTRIES,
    PREFERRED_JOBS,
    ApplicationRecord,
    ApplicationStatus,
    Attachment,
    AttachmentStatus,
    Comment,
    CommentVisibility,
    DocumentReview,
    JobPreferences,
    PaymentRecord,
    PersonalInfo,
    ReuploadRequest,
    UploadedFile,
    UploadHistoryEntry,
)


Clock = Callable[[], datetime]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_PERSONAL_FIELDS = (
    "full_name", "email", "phone", "age", "gender", "marital_status", "country", "visa_type",
)

DEFAULT_REUPLOAD_MESSAGE = "Please update the following documents"

SYSTEM_AUTHOR = "System"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


@dataclass
class UploadResult:
    record: ApplicationRecord
    is_reupload: bool
    kinds: List[DocumentKind]
    max_uploads: int = MAX_UPLOADS

    @property
    def upload_count(self) -> int:
        return self.record.upload_count

    @property
    def remaining_uploads(self) -> int:
        return max(self.max_uploads - self.record.upload_count, 0)

    @property
    def max_uploads_reached(self) -> bool:
        return self.record.upload_count >= self.max_uploads


@dataclass
class ReviewResult:
    record: ApplicationRecord
    kind: DocumentKind
    review: DocumentReview
    created_request: Optional[ReuploadRequest] = None
    completed_requests: int = 0

    @property
    def overall_status(self) -> ApplicationStatus:
        return self.record.status

    @property
    def rejected_kinds(self) -> List[DocumentKind]:
        return self.record.rejected_kinds()


@dataclass
class ReuploadResult:
    record: ApplicationRecord
    request: ReuploadRequest
    created: bool


@dataclass
class StatusChangeResult:
    record: ApplicationRecord
    old_status: ApplicationStatus
    new_status: ApplicationStatus
    completed_requests: int = 0


@dataclass
class RecordResult:
    """Result of operations whose only output is the next record."""
    record: ApplicationRecord
    notes: List[str] = field(default_factory=list)


class ApplicationStatusEngine:
    """Pure state transitions over one applicant record.

    Args:
        clock: Returns the current time (injected for tests)
        max_uploads: Upload cap per applicant (default 3)
    """

    def __init__(self, clock: Clock = utc_now, max_uploads: int = MAX_UPLOADS):
        self.clock = clock
        self.max_uploads = max_uploads

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def validate_upload(
        self,
        record: Optional[ApplicationRecord],
        file_counts: Mapping[str, int],
        personal_info: Optional[PersonalInfo] = None,
        job_preferences: Optional[JobPreferences] = None,
    ) -> List[DocumentKind]:
        """Check an upload without applying it.

        Lets callers reject a submission before any file reaches storage.
        Returns the document kinds that carry at least one file.

        Raises:
            ValidationError: Missing personal/job-preference fields on a new
                application, unknown document kinds, or no files at all
            LimitExceededError: Existing record already used every upload
        """
        if record is not None and record.upload_count >= self.max_uploads:
            raise LimitExceededError(
                f"Maximum upload attempts ({self.max_uploads}) reached. "
                "Please contact admin for assistance."
            )

        kinds = []
        for raw_kind, count in (file_counts or {}).items():
            kind = self._applicant_kind(raw_kind)
            if not count:
                continue
            limit = MAX_FILES_PER_KIND[kind]
            if count > limit:
                raise ValidationError(
                    f"Too many files for {kind.value}: at most {limit} allowed (got {count})"
                )
            kinds.append(kind)
        if not kinds:
            raise ValidationError("No files uploaded. Please upload at least one document.")

        if record is None:
            self._validate_new_applicant(personal_info, job_preferences)
        elif job_preferences is not None:
            self._validate_job_preferences(job_preferences)
        return kinds

    def submit_upload(
        self,
        record: Optional[ApplicationRecord],
        files: Mapping[str, Sequence[UploadedFile]],
        personal_info: Optional[PersonalInfo] = None,
        job_preferences: Optional[JobPreferences] = None,
    ) -> UploadResult:
        """Create a record on first upload, or register a re-upload.

        Raises:
            ValidationError: See validate_upload
            LimitExceededError: Existing record already used every upload
        """
        files = files or {}
        kinds = self.validate_upload(
            record,
            {k: len(v) for k, v in files.items()},
            personal_info,
            job_preferences,
        )
        by_kind = {DocumentKind(k): list(v) for k, v in files.items() if v}
        now = self.clock()

        if record is None:
            record = self._create_record(personal_info, job_preferences, now)
            is_reupload = False
        else:
            record = record.model_copy(deep=True)
            record.upload_count += 1
            # Re-upload always restarts review
            record.status = ApplicationStatus.RECEIVED
            if job_preferences is not None:
                self._merge_job_preferences(record, job_preferences)
            is_reupload = True

        for kind in kinds:
            stamped = [
                f.model_copy(update={"upload_number": record.upload_count, "uploaded_at": now})
                for f in by_kind[kind]
            ]
            record.document_slots.setdefault(kind, []).extend(stamped)

        record.upload_history.append(UploadHistoryEntry(
            timestamp=now,
            upload_number=record.upload_count,
            files=kinds,
        ))
        record.last_upload_at = now
        record.updated_at = now

        return UploadResult(
            record=record,
            is_reupload=is_reupload,
            kinds=kinds,
            max_uploads=self.max_uploads,
        )

    def _validate_new_applicant(
        self,
        personal_info: Optional[PersonalInfo],
        job_preferences: Optional[JobPreferences],
    ) -> None:
        info = personal_info or PersonalInfo()
        missing = [name for name in REQUIRED_PERSONAL_FIELDS if getattr(info, name) in (None, "")]
        if missing:
            raise ValidationError(
                "Missing required fields. Please provide all personal information: "
                + ", ".join(missing)
            )
        if not EMAIL_PATTERN.match(normalize_email(info.email)):
            raise ValidationError("Invalid email format")

        prefs = job_preferences or JobPreferences()
        if not prefs.preferred_country or not prefs.preferred_job:
            raise ValidationError("Please select your preferred country and job")
        self._validate_job_preferences(prefs)

    @staticmethod
    def _create_record(
        personal_info: PersonalInfo,
        job_preferences: JobPreferences,
        now: datetime,
    ) -> ApplicationRecord:
        return ApplicationRecord(
            personal_info=personal_info.model_copy(update={"email": normalize_email(personal_info.email)}),
            job_preferences=JobPreferences(
                preferred_country=job_preferences.preferred_country,
                preferred_job=job_preferences.preferred_job,
                additional_info=job_preferences.additional_info or "",
            ),
            status=ApplicationStatus.RECEIVED,
            upload_count=1,
            created_at=now,
            updated_at=now,
        )

    def _merge_job_preferences(self, record: ApplicationRecord, prefs: JobPreferences) -> None:
        """Update only the preference fields provided in this upload."""
        if prefs.preferred_country:
            record.job_preferences.preferred_country = prefs.preferred_country
        if prefs.preferred_job:
            record.job_preferences.preferred_job = prefs.preferred_job
        if prefs.additional_info is not None:
            record.job_preferences.additional_info = prefs.additional_info

    @staticmethod
    def _validate_job_preferences(prefs: JobPreferences) -> None:
        if prefs.preferred_country and prefs.preferred_country not in PREFERRED_COUNTRIES:
            raise ValidationError(f"Unsupported preferred country: {prefs.preferred_country}")
        if prefs.preferred_job and prefs.preferred_job not in PREFERRED_JOBS:
            raise ValidationError(f"Unsupported preferred job: {prefs.preferred_job}")

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    def review_document(
        self,
        record: ApplicationRecord,
        kind: str,
        decision: str,
        comments: Optional[str] = None,
        reviewer: str = "admin",
    ) -> ReviewResult:
        """Record an approve/reject decision for one document kind.

        Raises:
            ValidationError: Unknown document kind or decision
        """
        doc_kind = self._applicant_kind(kind)
        try:
            status = ReviewStatus(decision)
        except ValueError:
            raise ValidationError(f"Invalid review decision: {decision!r}")
        if status == ReviewStatus.PENDING:
            raise ValidationError("Review decision must be 'approved' or 'rejected'")

        record = record.model_copy(deep=True)
        now = self.clock()

        previous = record.document_reviews.get(doc_kind)
        rejection_count = previous.rejection_count if previous else 0
        if status == ReviewStatus.REJECTED:
            rejection_count += 1

        review = DocumentReview(
            status=status,
            comments=comments,
            reviewed_at=now,
            reviewed_by=reviewer,
            rejection_count=rejection_count,
        )
        record.document_reviews[doc_kind] = review

        created_request = None
        if status == ReviewStatus.REJECTED:
            self._comment(
                record, now,
                f"Document {doc_kind.value} rejected: {comments or 'No reason provided'} "
                f"(attempt {rejection_count}/{self.max_uploads})",
            )
            rejected = record.rejected_kinds()
            if not any(r.is_pending and r.targets(rejected) for r in record.reupload_requests):
                created_request = ReuploadRequest(
                    documents=rejected,
                    message=comments or DEFAULT_REUPLOAD_MESSAGE,
                    requested_at=now,
                )
                record.reupload_requests.append(created_request)
        else:
            self._comment(record, now, f"Document {doc_kind.value} approved")

        completed = self._apply_derived_status(record, now)
        completed += self._prune_reupload_requests(record, now)
        record.updated_at = now

        return ReviewResult(
            record=record,
            kind=doc_kind,
            review=review,
            created_request=created_request,
            completed_requests=completed,
        )

    def derive_status(self, record: ApplicationRecord) -> ApplicationStatus:
        """Overall status implied by the current document reviews."""
        if record.rejected_kinds():
            return ApplicationStatus.CHANGES_REQUIRED
        if self.all_documents_approved(record):
            return ApplicationStatus.DOCUMENTS_APPROVED
        if record.status == ApplicationStatus.CHANGES_REQUIRED:
            return ApplicationStatus.CHANGES_REQUIRED
        return ApplicationStatus.REVIEW

    @staticmethod
    def all_documents_approved(record: ApplicationRecord) -> bool:
        required_ok = all(
            record.review_status(kind) == ReviewStatus.APPROVED
            for kind in REQUIRED_DOCUMENT_KINDS
        )
        optional_ok = all(
            record.review_status(kind) == ReviewStatus.APPROVED
            for kind in OPTIONAL_DOCUMENT_KINDS
            if record.has_uploaded(kind)
        )
        return required_ok and optional_ok

    def _apply_derived_status(self, record: ApplicationRecord, now: datetime) -> int:
        new_status = self.derive_status(record)
        completed = 0
        if new_status != record.status:
            if new_status == ApplicationStatus.CHANGES_REQUIRED:
                self._comment(record, now, "Changes required - some documents need revision")
            elif new_status == ApplicationStatus.DOCUMENTS_APPROVED:
                self._comment(record, now, "All documents approved - application ready for processing")
        if new_status == ApplicationStatus.DOCUMENTS_APPROVED:
            completed = self._complete_pending_requests(record, now)
        record.status = new_status
        return completed

    @staticmethod
    def _prune_reupload_requests(record: ApplicationRecord, now: datetime) -> int:
        """Complete pending requests that no longer target any rejected kind."""
        rejected = set(record.rejected_kinds())
        completed = 0
        for request in record.reupload_requests:
            if request.is_pending and not rejected.intersection(request.documents):
                request.complete(now)
                completed += 1
        return completed

    @staticmethod
    def _complete_pending_requests(record: ApplicationRecord, now: datetime) -> int:
        completed = 0
        for request in record.reupload_requests:
            if request.is_pending:
                request.complete(now)
                completed += 1
        return completed

    # ------------------------------------------------------------------
    # Re-upload requests and manual status changes
    # ------------------------------------------------------------------

    def request_reupload(
        self,
        record: ApplicationRecord,
        document_kinds: Iterable[str],
        message: Optional[str] = None,
    ) -> ReuploadResult:
        """Ask the applicant to resubmit rejected documents.

        Only the currently rejected subset of ``document_kinds`` is requested.

        Raises:
            ValidationError: Unknown document kind
            InvalidRequestError: None of the kinds is currently rejected
        """
        kinds = {self._applicant_kind(k) for k in document_kinds}
        rejected = sorted(
            (k for k in kinds if record.review_status(k) == ReviewStatus.REJECTED),
            key=lambda k: k.value,
        )
        if not rejected:
            raise InvalidRequestError("No rejected documents selected for re-upload")

        record = record.model_copy(deep=True)
        now = self.clock()

        existing = next(
            (r for r in record.reupload_requests if r.is_pending and r.targets(rejected)),
            None,
        )
        if existing is None:
            request = ReuploadRequest(
                documents=rejected,
                message=message or DEFAULT_REUPLOAD_MESSAGE,
                requested_at=now,
            )
            record.reupload_requests.append(request)
        else:
            request = existing

        record.status = ApplicationStatus.REUPLOAD_REQUESTED
        self._comment(
            record, now,
            f"Re-upload requested for: {', '.join(k.value for k in rejected)}. "
            f"Message: {request.message}",
        )
        record.updated_at = now

        return ReuploadResult(record=record, request=request, created=existing is None)

    def transition_status(
        self,
        record: ApplicationRecord,
        new_status: str,
        reviewer_notes: Optional[str] = None,
        reviewer: str = "admin",
    ) -> StatusChangeResult:
        """Set the overall status explicitly.

        Raises:
            ValidationError: Unknown status value
            PreconditionError: documents-approved requested while a required
                document is not approved
        """
        try:
            target = ApplicationStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status: {new_status!r}")

        if target == ApplicationStatus.DOCUMENTS_APPROVED:
            missing = sorted(
                k.value for k in REQUIRED_DOCUMENT_KINDS
                if record.review_status(k) != ReviewStatus.APPROVED
            )
            if missing:
                raise PreconditionError(
                    "Cannot mark as approved - some required documents are not approved yet: "
                    + ", ".join(missing)
                )

        record = record.model_copy(deep=True)
        now = self.clock()
        old_status = record.status
        record.status = target

        completed = 0
        if target == ApplicationStatus.DOCUMENTS_APPROVED:
            completed = self._complete_pending_requests(record, now)

        self._comment(
            record, now,
            f'Application status updated from "{old_status.value}" to "{target.value}"',
        )
        if reviewer_notes:
            self._comment(record, now, reviewer_notes, author=reviewer, visibility=CommentVisibility.ADMIN)
        record.updated_at = now

        return StatusChangeResult(
            record=record,
            old_status=old_status,
            new_status=target,
            completed_requests=completed,
        )

    # ------------------------------------------------------------------
    # Comments, attachments, payments
    # ------------------------------------------------------------------

    def add_comment(self, record: ApplicationRecord, text: str, author: str = "Admin") -> RecordResult:
        """Append an admin comment (visible to the applicant)."""
        if not text or not text.strip():
            raise ValidationError("Comment text is required")
        record = record.model_copy(deep=True)
        now = self.clock()
        self._comment(record, now, text.strip(), author=author, visibility=CommentVisibility.ADMIN)
        record.updated_at = now
        return RecordResult(record=record)

    def attach_job_offer(self, record: ApplicationRecord, file: UploadedFile) -> RecordResult:
        return self._attach(record, "job_offer", file, "Job offer letter uploaded")

    def attach_contract(self, record: ApplicationRecord, file: UploadedFile) -> RecordResult:
        return self._attach(record, "contract", file, "Employment contract uploaded")

    def _attach(self, record: ApplicationRecord, attr: str, file: UploadedFile, label: str) -> RecordResult:
        record = record.model_copy(deep=True)
        now = self.clock()
        setattr(record, attr, Attachment(
            file=file.model_copy(update={"uploaded_at": now}),
            status=AttachmentStatus.UPLOADED,
            uploaded_at=now,
        ))
        self._comment(record, now, f"{label}: {file.original_name}", author="Client")
        record.updated_at = now
        return RecordResult(record=record)

    def set_attachment_status(self, record: ApplicationRecord, which: str, status: str) -> RecordResult:
        """Update the status of the job offer or contract attachment.

        Raises:
            ValidationError: Unknown attachment or status
            InvalidRequestError: Attachment not uploaded yet
        """
        attrs = {
            DocumentKind.JOB_OFFER.value: ("job_offer", "Job offer"),
            DocumentKind.CONTRACT.value: ("contract", "Contract"),
        }
        if which not in attrs:
            raise ValidationError(f"Unknown attachment: {which!r}")
        try:
            new_status = AttachmentStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid attachment status: {status!r}")

        attr, label = attrs[which]
        if getattr(record, attr) is None:
            raise InvalidRequestError(f"No {label.lower()} found")

        record = record.model_copy(deep=True)
        now = self.clock()
        attachment = getattr(record, attr)
        old_status = attachment.status
        attachment.status = new_status
        if new_status == AttachmentStatus.REVIEWED:
            attachment.reviewed_at = now
        self._comment(record, now, f'{label} status updated from "{old_status.value}" to "{new_status.value}"')
        record.updated_at = now
        return RecordResult(record=record)

    def record_payment(
        self,
        record: ApplicationRecord,
        transaction_id: str,
        amount: float,
        service_type: Optional[str] = None,
        notes: str = "",
        verifier: str = "Admin",
    ) -> RecordResult:
        """Append a verified payment. The first one flips payment_status to paid."""
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        if amount is None or amount <= 0:
            raise ValidationError("Payment amount must be positive")

        record = record.model_copy(deep=True)
        now = self.clock()
        record.payments.append(PaymentRecord(
            transaction_id=transaction_id,
            amount=amount,
            service_type=service_type,
            verified_at=now,
            verified_by=verifier,
            notes=notes or "",
        ))
        self._comment(record, now, f"Payment verified: ${amount:.2f}. Transaction ID: {transaction_id}")
        record.updated_at = now
        return RecordResult(record=record)

    # ------------------------------------------------------------------

    @staticmethod
    def _applicant_kind(value) -> DocumentKind:
        try:
            kind = DocumentKind(value)
        except ValueError:
            raise ValidationError(f"Unknown document kind: {value!r}")
        if kind not in APPLICANT_DOCUMENT_KINDS:
            raise ValidationError(f"{kind.value} is not an applicant document kind")
        return kind

    @staticmethod
    def _comment(
        record: ApplicationRecord,
        now: datetime,
        text: str,
        author: str = SYSTEM_AUTHOR,
        visibility: CommentVisibility = CommentVisibility.SYSTEM,
    ) -> None:
        record.comments.append(Comment(text=text, timestamp=now, author=author, visibility=visibility))
