"""Editing request workflow.

Same contract as the application engine: each operation takes the current
EditingRecord and returns a new one; the input is never mutated.
"""

from datetime import datetime
from typing import Mapping, Optional

from domain.applications.engine import EMAIL_PATTERN, Clock, normalize_email, utc_now
from domain.applications.models import Comment, CommentVisibility, PaymentStatus, UploadedFile
from domain.errors import ConflictError, PreconditionError, ValidationError

from .models import (
    Deliverable,
    EditingContact,
    EditingRecord,
    EditingStatus,
    PaymentDetails,
    PendingTransaction,
    ServiceType,
    parse_deliverable,
)
from .tokens import DownloadToken, DownloadTokenStore


class EditingWorkflow:

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock

    def create_request(
        self,
        existing: Optional[EditingRecord],
        personal_info: EditingContact,
        service_type: str,
        amount: float,
        instructions: Optional[str] = None,
        original_files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> EditingRecord:
        """Open a new editing request.

        Raises:
            ConflictError: A request already exists for this email
            ValidationError: Missing contact fields, unknown service type or
                non-positive amount
        """
        if existing is not None:
            raise ConflictError("An editing request already exists for this email")

        missing = [
            name for name in ("full_name", "email", "phone")
            if not getattr(personal_info, name)
        ]
        if missing:
            raise ValidationError("Missing required fields: " + ", ".join(missing))
        email = normalize_email(personal_info.email)
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")

        try:
            service = ServiceType(service_type)
        except ValueError:
            raise ValidationError(f"Invalid service type: {service_type!r}")
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be positive")

        now = self.clock()
        files = {}
        for raw_key, file in (original_files or {}).items():
            files[self._deliverable(raw_key)] = file.model_copy(update={"uploaded_at": now})

        return EditingRecord(
            personal_info=personal_info.model_copy(update={"email": email}),
            service_type=service,
            amount=amount,
            instructions=instructions or "",
            original_files=files,
            status=EditingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def submit_payment(self, record: EditingRecord, transaction_id: Optional[str]) -> EditingRecord:
        """Client reports a payment; it stays pending until an admin verifies it."""
        if not transaction_id or not transaction_id.strip():
            raise ValidationError("Transaction ID is required")

        record = record.model_copy(deep=True)
        now = self.clock()
        record.pending_transaction = PendingTransaction(id=transaction_id.strip(), submitted_at=now)
        self._comment(
            record, now,
            f"Payment submitted: Transaction ID: {transaction_id.strip()} (pending admin verification)",
            author="Client",
            visibility=CommentVisibility.CLIENT,
        )
        record.updated_at = now
        return record

    def upload_edited_files(self, record: EditingRecord, files: Mapping[str, UploadedFile]) -> EditingRecord:
        """Store edited deliverables.

        Status becomes editing_completed once every deliverable of the
        service type is present, otherwise editing_in_progress.
        """
        if not files:
            raise ValidationError("No edited files uploaded")
        normalized = {self._deliverable(k): f for k, f in files.items()}

        record = record.model_copy(deep=True)
        now = self.clock()
        labels = {Deliverable.CV: "Edited CV", Deliverable.COVER: "Edited Cover Letter"}
        for deliverable, file in normalized.items():
            record.edited_files[deliverable] = file.model_copy(update={"uploaded_at": now})
            self._comment(record, now, f"{labels[deliverable]} uploaded: {file.original_name}", author="Admin")

        if record.deliverables_complete:
            record.status = EditingStatus.EDITING_COMPLETED
        else:
            record.status = EditingStatus.EDITING_IN_PROGRESS
        record.updated_at = now
        return record

    def verify_payment(
        self,
        record: EditingRecord,
        transaction_id: Optional[str] = None,
        amount: Optional[float] = None,
        verifier: str = "Admin",
    ) -> EditingRecord:
        """Mark the request paid. The only transition into editing_paid.

        Raises:
            ConflictError: No pending transaction and no explicit id, or
                already paid with nothing pending
        """
        pending = record.pending_transaction
        if pending is None and (not transaction_id or record.payment_status == PaymentStatus.PAID):
            raise ConflictError("No payment to verify")

        record = record.model_copy(deep=True)
        now = self.clock()
        resolved_id = transaction_id or pending.id
        resolved_amount = amount if amount is not None else record.amount

        record.payment_status = PaymentStatus.PAID
        record.status = EditingStatus.EDITING_PAID
        record.payment_details = PaymentDetails(
            transaction_id=resolved_id,
            amount=resolved_amount,
            verified_at=now,
            verified_by=verifier,
        )
        record.pending_transaction = None
        self._comment(
            record, now,
            f"Payment verified by admin: ${resolved_amount:.2f}. Transaction ID: {resolved_id}",
            author=verifier,
        )
        record.updated_at = now
        return record

    def generate_download_token(self, record: EditingRecord, store: DownloadTokenStore) -> DownloadToken:
        """Mint a single-use token bound to the current edited file keys.

        Raises:
            PreconditionError: Payment not verified
        """
        if record.payment_status != PaymentStatus.PAID:
            raise PreconditionError("Payment not verified")
        return store.issue(record.email, record.edited_file_keys())

    @staticmethod
    def client_view(record: EditingRecord) -> dict:
        """Status for the client. No storage keys or file paths."""
        return {
            "personal_info": record.personal_info.model_dump(),
            "service_type": record.service_type.value,
            "amount": record.amount,
            "status": record.status.value,
            "payment_status": record.payment_status.value,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
            "comments": [
                {"text": c.text, "timestamp": c.timestamp, "author": c.author}
                for c in record.client_comments()
            ],
            "has_files": {d.value: d in record.edited_files for d in Deliverable},
            "transaction_pending": record.pending_transaction is not None,
        }

    @staticmethod
    def _deliverable(value) -> Deliverable:
        try:
            return parse_deliverable(value)
        except ValueError:
            raise ValidationError(f"Unknown editing file kind: {value!r}")

    @staticmethod
    def _comment(
        record: EditingRecord,
        now: datetime,
        text: str,
        author: str = "System",
        visibility: CommentVisibility = CommentVisibility.SYSTEM,
    ) -> None:
        record.comments.append(Comment(text=text, timestamp=now, author=author, visibility=visibility))
