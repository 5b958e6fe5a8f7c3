"""Editing service - paid CV / cover letter editing requests.

Editing files are stored under ``editing/{email}/`` so deleting an
application never removes editing deliverables. Mutations hold the record
lock for the email from load to save.
"""

import logging
import posixpath
from typing import BinaryIO, Dict, List, Optional, Tuple

from domain.applications import normalize_email
from domain.documents.ports import ObjectStoragePort
from domain.editing import (
    DownloadToken,
    DownloadTokenStore,
    EditingContact,
    EditingRecord,
    EditingWorkflow,
    parse_deliverable,
)
from domain.editing.ports import EditingRepositoryPort
from domain.errors import NotFoundError, ValidationError
from infrastructure.locking import RecordLocks
from observability.metrics import download_tokens_active, editing_payments_verified_total
from observability.operations import log_rejection
from uploads import PendingFile, store_pending

logger = logging.getLogger(__name__)


def storage_owner(email: str) -> str:
    return f"editing/{email}"


class EditingService:

    def __init__(
        self,
        repository: EditingRepositoryPort,
        storage: ObjectStoragePort,
        tokens: DownloadTokenStore,
        workflow: Optional[EditingWorkflow] = None,
        locks: Optional[RecordLocks] = None,
    ):
        self.repository = repository
        self.storage = storage
        self.tokens = tokens
        self.workflow = workflow or EditingWorkflow()
        self.locks = locks or RecordLocks()

    def _locked(self, email: str):
        return self.locks.hold(f"editing:{normalize_email(email)}")

    def get_record(self, email: str) -> EditingRecord:
        record = self.repository.load(normalize_email(email))
        if record is None:
            raise NotFoundError("Editing request not found")
        return record

    async def create_request(
        self,
        contact: EditingContact,
        service_type: str,
        amount: float,
        instructions: Optional[str],
        uploads: Dict[str, List[PendingFile]],
    ) -> EditingRecord:
        email = normalize_email(contact.email)
        with log_rejection("Editing request", email):
            for kind, files in uploads.items():
                if len(files) > 1:
                    raise ValidationError(f"Only one {kind} file is allowed")
            async with self._locked(email):
                existing = self.repository.load(email) if email else None
                # Dry run: reject invalid requests before storing any file
                self.workflow.create_request(existing, contact, service_type, amount, instructions)

                originals = {}
                for kind, files in uploads.items():
                    originals[kind] = await store_pending(self.storage, storage_owner(email), files[0])

                record = self.workflow.create_request(
                    existing, contact, service_type, amount, instructions, originals,
                )
                self.repository.save(record)

        logger.info(
            f"Editing request created ({record.service_type.value}, ${record.amount:.2f})",
            extra={"email": email, "status": record.status.value},
        )
        return record

    def client_status(self, email: str) -> dict:
        with log_rejection("Editing status lookup", email):
            record = self.get_record(email)
        return self.workflow.client_view(record)

    def list_requests(self) -> List[EditingRecord]:
        return self.repository.list_all()

    async def submit_payment(self, email: str, transaction_id: Optional[str]) -> EditingRecord:
        with log_rejection("Payment submission", email):
            async with self._locked(email):
                record = self.workflow.submit_payment(self.get_record(email), transaction_id)
                self.repository.save(record)
        logger.info("Payment submitted, awaiting verification", extra={"email": record.email})
        return record

    async def upload_edited_files(self, email: str, uploads: Dict[str, List[PendingFile]]) -> EditingRecord:
        email = normalize_email(email)
        with log_rejection("Edited file upload", email):
            async with self._locked(email):
                current = self.get_record(email)
                if not uploads:
                    raise ValidationError("No edited files uploaded")

                stored = {}
                for kind, files in uploads.items():
                    stored[kind] = await store_pending(self.storage, storage_owner(email), files[0])

                record = self.workflow.upload_edited_files(current, stored)
                self.repository.save(record)

        logger.info(
            f"Edited files uploaded: {', '.join(stored)}",
            extra={"email": email, "status": record.status.value},
        )
        return record

    async def verify_payment(
        self,
        email: str,
        transaction_id: Optional[str] = None,
        amount: Optional[float] = None,
        verifier: str = "Admin",
    ) -> EditingRecord:
        with log_rejection("Editing payment verification", email):
            async with self._locked(email):
                record = self.workflow.verify_payment(self.get_record(email), transaction_id, amount, verifier)
                self.repository.save(record)

        editing_payments_verified_total.inc()
        logger.info(
            f"Editing payment verified by {verifier}",
            extra={"email": record.email, "status": record.status.value},
        )
        return record

    def generate_download_token(self, email: str) -> DownloadToken:
        with log_rejection("Download token", email):
            token = self.workflow.generate_download_token(self.get_record(email), self.tokens)
        download_tokens_active.set(len(self.tokens))
        logger.info("Download token issued", extra={"email": token.email})
        return token

    async def download(self, token: str, kind: str) -> Tuple[str, BinaryIO]:
        """Redeem a download token. Returns (filename, stream).

        Raises:
            InvalidTokenError: Token unknown, used or expired
            NotFoundError: The requested deliverable does not exist
        """
        with log_rejection("Download", None):
            storage_key = self.tokens.redeem(token, kind)
            download_tokens_active.set(len(self.tokens))
            if not await self.storage.file_exists(storage_key):
                raise NotFoundError("File not found")
            stream = await self.storage.retrieve_file(storage_key)

        ext = posixpath.splitext(storage_key)[1]
        return f"{parse_deliverable(kind).document_kind.value}{ext}", stream
