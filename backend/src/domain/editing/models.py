"""CV / cover letter editing request aggregate."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.applications.models import Comment, CommentVisibility, PaymentStatus, UploadedFile
from domain.documents import DocumentKind


class EditingStatus(str, Enum):
    """Editing request status.

    State flow:
        pending -> editing_in_progress -> editing_completed -> editing_paid
    editing_paid is only reachable through payment verification.
    """
    PENDING = "pending"
    EDITING_IN_PROGRESS = "editing_in_progress"
    EDITING_COMPLETED = "editing_completed"
    EDITING_PAID = "editing_paid"


class Deliverable(str, Enum):
    CV = "cv"
    COVER = "cover"

    @property
    def document_kind(self) -> DocumentKind:
        return DocumentKind.EDITED_CV if self == Deliverable.CV else DocumentKind.EDITED_COVER


class ServiceType(str, Enum):
    CV = "cv"
    COVER = "cover"
    BOTH = "both"

    @property
    def deliverables(self) -> List[Deliverable]:
        if self == ServiceType.CV:
            return [Deliverable.CV]
        if self == ServiceType.COVER:
            return [Deliverable.COVER]
        return [Deliverable.CV, Deliverable.COVER]


def parse_deliverable(value: str) -> Deliverable:
    """Accept 'cv' / 'cover' or the edited_cv / edited_cover field names."""
    if value == DocumentKind.EDITED_CV.value:
        return Deliverable.CV
    if value == DocumentKind.EDITED_COVER.value:
        return Deliverable.COVER
    return Deliverable(value)


class EditingContact(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PendingTransaction(BaseModel):
    id: str
    submitted_at: datetime


class PaymentDetails(BaseModel):
    transaction_id: Optional[str] = None
    amount: Optional[float] = None
    verified_at: datetime
    verified_by: Optional[str] = None


class EditingRecord(BaseModel):
    """Per-email editing request."""

    personal_info: EditingContact
    service_type: ServiceType
    amount: float = Field(gt=0)
    instructions: str = ""
    original_files: Dict[Deliverable, UploadedFile] = Field(default_factory=dict)
    edited_files: Dict[Deliverable, UploadedFile] = Field(default_factory=dict)
    status: EditingStatus = EditingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    pending_transaction: Optional[PendingTransaction] = None
    payment_details: Optional[PaymentDetails] = None
    comments: List[Comment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @property
    def email(self) -> str:
        return self.personal_info.email

    @property
    def deliverables_complete(self) -> bool:
        return all(d in self.edited_files for d in self.service_type.deliverables)

    def client_comments(self) -> List[Comment]:
        """Admin notes and the client's own entries; system notes are dropped."""
        return [c for c in self.comments if c.visibility != CommentVisibility.SYSTEM]

    def edited_file_keys(self) -> Dict[str, Optional[str]]:
        return {
            d.value: (self.edited_files[d].storage_key if d in self.edited_files else None)
            for d in Deliverable
        }
