"""Editing domain module - paid CV / cover letter editing requests"""

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
from .engine import EditingWorkflow
from .tokens import DEFAULT_TOKEN_TTL_SECONDS, DownloadToken, DownloadTokenStore

__all__ = [
    "Deliverable",
    "EditingContact",
    "EditingRecord",
    "EditingStatus",
    "PaymentDetails",
    "PendingTransaction",
    "ServiceType",
    "parse_deliverable",
    "EditingWorkflow",
    "DEFAULT_TOKEN_TTL_SECONDS",
    "DownloadToken",
    "DownloadTokenStore",
]
