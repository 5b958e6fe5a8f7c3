"""Pydantic schemas for the editing API"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EditingRequestResponse(BaseModel):
    success: bool = True
    message: str
    email: str
    status: str


class SubmitPaymentRequest(BaseModel):
    transaction_id: Optional[str] = Field(None, description="Reference of the client's payment")


class VerifyPaymentRequest(BaseModel):
    """Admin verification. Falls back to the pending transaction id and the
    quoted amount when omitted."""
    transaction_id: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)


class EditingStatusResponse(BaseModel):
    success: bool = True
    status: Dict[str, Any]


class EditingListResponse(BaseModel):
    success: bool = True
    requests: List[Dict[str, Any]]


class DownloadTokenResponse(BaseModel):
    success: bool = True
    token: str
    expires_at: datetime
    expires_in: int = Field(..., description="Seconds until the token expires")
