"""Email batch schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SendRequestsRequest(BaseModel):
    """Schema for sending review requests"""

    emails: list[str] = []
    hotelId: Optional[str] = None


class SendRequestsResults(BaseModel):
    success: int
    failed: int
    batchId: str


class SendRequestsResponse(BaseModel):
    message: str
    results: SendRequestsResults


class EmailEntryResponse(BaseModel):
    email: str
    status: str
    sentAt: Optional[datetime] = None
    error: Optional[str] = None


class EmailBatchSummary(BaseModel):
    """Batch with per-entry detail and counts derived at read time"""

    id: str
    hotelId: str
    status: str
    createdAt: datetime
    completedAt: Optional[datetime] = None
    emailCount: int
    sentCount: int
    failedCount: int
    emails: list[EmailEntryResponse]

    @classmethod
    def from_batch(cls, batch) -> "EmailBatchSummary":
        entries = list(batch.entries)
        return cls(
            id=batch.id,
            hotelId=batch.hotel_id,
            status=batch.status,
            createdAt=batch.created_at,
            completedAt=batch.completed_at,
            emailCount=len(entries),
            sentCount=sum(1 for e in entries if e.status == "sent"),
            failedCount=sum(1 for e in entries if e.status == "failed"),
            emails=[
                EmailEntryResponse(email=e.email, status=e.status, sentAt=e.sent_at, error=e.error)
                for e in entries
            ],
        )
