"""Email batch router - FastAPI endpoints for review request batches"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import Caller, get_current_caller
from ...database import get_db
from ...email_service import ReviewEmailDispatcher, get_email_dispatcher
from ...errors import ValidationError
from ..reviews.query_service import ReviewQueryService
from .schemas import EmailBatchSummary, SendRequestsRequest, SendRequestsResponse
from .service import EmailBatchService, read_emails_from_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Email Batches"])

MAX_CSV_SIZE = 1024 * 1024  # 1MB


def get_email_batch_service(
    db: Session = Depends(get_db),
    dispatcher: ReviewEmailDispatcher = Depends(get_email_dispatcher),
) -> EmailBatchService:
    """Dependency injection for EmailBatchService"""
    return EmailBatchService(db, dispatcher)


@router.post("/send-requests", response_model=SendRequestsResponse)
async def send_review_requests(
    data: SendRequestsRequest,
    caller: Caller = Depends(get_current_caller),
    service: EmailBatchService = Depends(get_email_batch_service),
):
    """Send review request emails to a list of guests"""
    return await service.send_review_requests(caller, data.emails, data.hotelId)


@router.post("/upload-csv", response_model=SendRequestsResponse)
async def upload_review_requests_csv(
    file: UploadFile = File(...),
    hotelId: Optional[str] = Form(None),
    caller: Caller = Depends(get_current_caller),
    service: EmailBatchService = Depends(get_email_batch_service),
):
    """Send review request emails to the addresses in an uploaded CSV"""
    if file.filename and not file.filename.lower().endswith(".csv"):
        raise ValidationError("Only CSV files are allowed")

    # Never buffer more than one byte past the limit
    content = await file.read(MAX_CSV_SIZE + 1)
    if len(content) > MAX_CSV_SIZE:
        raise ValidationError("CSV file too large. Maximum size is 1MB")

    emails = read_emails_from_csv(content)
    logger.info(f"📄 CSV upload '{file.filename}' yielded {len(emails)} address(es)")
    return await service.send_review_requests(caller, emails, hotelId)


@router.get("/email-batches", response_model=list[EmailBatchSummary])
async def get_email_batches(
    hotelId: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Review request batches with per-recipient outcomes, newest first"""
    return ReviewQueryService(db).list_batches(caller, hotelId)
