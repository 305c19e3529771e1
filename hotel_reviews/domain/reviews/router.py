"""Review router - FastAPI endpoints for guest reviews"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...auth import Caller, get_current_caller
from ...database import get_db
from ...workers.notification_worker import NotificationChannel, get_notification_channel
from .query_service import ReviewQueryService
from .schemas import ReviewListResponse, ReviewResponse, ReviewSubmission
from .service import ReviewSubmissionService
from .tokens import ReviewTokenCodec, get_token_codec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


def get_review_submission_service(
    db: Session = Depends(get_db),
    codec: ReviewTokenCodec = Depends(get_token_codec),
    channel: NotificationChannel = Depends(get_notification_channel),
) -> ReviewSubmissionService:
    """Dependency injection for ReviewSubmissionService"""
    return ReviewSubmissionService(db, codec, channel)


def get_review_query_service(db: Session = Depends(get_db)) -> ReviewQueryService:
    """Dependency injection for ReviewQueryService"""
    return ReviewQueryService(db)


# ============================================================================
# PUBLIC ENDPOINTS (no auth - the review token is the credential)
# ============================================================================


@router.post("/internal", response_model=ReviewResponse, status_code=201)
async def submit_internal_review(
    data: ReviewSubmission,
    service: ReviewSubmissionService = Depends(get_review_submission_service),
):
    """Submit a review from the tokenized link in a review request email"""
    review = service.submit(data)
    return ReviewResponse.from_review(review)


# ============================================================================
# DASHBOARD ENDPOINTS
# ============================================================================


@router.get("", response_model=ReviewListResponse)
async def get_reviews(
    hotelId: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_caller),
    service: ReviewQueryService = Depends(get_review_query_service),
):
    """Internal reviews for the caller's hotel, newest first"""
    reviews = service.list_reviews(caller, hotelId)
    return ReviewListResponse(reviews=[ReviewResponse.from_review(r) for r in reviews])


@router.get("/export")
async def export_reviews_csv(
    hotelId: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_caller),
    service: ReviewQueryService = Depends(get_review_query_service),
):
    """Export internal reviews as CSV"""
    csv_content = service.export_reviews_csv(caller, hotelId)
    filename = f"reviews_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    logger.info(f"✅ CSV export ready: {filename}")
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )
