"""Review domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class ReviewSubmission(BaseModel):
    """Guest review form payload.

    Every field is optional here; the submission service checks presence so
    each missing field maps to the right error.
    """

    hotelId: Optional[str] = None
    guestName: Optional[str] = None
    stayDate: Optional[str] = None
    rating: Optional[Union[int, float, str]] = None
    reviewText: Optional[str] = None
    token: Optional[str] = None


class ReviewResponse(BaseModel):
    """Schema for review response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    hotelId: str
    guestName: str
    email: Optional[str] = None
    stayDate: date
    rating: int
    reviewText: str
    isInternal: bool
    emailSent: bool
    responseText: Optional[str] = None
    respondedAt: Optional[datetime] = None
    createdAt: datetime

    @classmethod
    def from_review(cls, review) -> "ReviewResponse":
        return cls(
            id=review.id,
            hotelId=review.hotel_id,
            guestName=review.guest_name,
            email=review.email,
            stayDate=review.stay_date,
            rating=review.rating,
            reviewText=review.review_text,
            isInternal=review.is_internal,
            emailSent=review.email_sent,
            responseText=review.response_text,
            respondedAt=review.responded_at,
            createdAt=review.created_at,
        )


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
