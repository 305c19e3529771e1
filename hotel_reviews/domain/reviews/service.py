"""Review service - guest review submission"""

import logging

from sqlalchemy.orm import Session

from ...errors import InvalidRequestError, MissingFieldsError, NotFound, ValidationError
from ...models import Review
from ...shared.validators import parse_stay_date, validate_rating
from ...utils.sanitization import clean_text
from ...workers.notification_worker import NotificationChannel, ReviewNotificationJob
from ..hotels.repository import HotelRepository
from .repository import ReviewRepository
from .schemas import ReviewSubmission
from .tokens import ReviewTokenCodec

logger = logging.getLogger(__name__)


class ReviewSubmissionService:
    """Accepts a guest review sent through a tokenized link"""

    def __init__(self, db: Session, codec: ReviewTokenCodec, channel: NotificationChannel):
        self.db = db
        self.codec = codec
        self.channel = channel
        self.repo = ReviewRepository()

    def submit(self, data: ReviewSubmission) -> Review:
        """Validate, persist and queue the staff notification.

        Nothing is written unless every check passes. The notification is
        only queued here; delivering it is the worker's job.
        """
        hotel_id = clean_text(data.hotelId)
        if not hotel_id or not clean_text(data.token):
            raise InvalidRequestError("Invalid request", status_code=401)

        guest_name = clean_text(data.guestName)
        review_text = clean_text(data.reviewText)
        stay_date_raw = clean_text(data.stayDate)
        if not guest_name or not review_text or not stay_date_raw or data.rating in (None, ""):
            raise MissingFieldsError("Missing required fields")

        claims = self.codec.verify(data.token)
        if claims.hotel_id != hotel_id:
            logger.warning(f"⚠️ Review token for hotel {claims.hotel_id} used for hotel {hotel_id}")
            raise InvalidRequestError("Invalid hotel ID")

        hotel = HotelRepository.get_hotel_by_id(self.db, hotel_id)
        if not hotel:
            raise NotFound("Hotel not found")

        try:
            rating = validate_rating(data.rating)
            stay_date = parse_stay_date(stay_date_raw)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        review = self.repo.create_review(
            self.db,
            hotel_id=hotel.id,
            guest_name=guest_name,
            email=claims.email,
            stay_date=stay_date,
            rating=rating,
            review_text=review_text,
            is_internal=True,
            email_sent=True,
        )
        logger.info(f"✅ Internal review {review.id} saved for hotel {hotel.id} (rating {rating})")

        self.channel.publish(ReviewNotificationJob.from_review(review))
        return review
