"""Read side for the staff dashboard: reviews and email batches"""

import csv
from io import StringIO
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Caller
from ...models import Review
from ..email_batches.schemas import EmailBatchSummary
from ..email_batches.service import EmailBatchService
from .repository import ReviewRepository

CSV_HEADER = ["Guest Name", "Email", "Stay Date", "Rating", "Review", "Response", "Created At"]


class ReviewQueryService:
    """Hotel-scoped listings of reviews and batches"""

    def __init__(self, db: Session):
        self.db = db

    def list_reviews(self, caller: Caller, hotel_id: Optional[str] = None) -> list[Review]:
        scoped_hotel_id = caller.resolve_hotel_id(hotel_id)
        return ReviewRepository.get_internal_reviews(self.db, scoped_hotel_id)

    def list_batches(
        self, caller: Caller, hotel_id: Optional[str] = None
    ) -> list[EmailBatchSummary]:
        batches = EmailBatchService(self.db).get_batches(caller, hotel_id)
        return [EmailBatchSummary.from_batch(batch) for batch in batches]

    def export_reviews_csv(self, caller: Caller, hotel_id: Optional[str] = None) -> str:
        """Same reviews as list_reviews, rendered as CSV text"""
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADER)

        for review in self.list_reviews(caller, hotel_id):
            writer.writerow(
                [
                    review.guest_name,
                    review.email or "",
                    review.stay_date.isoformat(),
                    review.rating,
                    review.review_text,
                    review.response_text or "",
                    review.created_at.isoformat(),
                ]
            )

        return output.getvalue()
