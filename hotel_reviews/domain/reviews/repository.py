"""Review repository - Database operations for reviews"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import persistence_error_from
from ...models import Review


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    def create_review(db: Session, **review_data) -> Review:
        """Create a new review"""
        review = Review(**review_data)
        db.add(review)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise persistence_error_from(e) from e
        db.refresh(review)
        return review

    @staticmethod
    def get_internal_reviews(db: Session, hotel_id: str) -> list[Review]:
        """Internal reviews for a hotel, newest first"""
        return (
            db.query(Review)
            .filter(Review.hotel_id == hotel_id, Review.is_internal.is_(True))
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )
