"""Email batch repository - Database operations for review request batches"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ...errors import persistence_error_from
from ...models import EmailBatch, EmailBatchEntry


class EmailBatchRepository:
    """Repository for email batch database operations"""

    @staticmethod
    def create_batch(db: Session, hotel_id: str, emails: list[str]) -> EmailBatch:
        """Create a pending batch with one pending entry per address"""
        batch = EmailBatch(hotel_id=hotel_id, status="pending")
        batch.entries = [
            EmailBatchEntry(position=position, email=email, status="pending")
            for position, email in enumerate(emails)
        ]
        db.add(batch)
        EmailBatchRepository._commit(db)
        db.refresh(batch)
        return batch

    @staticmethod
    def save_batch(db: Session, batch: EmailBatch) -> EmailBatch:
        """Persist the batch status together with every entry status"""
        db.add(batch)
        EmailBatchRepository._commit(db)
        db.refresh(batch)
        return batch

    @staticmethod
    def get_batch(db: Session, batch_id: str) -> Optional[EmailBatch]:
        return (
            db.query(EmailBatch)
            .options(selectinload(EmailBatch.entries))
            .filter(EmailBatch.id == batch_id)
            .first()
        )

    @staticmethod
    def get_batches(db: Session, hotel_id: Optional[str] = None) -> list[EmailBatch]:
        """Batches newest first, for one hotel or for all of them"""
        query = db.query(EmailBatch).options(selectinload(EmailBatch.entries))
        if hotel_id:
            query = query.filter(EmailBatch.hotel_id == hotel_id)
        return query.order_by(EmailBatch.created_at.desc(), EmailBatch.id.desc()).all()

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise persistence_error_from(e) from e
