"""Email batch service - review request batches and their send outcomes"""

import csv
import logging
from io import StringIO
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Caller
from ...email_service import ReviewEmailDispatcher
from ...errors import NotFound, ValidationError
from ...models import EmailBatch, utcnow
from ...shared.validators import filter_valid_emails
from ..hotels.repository import HotelRepository
from .repository import EmailBatchRepository

logger = logging.getLogger(__name__)


def aggregate_batch_status(entries) -> str:
    """completed only when every entry was sent; anything else is failed"""
    return "completed" if all(entry.status == "sent" for entry in entries) else "failed"


def read_emails_from_csv(content: bytes) -> list[str]:
    """
    Pull recipient addresses from an uploaded CSV.

    The file needs a header row with an "email" column (any case). Rows with
    a blank or malformed address are skipped.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("CSV file must be UTF-8 encoded") from e

    reader = csv.DictReader(StringIO(text))
    if not reader.fieldnames:
        raise ValidationError("CSV file is empty")

    email_column = next(
        (name for name in reader.fieldnames if name and name.strip().lower() == "email"), None
    )
    if email_column is None:
        raise ValidationError("CSV file must have an 'email' column")

    return filter_valid_emails([row.get(email_column) or "" for row in reader])


class EmailBatchService:
    """Service layer for review request batches"""

    def __init__(self, db: Session, dispatcher: Optional[ReviewEmailDispatcher] = None):
        self.db = db
        self.dispatcher = dispatcher
        self.repo = EmailBatchRepository()

    def create_batch(self, hotel_id: str, emails: list[str]) -> EmailBatch:
        """Create a pending batch for the well-formed addresses in emails"""
        if not emails:
            raise ValidationError("No email addresses provided")

        valid_emails = filter_valid_emails(emails)
        if not valid_emails:
            raise ValidationError("No valid email addresses provided")

        skipped = len(emails) - len(valid_emails)
        if skipped:
            logger.info(f"⏭️ Skipped {skipped} malformed address(es) for hotel {hotel_id}")

        batch = self.repo.create_batch(self.db, hotel_id, valid_emails)
        logger.info(f"📥 Created email batch {batch.id} with {len(valid_emails)} recipient(s)")
        return batch

    async def process_batch(self, batch: EmailBatch) -> EmailBatch:
        """
        Attempt every pending entry in order, then settle the batch status.

        A failed send is recorded on its entry and the loop moves on. Entry
        and batch states are saved together once all attempts are done.
        """
        hotel = batch.hotel

        for entry in batch.entries:
            if entry.status != "pending":
                continue
            try:
                await self.dispatcher.send_review_request(
                    entry.email, hotel.name, hotel.id, hotel.google_review_link
                )
                entry.status = "sent"
                entry.sent_at = utcnow()
                entry.error = None
            except Exception as e:
                entry.status = "failed"
                entry.error = str(e) or e.__class__.__name__
                logger.error(f"❌ Review request to {entry.email} failed: {e}")

        batch.status = aggregate_batch_status(batch.entries)
        batch.completed_at = utcnow()
        batch = self.repo.save_batch(self.db, batch)

        logger.info(f"📊 Email batch {batch.id} finished with status '{batch.status}'")
        return batch

    async def send_review_requests(
        self, caller: Caller, emails: list[str], hotel_id: Optional[str] = None
    ) -> dict:
        """Create and process a batch for the caller's hotel"""
        target_hotel_id = caller.resolve_hotel_id(hotel_id)

        hotel = HotelRepository.get_hotel_by_id(self.db, target_hotel_id)
        if not hotel:
            raise NotFound("Hotel not found")

        batch = self.create_batch(hotel.id, emails)
        batch = await self.process_batch(batch)

        sent = sum(1 for entry in batch.entries if entry.status == "sent")
        failed = sum(1 for entry in batch.entries if entry.status == "failed")
        return {
            "message": "Review requests processed",
            "results": {"success": sent, "failed": failed, "batchId": batch.id},
        }

    def get_batches(self, caller: Caller, hotel_id: Optional[str] = None) -> list[EmailBatch]:
        """Batches visible to the caller; admins may list every hotel"""
        scoped_hotel_id = caller.resolve_hotel_id(hotel_id, allow_all=True)
        return self.repo.get_batches(self.db, scoped_hotel_id)
