"""
Review Notification Worker
Staff notifications are handed over on an in-process channel and delivered
by a consumer task, so a guest's submission never waits on SMTP.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, Optional

from fastapi import Request

from ..database import SessionLocal
from ..email_service import ReviewEmailDispatcher, get_email_dispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewNotificationJob:
    hotel_id: str
    review_id: str
    guest_name: str
    stay_date: date
    rating: int
    review_text: str

    @classmethod
    def from_review(cls, review) -> "ReviewNotificationJob":
        return cls(
            hotel_id=review.hotel_id,
            review_id=review.id,
            guest_name=review.guest_name,
            stay_date=review.stay_date,
            rating=review.rating,
            review_text=review.review_text,
        )


NotificationHandler = Callable[[ReviewNotificationJob], Awaitable[object]]


class NotificationChannel:
    """Unbounded FIFO of notification jobs"""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()

    def publish(self, job: ReviewNotificationJob) -> None:
        self._queue.put_nowait(job)
        logger.debug(f"📥 Queued notification for review {job.review_id}")

    def pending(self) -> int:
        return self._queue.qsize()

    async def _handle(self, job: ReviewNotificationJob, handler: NotificationHandler) -> bool:
        try:
            await handler(job)
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send review notification for review {job.review_id}: {e}")
            return False
        finally:
            self._queue.task_done()

    async def drain(self, handler: NotificationHandler) -> int:
        """Handle every job queued right now; returns how many were delivered"""
        delivered = 0
        while not self._queue.empty():
            job = self._queue.get_nowait()
            if await self._handle(job, handler):
                delivered += 1
        return delivered

    async def consume(self, handler: NotificationHandler) -> None:
        """Handle jobs until cancelled"""
        logger.info("🚀 Review notification worker started")
        try:
            while True:
                job = await self._queue.get()
                await self._handle(job, handler)
        except asyncio.CancelledError:
            logger.info("👋 Review notification worker stopped")
            raise


async def deliver_review_notification(
    job: ReviewNotificationJob, dispatcher: Optional[ReviewEmailDispatcher] = None
) -> dict:
    """Send one staff notification using its own database session"""
    dispatcher = dispatcher or get_email_dispatcher()
    db = SessionLocal()
    try:
        return await dispatcher.send_internal_notification(db, job.hotel_id, job)
    finally:
        db.close()


def get_notification_channel(request: Request) -> NotificationChannel:
    """Dependency injection for the channel created by the app lifespan"""
    return request.app.state.notification_channel
