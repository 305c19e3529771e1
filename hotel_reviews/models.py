import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base

BATCH_STATUSES = ("pending", "completed", "failed")
ENTRY_STATUSES = ("pending", "sent", "failed")


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Hotel(Base):
    __tablename__ = "hotels"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    name = Column(String(255), nullable=False, index=True)
    google_review_link = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    users = relationship("User", back_populates="hotel")
    reviews = relationship("Review", back_populates="hotel")
    email_batches = relationship("EmailBatch", back_populates="hotel")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),)

    id = Column(String(36), primary_key=True, default=generate_public_id)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user", nullable=False, index=True)
    # Required for non-admin users, admins pick a hotel per request
    hotel_id = Column(String(36), ForeignKey("hotels.id"), nullable=True, index=True)
    last_login = Column(DateTime, default=utcnow, nullable=True)

    hotel = relationship("Hotel", back_populates="users")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id = Column(String(36), primary_key=True, default=generate_public_id)
    hotel_id = Column(String(36), ForeignKey("hotels.id"), nullable=False, index=True)
    guest_name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    stay_date = Column(Date, nullable=False, index=True)
    rating = Column(Integer, nullable=False, index=True)
    review_text = Column(Text, nullable=False)
    # False for guests redirected to the external review site (never stored)
    is_internal = Column(Boolean, default=True, nullable=False, index=True)
    email_sent = Column(Boolean, default=False, nullable=False)
    response_text = Column(Text, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    hotel = relationship("Hotel", back_populates="reviews")


class EmailBatch(Base):
    __tablename__ = "email_batches"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')", name="ck_email_batches_status"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_public_id)
    hotel_id = Column(String(36), ForeignKey("hotels.id"), nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)

    hotel = relationship("Hotel", back_populates="email_batches")
    entries = relationship(
        "EmailBatchEntry",
        back_populates="batch",
        order_by="EmailBatchEntry.position",
        cascade="all, delete-orphan",
    )


class EmailBatchEntry(Base):
    __tablename__ = "email_batch_entries"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'sent', 'failed')", name="ck_email_batch_entries_status"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(String(36), ForeignKey("email_batches.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # Input order within the batch
    email = Column(String(255), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    sent_at = Column(DateTime, nullable=True)
    error = Column(Text, nullable=True)

    batch = relationship("EmailBatch", back_populates="entries")
