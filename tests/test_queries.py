"""Tests for the hotel-scoped review and batch listings."""

import csv
from datetime import date, datetime
from io import StringIO

import pytest

from hotel_reviews.domain.email_batches.repository import EmailBatchRepository
from hotel_reviews.domain.reviews.query_service import CSV_HEADER, ReviewQueryService
from hotel_reviews.errors import ValidationError
from hotel_reviews.models import Review


def add_review(db, hotel_id, guest_name, created_at, is_internal=True, rating=4):
    review = Review(
        hotel_id=hotel_id,
        guest_name=guest_name,
        email=f"{guest_name.lower()}@example.com",
        stay_date=date(2024, 5, 1),
        rating=rating,
        review_text=f"Review by {guest_name}",
        is_internal=is_internal,
        email_sent=True,
        created_at=created_at,
    )
    db.add(review)
    db.commit()
    return review


@pytest.fixture
def reviews(db, hotel, other_hotel):
    add_review(db, hotel.id, "Older", datetime(2024, 5, 1, 9, 0))
    add_review(db, hotel.id, "Newer", datetime(2024, 5, 3, 9, 0))
    add_review(db, hotel.id, "Public", datetime(2024, 5, 4, 9, 0), is_internal=False)
    add_review(db, other_hotel.id, "Elsewhere", datetime(2024, 5, 2, 9, 0))


class TestListReviews:
    def test_staff_see_internal_reviews_of_their_hotel_newest_first(self, db, reviews, staff_caller):
        result = ReviewQueryService(db).list_reviews(staff_caller)

        assert [r.guest_name for r in result] == ["Newer", "Older"]

    def test_staff_cannot_read_another_hotel(self, db, reviews, staff_caller, other_hotel):
        result = ReviewQueryService(db).list_reviews(staff_caller, other_hotel.id)

        assert [r.guest_name for r in result] == ["Newer", "Older"]

    def test_admin_reads_the_named_hotel(self, db, reviews, admin_caller, other_hotel):
        result = ReviewQueryService(db).list_reviews(admin_caller, other_hotel.id)

        assert [r.guest_name for r in result] == ["Elsewhere"]

    def test_admin_must_name_a_hotel(self, db, reviews, admin_caller):
        with pytest.raises(ValidationError, match="Please select a hotel"):
            ReviewQueryService(db).list_reviews(admin_caller)

    def test_staff_without_hotel(self, db, unassigned_caller):
        with pytest.raises(ValidationError, match="No hotel assigned to user"):
            ReviewQueryService(db).list_reviews(unassigned_caller)

    def test_listing_is_idempotent(self, db, reviews, staff_caller):
        service = ReviewQueryService(db)

        first = [r.id for r in service.list_reviews(staff_caller)]
        assert [r.id for r in service.list_reviews(staff_caller)] == first


class TestExportReviews:
    def test_csv_matches_listing(self, db, reviews, staff_caller):
        content = ReviewQueryService(db).export_reviews_csv(staff_caller)

        rows = list(csv.reader(StringIO(content)))
        assert rows[0] == CSV_HEADER
        assert [row[0] for row in rows[1:]] == ["Newer", "Older"]
        assert rows[1][1] == "newer@example.com"
        assert rows[1][2] == "2024-05-01"
        assert rows[1][3] == "4"

    def test_empty_hotel_exports_header_only(self, db, hotel, staff_caller):
        content = ReviewQueryService(db).export_reviews_csv(staff_caller)

        assert list(csv.reader(StringIO(content))) == [CSV_HEADER]


class TestListBatches:
    @pytest.fixture
    def batches(self, db, hotel, other_hotel):
        first = EmailBatchRepository.create_batch(db, hotel.id, ["a@x.com", "b@x.com"])
        first.created_at = datetime(2024, 5, 1, 9, 0)
        first.status = "failed"
        first.entries[0].status = "sent"
        first.entries[1].status = "failed"
        first.entries[1].error = "Failed to send email: mailbox full"
        EmailBatchRepository.save_batch(db, first)

        second = EmailBatchRepository.create_batch(db, hotel.id, ["c@x.com"])
        second.created_at = datetime(2024, 5, 2, 9, 0)
        EmailBatchRepository.save_batch(db, second)

        elsewhere = EmailBatchRepository.create_batch(db, other_hotel.id, ["d@x.com"])
        elsewhere.created_at = datetime(2024, 5, 3, 9, 0)
        EmailBatchRepository.save_batch(db, elsewhere)
        return first, second, elsewhere

    def test_staff_see_their_hotel_newest_first(self, db, batches, staff_caller):
        first, second, _ = batches

        result = ReviewQueryService(db).list_batches(staff_caller)

        assert [b.id for b in result] == [second.id, first.id]

    def test_summary_counts_and_entry_detail(self, db, batches, staff_caller):
        first = batches[0]

        summary = next(b for b in ReviewQueryService(db).list_batches(staff_caller) if b.id == first.id)

        assert (summary.emailCount, summary.sentCount, summary.failedCount) == (2, 1, 1)
        assert [e.email for e in summary.emails] == ["a@x.com", "b@x.com"]
        assert summary.emails[1].error == "Failed to send email: mailbox full"
        assert summary.status == "failed"

    def test_admin_without_hotel_sees_every_hotel(self, db, batches, admin_caller):
        result = ReviewQueryService(db).list_batches(admin_caller)

        assert [b.id for b in result] == [batches[2].id, batches[1].id, batches[0].id]

    def test_admin_filters_by_hotel(self, db, batches, admin_caller, other_hotel):
        result = ReviewQueryService(db).list_batches(admin_caller, other_hotel.id)

        assert [b.id for b in result] == [batches[2].id]

    def test_listing_is_idempotent(self, db, batches, admin_caller):
        service = ReviewQueryService(db)

        assert service.list_batches(admin_caller) == service.list_batches(admin_caller)
