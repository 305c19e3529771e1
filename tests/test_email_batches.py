"""Tests for review request batches: creation, processing and listing."""

from types import SimpleNamespace

import pytest

from hotel_reviews.domain.email_batches.repository import EmailBatchRepository
from hotel_reviews.domain.email_batches.service import (
    EmailBatchService,
    aggregate_batch_status,
    read_emails_from_csv,
)
from hotel_reviews.errors import NotFound, ValidationError
from hotel_reviews.models import EmailBatch, EmailBatchEntry

from .conftest import FakeDispatcher


def entries(*statuses):
    return [SimpleNamespace(status=status) for status in statuses]


class TestAggregateBatchStatus:
    def test_all_sent_is_completed(self):
        assert aggregate_batch_status(entries("sent", "sent")) == "completed"

    def test_any_failure_fails_the_batch(self):
        assert aggregate_batch_status(entries("sent", "failed")) == "failed"
        assert aggregate_batch_status(entries("failed", "failed")) == "failed"

    def test_unattempted_entry_is_not_completed(self):
        assert aggregate_batch_status(entries("sent", "pending")) == "failed"


class TestCreateBatch:
    def test_malformed_addresses_are_dropped(self, db, hotel):
        batch = EmailBatchService(db).create_batch(hotel.id, ["a@x.com", "not-an-email"])

        assert batch.status == "pending"
        assert [(e.email, e.status, e.position) for e in batch.entries] == [("a@x.com", "pending", 0)]

    def test_input_order_is_kept(self, db, hotel):
        batch = EmailBatchService(db).create_batch(hotel.id, ["c@x.com", "a@x.com", "b@x.com"])

        assert [e.email for e in batch.entries] == ["c@x.com", "a@x.com", "b@x.com"]

    @pytest.mark.parametrize("emails", [[], ["nope", "also nope", ""]])
    def test_nothing_valid_creates_nothing(self, db, hotel, emails):
        with pytest.raises(ValidationError):
            EmailBatchService(db).create_batch(hotel.id, emails)

        assert db.query(EmailBatch).count() == 0
        assert db.query(EmailBatchEntry).count() == 0


class TestProcessBatch:
    @pytest.mark.asyncio
    async def test_successful_sends_complete_the_batch(self, db, hotel):
        dispatcher = FakeDispatcher()
        service = EmailBatchService(db, dispatcher)
        batch = service.create_batch(hotel.id, ["a@x.com", "not-an-email"])

        batch = await service.process_batch(batch)

        assert dispatcher.review_requests == ["a@x.com"]
        assert batch.status == "completed"
        assert batch.completed_at is not None
        assert batch.entries[0].status == "sent"
        assert batch.entries[0].sent_at is not None

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(self, db, hotel):
        dispatcher = FakeDispatcher(fail_for={"b@x.com"})
        service = EmailBatchService(db, dispatcher)
        batch = service.create_batch(hotel.id, ["a@x.com", "b@x.com", "c@x.com"])

        batch = await service.process_batch(batch)

        assert dispatcher.review_requests == ["a@x.com", "b@x.com", "c@x.com"]
        assert [e.status for e in batch.entries] == ["sent", "failed", "sent"]
        assert "rejected b@x.com" in batch.entries[1].error
        assert batch.entries[1].sent_at is None
        assert batch.status == "failed"

    @pytest.mark.asyncio
    async def test_outcomes_are_persisted(self, db, hotel):
        service = EmailBatchService(db, FakeDispatcher(fail_for={"b@x.com"}))
        batch = await service.process_batch(service.create_batch(hotel.id, ["a@x.com", "b@x.com"]))
        db.expire_all()

        stored = EmailBatchRepository.get_batch(db, batch.id)
        assert stored.status == "failed"
        assert [e.status for e in stored.entries] == ["sent", "failed"]

    @pytest.mark.asyncio
    async def test_public_review_link_is_passed_to_dispatcher(self, db, hotel):
        calls = []

        class RecordingDispatcher(FakeDispatcher):
            async def send_review_request(self, to_email, hotel_name, hotel_id, positive_link=None):
                calls.append((to_email, hotel_name, hotel_id, positive_link))
                return {"success": True}

        service = EmailBatchService(db, RecordingDispatcher())
        await service.process_batch(service.create_batch(hotel.id, ["a@x.com"]))

        assert calls == [("a@x.com", "Seaside Inn", hotel.id, "https://g.page/r/seaside/review")]


class TestSendReviewRequests:
    @pytest.mark.asyncio
    async def test_staff_send_to_their_own_hotel(self, db, hotel, other_hotel, staff_caller):
        service = EmailBatchService(db, FakeDispatcher(fail_for={"b@x.com"}))

        result = await service.send_review_requests(
            staff_caller, ["a@x.com", "b@x.com", "junk"], hotel_id=other_hotel.id
        )

        assert result["message"] == "Review requests processed"
        assert result["results"]["success"] == 1
        assert result["results"]["failed"] == 1
        batch = EmailBatchRepository.get_batch(db, result["results"]["batchId"])
        assert batch.hotel_id == hotel.id

    @pytest.mark.asyncio
    async def test_admin_must_name_a_hotel(self, db, hotel, admin_caller):
        service = EmailBatchService(db, FakeDispatcher())

        with pytest.raises(ValidationError, match="select a hotel"):
            await service.send_review_requests(admin_caller, ["a@x.com"])

    @pytest.mark.asyncio
    async def test_admin_sends_for_named_hotel(self, db, hotel, admin_caller):
        dispatcher = FakeDispatcher()
        service = EmailBatchService(db, dispatcher)

        result = await service.send_review_requests(admin_caller, ["a@x.com"], hotel_id=hotel.id)

        assert result["results"] == {"success": 1, "failed": 0, "batchId": result["results"]["batchId"]}
        assert dispatcher.review_requests == ["a@x.com"]

    @pytest.mark.asyncio
    async def test_unknown_hotel(self, db, admin_caller):
        service = EmailBatchService(db, FakeDispatcher())

        with pytest.raises(NotFound):
            await service.send_review_requests(admin_caller, ["a@x.com"], hotel_id="missing")

    @pytest.mark.asyncio
    async def test_staff_without_hotel(self, db, unassigned_caller):
        service = EmailBatchService(db, FakeDispatcher())

        with pytest.raises(ValidationError, match="No hotel assigned"):
            await service.send_review_requests(unassigned_caller, ["a@x.com"])


class TestReadEmailsFromCsv:
    def test_reads_email_column_in_order(self):
        content = b"Name,Email\nAna,ana@x.com\nBob,not-valid\nCy, cy@x.com \n,\n"

        assert read_emails_from_csv(content) == ["ana@x.com", "cy@x.com"]

    def test_handles_utf8_bom(self):
        assert read_emails_from_csv("\ufeffemail\nana@x.com\n".encode("utf-8")) == ["ana@x.com"]

    def test_requires_email_column(self):
        with pytest.raises(ValidationError, match="'email' column"):
            read_emails_from_csv(b"name,phone\nAna,123\n")

    def test_rejects_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            read_emails_from_csv(b"")

    def test_rejects_non_utf8(self):
        with pytest.raises(ValidationError, match="UTF-8"):
            read_emails_from_csv("email\nj\xe9r\xf4me@x.com\n".encode("latin-1"))
