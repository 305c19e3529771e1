"""Shared fixtures: in-memory database, fake email dispatcher, test client.

Environment variables must be set before hotel_reviews.config is imported,
because the config module reads them at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TOKEN_CACHE_BACKEND"] = "memory"
os.environ["APP_URL"] = "https://reviews.example.com"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from hotel_reviews.auth import Caller, CallerRole, get_current_caller  # noqa: E402
from hotel_reviews.cache import MemoryTokenCache  # noqa: E402
from hotel_reviews.database import Base, SessionLocal, engine  # noqa: E402
from hotel_reviews.domain.reviews.tokens import ReviewTokenCodec, get_token_codec  # noqa: E402
from hotel_reviews.email_service import get_email_dispatcher  # noqa: E402
from hotel_reviews.errors import EmailDeliveryError  # noqa: E402
from hotel_reviews.main import app  # noqa: E402
from hotel_reviews.models import Hotel, User  # noqa: E402
from hotel_reviews.workers.notification_worker import (  # noqa: E402
    NotificationChannel,
    get_notification_channel,
)

TEST_SECRET = "test-secret-key"


class FakeDispatcher:
    """Records every send; addresses in fail_for raise EmailDeliveryError"""

    def __init__(self, fail_for=(), fail_notifications=False):
        self.fail_for = set(fail_for)
        self.fail_notifications = fail_notifications
        self.review_requests = []
        self.notifications = []

    async def send_review_request(self, to_email, hotel_name, hotel_id, positive_link=None):
        self.review_requests.append(to_email)
        if to_email in self.fail_for:
            raise EmailDeliveryError(f"Failed to send email: rejected {to_email}")
        return {"id": f"fake-{len(self.review_requests)}", "success": True}

    async def send_internal_notification(self, db, hotel_id, review):
        self.notifications.append((hotel_id, review.guest_name))
        if self.fail_notifications:
            raise EmailDeliveryError("Failed to send email: SMTP down")
        return {"id": f"fake-notification-{len(self.notifications)}", "success": True}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def hotel(db):
    hotel = Hotel(name="Seaside Inn", google_review_link="https://g.page/r/seaside/review")
    db.add(hotel)
    db.commit()
    db.refresh(hotel)
    return hotel


@pytest.fixture
def other_hotel(db):
    hotel = Hotel(name="Mountain Lodge")
    db.add(hotel)
    db.commit()
    db.refresh(hotel)
    return hotel


@pytest.fixture
def staff_user(db, hotel):
    user = User(
        username="frontdesk",
        email="frontdesk@seaside.example.com",
        password_hash="not-a-real-hash",
        role="user",
        hotel_id=hotel.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    user = User(
        username="admin",
        email="admin@example.com",
        password_hash="not-a-real-hash",
        role="admin",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def staff_caller(staff_user):
    return Caller.from_user(staff_user)


@pytest.fixture
def admin_caller(admin_user):
    return Caller.from_user(admin_user)


@pytest.fixture
def unassigned_caller():
    return Caller(user_id="nobody", role=CallerRole.STAFF, hotel_id=None)


@pytest.fixture
def codec():
    return ReviewTokenCodec(TEST_SECRET, cache=MemoryTokenCache())


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def channel():
    return NotificationChannel()


@pytest.fixture
def client(db, codec, dispatcher, channel):
    """TestClient with the dispatcher, codec and channel swapped for test doubles.

    The lifespan is not entered, so no notification consumer runs; tests
    drain the channel themselves.
    """
    app.dependency_overrides[get_token_codec] = lambda: codec
    app.dependency_overrides[get_email_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_notification_channel] = lambda: channel
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def as_caller(client):
    """Authenticate subsequent requests as the given caller"""

    def _as(caller):
        app.dependency_overrides[get_current_caller] = lambda: caller
        return client

    return _as
