import pytest

from hotel_reviews.admin import create_or_update_admin
from hotel_reviews.errors import PersistenceError, ValidationError
from hotel_reviews.security_utils import verify_password


def test_creates_admin_with_hashed_password(db):
    user, created = create_or_update_admin(db, "admin", "Admin@Example.com", "correct horse")

    assert created is True
    assert user.role == "admin"
    assert user.email == "admin@example.com"
    assert user.password_hash != "correct horse"
    assert verify_password("correct horse", user.password_hash)


def test_updates_existing_admin_email_only(db):
    user, _ = create_or_update_admin(db, "admin", "old@example.com", "correct horse")
    old_hash = user.password_hash

    user, created = create_or_update_admin(db, "admin", "new@example.com")

    assert created is False
    assert user.email == "new@example.com"
    assert user.password_hash == old_hash


def test_new_admin_needs_a_password(db):
    with pytest.raises(ValidationError, match="Password is required"):
        create_or_update_admin(db, "admin", "admin@example.com")


def test_short_password(db):
    with pytest.raises(ValidationError, match="at least 8"):
        create_or_update_admin(db, "admin", "admin@example.com", "short")


def test_invalid_email(db):
    with pytest.raises(ValidationError, match="Invalid email format"):
        create_or_update_admin(db, "admin", "not-an-email", "correct horse")


def test_email_taken_by_another_user(db, staff_user):
    with pytest.raises(PersistenceError) as exc_info:
        create_or_update_admin(db, "admin", staff_user.email, "correct horse")

    assert exc_info.value.status_code == 409
