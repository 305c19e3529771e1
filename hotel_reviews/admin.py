"""Admin account bootstrap"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ValidationError, persistence_error_from
from .models import User
from .security_utils import hash_password
from .shared.validators import validate_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def create_or_update_admin(
    db: Session, username: str, email: str, password: Optional[str] = None
) -> tuple[User, bool]:
    """
    Create the admin account, or update the email (and password when given)
    of the existing one with that username.

    Returns the user and whether it was created.
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")

    try:
        email = validate_email(email)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if not email:
        raise ValidationError("Email is required")

    if password is not None and len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    user = db.query(User).filter(User.username == username).first()
    created = user is None
    if created:
        if password is None:
            raise ValidationError("Password is required for a new admin")
        user = User(username=username, email=email, role="admin")
        db.add(user)

    user.email = email
    user.role = "admin"
    if password is not None:
        user.password_hash = hash_password(password)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise persistence_error_from(e) from e
    db.refresh(user)
    logger.info(f"✅ Admin '{username}' {'created' if created else 'updated'}")
    return user, created
