"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Any, Optional

# Loose check used when filtering recipient lists: something@something.tld
RECIPIENT_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_RATING = 1
MAX_RATING = 5


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def is_email(value: Any) -> bool:
    """True if value looks like a deliverable address"""
    return isinstance(value, str) and bool(RECIPIENT_EMAIL_PATTERN.match(value))


def filter_valid_emails(emails: list[Any]) -> list[str]:
    """
    Drop malformed recipients, keeping input order.

    Surrounding whitespace is stripped before the check; duplicates are kept.
    """
    valid = []
    for email in emails:
        candidate = email.strip() if isinstance(email, str) else email
        if is_email(candidate):
            valid.append(candidate)
    return valid


def validate_rating(value: Any) -> int:
    """
    Coerce a submitted rating to an integer between 1 and 5.

    Accepts ints, integral floats and numeric strings ("4", "4.0").

    Raises:
        ValueError: If the value is not a whole number in range
    """
    if isinstance(value, bool):
        raise ValueError("Rating must be an integer between 1 and 5")

    if isinstance(value, str):
        value = value.strip()
        try:
            value = float(value)
        except ValueError as e:
            raise ValueError("Rating must be an integer between 1 and 5") from e

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("Rating must be an integer between 1 and 5")
        value = int(value)

    if not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValueError("Rating must be an integer between 1 and 5")

    return value


def parse_stay_date(value: Any) -> date:
    """
    Parse an ISO date or datetime string into a date.

    Raises:
        ValueError: If the value is not an ISO 8601 date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid stay date")

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ValueError("Invalid stay date") from e
