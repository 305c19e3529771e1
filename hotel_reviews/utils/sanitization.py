import html
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def clean_text(value: Optional[str]) -> str:
    """Strip surrounding whitespace, treating None as empty"""
    if value is None:
        return ""
    return str(value).strip()
