"""
Text sanitization for user-submitted content.

Titles, descriptions and comments are stored as plain text: every HTML tag is
stripped before storage so nothing a user writes can execute in a browser.
"""

import html
from typing import Optional

import bleach

from models.exceptions import ValidationException


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags for plain text fields.

    Args:
        content: Raw content from user input

    Returns:
        Plain text with all HTML removed and entities decoded, or None if
        input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Title')
        'alert(1)Title'
        >>> sanitize_plain_text('<b>Bold</b> text')
        'Bold text'
        >>> sanitize_plain_text("Tom & Jerry: 1 < 2")
        'Tom & Jerry: 1 < 2'
    """
    if content is None:
        return None

    # bleach escapes & < > in text it keeps; stored values are plain text
    return html.unescape(bleach.clean(content, tags=[], strip=True))


def clean_text_field(
    content: Optional[str], field: str, max_length: int
) -> str:
    """
    Sanitize, trim and bound a required text field.

    Args:
        content: Raw content from user input
        field: Field label used in error messages
        max_length: Maximum allowed length after cleaning

    Returns:
        Cleaned text

    Raises:
        ValidationException: If the text is missing, empty after cleaning,
            or longer than max_length
    """
    if not isinstance(content, str):
        raise ValidationException(f"{field} must be text")

    cleaned = (sanitize_plain_text(content) or "").strip()
    if not cleaned:
        raise ValidationException(f"{field} cannot be empty")
    if len(cleaned) > max_length:
        raise ValidationException(
            f"{field} must be at most {max_length} characters (got {len(cleaned)})"
        )
    return cleaned
