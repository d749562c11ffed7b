"""Reusable field validators for public form input.

Quote requests and status notes arrive from anonymous browsers and are
later rendered in the admin dashboard, so free text is checked for
markup that would execute there.
"""

import re

EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_REGEX = re.compile(r"^\+?[0-9]{6,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")

XSS_PATTERNS = [
    r"<script[^>]*>.*?</script>",
    r"javascript:",
    r"on\w+\s*=",
    r"<iframe",
]


def validate_email(value: str) -> str:
    """Validate email address.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email is invalid
    """
    if not value:
        raise ValueError("Email is required")

    value = value.strip().lower()

    if len(value) > 254:  # RFC 5321
        raise ValueError("Email address too long")

    if not EMAIL_REGEX.match(value):
        raise ValueError("Invalid email address format")

    return value


def validate_phone(value: str) -> str:
    """Validate a phone number, dropping spaces, dashes, dots and parentheses."""
    if not value:
        raise ValueError("Phone number is required")

    value = _PHONE_SEPARATORS.sub("", value)

    if not PHONE_REGEX.match(value):
        raise ValueError("Invalid phone number format (digits with optional leading +)")

    return value


def validate_no_xss(value: str | None) -> str | None:
    """Reject free text carrying script-like markup."""
    if value is None:
        return value

    for pattern in XSS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE | re.DOTALL):
            raise ValueError("Invalid input detected")

    return value
