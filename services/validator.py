import re
from typing import Any, List

NAME_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 2000

# local@domain.tld, no whitespace and a single "@"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
EMAIL_RE = re.compile(EMAIL_PATTERN)


def is_text(value) -> bool:
    """True for strings that can be sent as UTF-8 (no lone surrogates)."""
    if not isinstance(value, str):
        return False
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _text_field(payload: dict, field: str):
    value = payload.get(field)
    return value if is_text(value) else None


def is_valid_email(email) -> bool:
    return is_text(email) and EMAIL_RE.fullmatch(email) is not None


def validate_submission(payload: Any) -> List[str]:
    """
    Check a decoded contact form body and return the problems found.

    Every field is checked, so one request can report several errors. They
    come back in field order (name, email, message); an empty list means the
    submission can be sent. Anything that is not a JSON object counts as a
    body with no fields.
    """
    if not isinstance(payload, dict):
        payload = {}

    errors: List[str] = []

    name = _text_field(payload, "name")
    if not name or not name.strip():
        errors.append("Name is required")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(f"Name must be less than {NAME_MAX_LENGTH} characters")

    if not is_valid_email(payload.get("email")):
        errors.append("Valid email is required")

    message = _text_field(payload, "message")
    if not message or not message.strip():
        errors.append("Message is required")
    elif len(message) > MESSAGE_MAX_LENGTH:
        errors.append(f"Message must be less than {MESSAGE_MAX_LENGTH} characters")

    return errors
