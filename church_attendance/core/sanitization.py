"""Input sanitization utilities."""
import re
from typing import List, Optional

from church_attendance.core.constants import ACCESS_CODE_LENGTH, ABSENCE_REASONS


# Maximum length constraints
MAX_NAME_LENGTH = 255
MAX_PHONE_LENGTH = 30
MAX_PRAYER_REQUEST_LENGTH = 2000
MAX_MESSAGE_LENGTH = 1600  # Twilio concatenated SMS limit
MAX_SERVICE_TYPE_LENGTH = 100


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Strips HTML tags and normalizes whitespace, but does NOT escape HTML
    entities; the front end escapes on render.

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    # Enforce maximum length before processing to prevent length-based attacks
    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Catches malformed tags left over after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_multiline(text: str, max_length: Optional[int] = None) -> str:
    """Like sanitize_text but keeps line breaks (prayer requests, broadcast bodies)."""
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()
    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    sanitized = re.sub(r'<[^>]*>', '', sanitized)
    sanitized = re.sub(r'[ \t]+', ' ', sanitized)
    return sanitized


def digits_only(phone: Optional[str]) -> str:
    """Strip everything but digits from a phone number."""
    if not phone:
        return ""
    return re.sub(r'\D', '', phone)


def last_ten_digits(phone: Optional[str]) -> str:
    """
    Last 10 digits of a phone number.

    Tolerates a leading country code: "+1 (555) 123-4567" and "555.123.4567"
    both give "5551234567".
    """
    return digits_only(phone)[-10:]


def phone_match_candidates(phone: str) -> List[str]:
    """
    Digit strings a stored member phone may equal for this input.

    The directory may store either "5551234567" or "15551234567".
    """
    cleaned = digits_only(phone)
    if not cleaned:
        return []
    candidates = [cleaned, "1" + cleaned]
    if len(cleaned) == 11 and cleaned.startswith("1"):
        candidates.append(cleaned[1:])
    return candidates


def sanitize_phone(phone: str) -> str:
    """Trim a phone number and require at least one digit."""
    if not isinstance(phone, str):
        raise ValueError("Phone number must be a string")

    sanitized = phone.strip()
    if not sanitized:
        raise ValueError("Phone number is required")

    if len(sanitized) > MAX_PHONE_LENGTH:
        raise ValueError(f"Phone number exceeds maximum length of {MAX_PHONE_LENGTH} characters")

    if not digits_only(sanitized):
        raise ValueError("Phone number must contain digits")

    return sanitized


def sanitize_access_code(code: str) -> str:
    """
    Normalize an access code for lookup.

    Codes are case-insensitive; they are stored upper-case.

    Raises:
        ValueError: If the code is not exactly ACCESS_CODE_LENGTH alphanumerics
    """
    if not isinstance(code, str):
        raise ValueError("Invalid code format")

    sanitized = code.strip().upper()

    if len(sanitized) != ACCESS_CODE_LENGTH or not re.match(r'^[A-Z0-9]+$', sanitized):
        raise ValueError("Invalid code format")

    return sanitized


def validate_reason(reason: str) -> str:
    """Validate an absence reason."""
    if not reason:
        raise ValueError("Reason for absence is required")

    if reason not in ABSENCE_REASONS:
        raise ValueError("Invalid reason. Must be: sick, vacation, business, or other")

    return reason


def sanitize_service_type(service_type: str) -> str:
    """Sanitize a free-form service type identifier ("Sunday Morning")."""
    sanitized = sanitize_text(service_type, max_length=MAX_SERVICE_TYPE_LENGTH)
    if not sanitized:
        raise ValueError("Service type cannot be empty")
    return sanitized


def mask_phone(phone: Optional[str]) -> str:
    """Mask phone number for logging: +15551234567 -> +155****4567"""
    if not phone or len(phone) <= 4:
        return "****"
    return phone[:4] + "****" + phone[-4:]
