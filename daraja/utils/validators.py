"""
Validation and sanitizing utilities for Daraja request payloads.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, Union
from urllib.parse import urlparse

from ..constants import (
    BLOCKED_URL_KEYWORDS,
    IDENTIFIER_TYPES,
    KENYA_COUNTRY_CODE,
    PHONE_SUBSCRIBER_DIGITS,
    RATIBA_FREQUENCIES,
    RATIBA_TRANSACTION_TYPES,
)
from ..exceptions import ValidationError


def normalize_phone(phone: Optional[str]) -> str:
    """
    Normalize a Kenyan phone number to 2547XXXXXXXX form.

    Takes the trailing 9 digits and prefixes the country code, so
    ``0712345678``, ``712345678``, ``+254712345678`` and ``254712345678``
    all map to the same value. Applying it twice changes nothing.

    Args:
        phone: Phone number to normalize

    Returns:
        Phone number in format: 254XXXXXXXXX

    Raises:
        ValidationError: If phone number is missing or malformed
    """
    if phone is None:
        raise ValidationError("Phone number is required", field='phone')

    phone = re.sub(r'\s', '', str(phone))
    if not phone:
        raise ValidationError("Phone number is required", field='phone')

    digits = phone[1:] if phone.startswith('+') else phone
    if not digits.isdigit():
        raise ValidationError(
            f"Phone number must contain only digits. Got: {phone}", field='phone'
        )

    if len(digits) < PHONE_SUBSCRIBER_DIGITS:
        raise ValidationError(
            f"Phone number must have at least {PHONE_SUBSCRIBER_DIGITS} digits. "
            f"Got: {phone} ({len(digits)} digits)",
            field='phone'
        )

    return KENYA_COUNTRY_CODE + digits[-PHONE_SUBSCRIBER_DIGITS:]


def normalize_optional_phone(phone: Optional[str]) -> Optional[str]:
    """Normalize a phone number that may be absent."""
    if phone is None or not str(phone).strip():
        return None
    return normalize_phone(phone)


def identifier_type_code(kind: str) -> int:
    """
    Map an identifier kind to the gateway's numeric code.

    Raises:
        ValidationError: If the kind is unknown
    """
    code = IDENTIFIER_TYPES.get(str(kind or '').strip().lower())
    if code is None:
        raise ValidationError(
            f"Invalid identifier type: {kind}. "
            f"Supported types: {', '.join(IDENTIFIER_TYPES)}",
            field='identifier_type'
        )
    return code


def recurring_frequency_code(name: str) -> int:
    """Map a standing order frequency name to its code."""
    code = RATIBA_FREQUENCIES.get(str(name or '').strip().lower())
    if code is None:
        raise ValidationError(
            f"Invalid frequency: {name}. "
            f"Supported frequencies: {', '.join(RATIBA_FREQUENCIES)}",
            field='frequency'
        )
    return code


def recurring_transaction_type_label(kind: str) -> str:
    """Map a standing order receiver kind to its transaction type label."""
    label = RATIBA_TRANSACTION_TYPES.get(str(kind or '').strip().lower())
    if label is None:
        raise ValidationError(
            f"Invalid standing order transaction type: {kind}. "
            f"Supported types: {', '.join(RATIBA_TRANSACTION_TYPES)}",
            field='transaction_type'
        )
    return label


def is_allowed_callback_url(url: Optional[str]) -> bool:
    """
    Check that a callback URL is absolute and does not point at the gateway.

    Args:
        url: URL to check

    Returns:
        True if the URL is well formed and free of blocked keywords
    """
    if not url or not isinstance(url, str):
        return False

    url = url.strip()
    if any(ch.isspace() for ch in url):
        return False

    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme not in ('http', 'https') or not parsed.netloc or not parsed.hostname:
        return False

    lowered = url.lower()
    return not any(keyword in lowered for keyword in BLOCKED_URL_KEYWORDS)


def require_callback_url(field: str, url: Optional[str]) -> str:
    """
    Validate a required callback URL.

    Raises:
        ValidationError: Naming ``field`` if the URL is missing or not allowed
    """
    if not is_allowed_callback_url(url):
        raise ValidationError(f"Invalid {field}: {url!r}", field=field)
    return url.strip()


def require_value(field: str, value: Any) -> Any:
    """Ensure a required argument is present and non-empty."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)
    return value.strip() if isinstance(value, str) else value


def validate_choice(enum_cls: Type[Enum], value: Any, field: str) -> str:
    """
    Check a value against a str enum and return its wire value.

    Raises:
        ValidationError: If the value is not one of the enum's values
    """
    raw = getattr(value, 'value', value)
    for member in enum_cls:
        if member.value == raw:
            return member.value
    raise ValidationError(
        f"Invalid {field}: {value}. "
        f"Supported values: {', '.join(m.value for m in enum_cls)}",
        field=field
    )


def floor_amount(amount: Union[int, float, Decimal, str], field: str = 'Amount') -> int:
    """
    Drop the fractional part of an amount.

    The gateway only accepts whole currency units.

    Raises:
        ValidationError: If amount is not a non-negative number
    """
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid {field}: {amount}", field=field)
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid {field} format: {amount}", field=field)

    if not value.is_finite():
        raise ValidationError(f"Invalid {field}: {amount}", field=field)

    if value < 0:
        raise ValidationError(f"{field} must not be negative. Got: {amount}", field=field)

    return int(math.floor(value))


def truncate(value: Optional[str], limit: int) -> Optional[str]:
    """Cut optional text to ``limit`` characters."""
    if value is None:
        return None
    return str(value)[:limit]


def format_date(value: Union[date, datetime, str], fmt: str, field: str = 'date') -> str:
    """
    Format a date argument for the gateway.

    Args:
        value: date, datetime or ISO-8601 string
        fmt: strftime format expected by the endpoint

    Raises:
        ValidationError: If the value cannot be read as a date
    """
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)

    if not value:
        raise ValidationError(f"{field} is required", field=field)

    text = str(value).strip()
    for parser in (datetime.fromisoformat, lambda s: datetime.strptime(s, '%Y%m%d')):
        try:
            return parser(text).strftime(fmt)
        except ValueError:
            continue

    raise ValidationError(f"Invalid {field}: {value}", field=field)
