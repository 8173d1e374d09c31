"""
Formatting helpers for logs and command output.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Union

from ..constants import SENSITIVE_FIELDS

MASK = '***'


def sanitize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy a payload with credential fields masked."""
    sanitized = dict(payload)
    for key in SENSITIVE_FIELDS:
        if sanitized.get(key):
            sanitized[key] = MASK
    return sanitized


def sanitize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Remove sensitive data from headers for logging."""
    sanitized = dict(headers)
    if 'Authorization' in sanitized:
        scheme = str(sanitized['Authorization']).split(' ', 1)[0]
        sanitized['Authorization'] = f'{scheme} {MASK}'
    return sanitized


def format_currency(amount: Union[int, float, Decimal, str], currency: str = "KES") -> str:
    """
    Format amount with currency code.

    Returns:
        Formatted string (e.g., "KES 1,000")
    """
    try:
        amount = Decimal(str(amount))
        return f"{currency} {amount:,.0f}"
    except (ArithmeticError, ValueError, TypeError):
        return f"{currency} 0"
