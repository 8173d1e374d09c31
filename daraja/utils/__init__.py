"""
Utility modules for Daraja operations.
"""

from .http_client import HTTPClient
from .validators import (
    normalize_phone,
    normalize_optional_phone,
    identifier_type_code,
    recurring_frequency_code,
    recurring_transaction_type_label,
    is_allowed_callback_url,
    require_callback_url,
    floor_amount,
    truncate,
)
from .security import (
    security_credential,
    generate_password,
    generate_timestamp,
    load_certificate,
)

__all__ = [
    'HTTPClient',
    'normalize_phone',
    'normalize_optional_phone',
    'identifier_type_code',
    'recurring_frequency_code',
    'recurring_transaction_type_label',
    'is_allowed_callback_url',
    'require_callback_url',
    'floor_amount',
    'truncate',
    'security_credential',
    'generate_password',
    'generate_timestamp',
    'load_certificate',
]
