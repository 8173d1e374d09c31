"""
Service modules for Daraja operations.
"""

from .auth_service import AccessToken, AuthService
from .account_service import AccountService
from .c2b_service import C2BService
from .b2c_service import B2CService
from .b2b_service import B2BService
from .billing_service import BillingService
from .ratiba_service import RatibaService
from .transport_service import TransportService

__all__ = [
    'AccessToken',
    'AuthService',
    'AccountService',
    'C2BService',
    'B2CService',
    'B2BService',
    'BillingService',
    'RatibaService',
    'TransportService',
]
