"""
M-Pesa Daraja client for Django

A reusable client for the Safaricom M-Pesa Daraja API: C2B, STK push, B2C,
B2B, reversals, status queries, Bill Manager, QR codes and standing orders.
"""

__version__ = "0.1.0"

from .client import MpesaClient
from .config import CallbackURLs, ClientConfig
from .constants import Environment
from .results import Failure, OperationRequest, OperationResult, Success

__all__ = [
    'MpesaClient',
    'CallbackURLs',
    'ClientConfig',
    'Environment',
    'Failure',
    'OperationRequest',
    'OperationResult',
    'Success',
]
