"""
Billing service: dynamic QR codes and Bill Manager invoicing.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from ..constants import APIEndpoints, QRTransactionCode
from ..exceptions import ValidationError
from ..results import OperationRequest
from ..utils.validators import (
    floor_amount, format_date, normalize_phone, require_callback_url,
    require_value, validate_choice
)
from .base import BaseService

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]

INVOICE_DATE_FORMAT = '%Y-%m-%d'


def _invoice_items(items: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Check invoice line items and floor their amounts."""
    cleaned = []
    for index, item in enumerate(items or []):
        if not isinstance(item, dict) or not item.get('itemName'):
            raise ValidationError(
                f"Invoice item {index} must be a mapping with an itemName",
                field='invoiceItems'
            )
        entry = {'itemName': str(item['itemName'])}
        if item.get('amount') is not None:
            entry['amount'] = floor_amount(item['amount'], field=f'invoiceItems[{index}].amount')
        cleaned.append(entry)
    return cleaned


class BillingService(BaseService):
    """
    Service for QR code generation and Bill Manager requests.
    """

    def build_dynamic_qr(
        self,
        merchant_name: str,
        ref_no: str,
        amount: Amount,
        trx_code: Union[str, QRTransactionCode],
        cpi: str,
        size: Union[int, str] = 300
    ) -> OperationRequest:
        """
        Build a dynamic QR code request.

        Args:
            merchant_name: Name of the company / M-Pesa merchant
            ref_no: Transaction reference
            amount: Sale amount, fractions are dropped
            trx_code: BG, WA, PB, SM or SB
            cpi: Credit party identifier (till, paybill, agent or phone number)
            size: Image edge length in pixels
        """
        try:
            size = int(size)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid Size: {size}", field='Size')
        if size <= 0:
            raise ValidationError(f"Size must be positive. Got: {size}", field='Size')

        payload = {
            'MerchantName': require_value('MerchantName', merchant_name),
            'RefNo': require_value('RefNo', ref_no),
            'Amount': floor_amount(amount),
            'TrxCode': validate_choice(QRTransactionCode, trx_code, 'TrxCode'),
            'CPI': require_value('CPI', cpi),
            'Size': str(size),
        }
        return self._build('dynamic_qr', APIEndpoints.DYNAMIC_QR, payload)

    def build_optin(
        self,
        email: str,
        phone_number: str,
        send_reminders: bool = True,
        logo: Optional[str] = None
    ) -> OperationRequest:
        """
        Build the Bill Manager opt-in for the configured shortcode.

        Args:
            email: Business email address
            phone_number: Business official contact
            send_reminders: Enable SMS payment reminders for invoices
            logo: Optional image embedded in invoices and receipts
        """
        payload = {
            'ShortCode': self.config.shortcode,
            'email': require_value('email', email),
            'officialContact': normalize_phone(phone_number),
            'sendReminders': '1' if send_reminders else '0',
            'logo': logo,
            'callbackurl': require_callback_url('callbackurl', self.callbacks.bill_optin_callback_url),
        }
        return self._build('bill_manager_optin', APIEndpoints.BILL_MANAGER_OPTIN, payload)

    def build_invoice(
        self,
        reference: str,
        billed_to: str,
        phone_number: str,
        billing_period: str,
        invoice_name: str,
        due_date: Union[date, str],
        amount: Amount,
        items: Optional[Iterable[Dict[str, Any]]] = None
    ) -> OperationRequest:
        """
        Build a single invoice.

        Args:
            reference: Unique invoice reference on your side, e.g. INV12345
            billed_to: Full name of the person billed
            phone_number: Phone number of the person billed
            billing_period: Period covered, e.g. "Jan 2024"
            invoice_name: Descriptive name, e.g. "water bill"
            due_date: Date payment is expected
            amount: Invoice total, fractions are dropped
            items: Optional line items, each ``{'itemName': ..., 'amount': ...}``
        """
        payload = {
            'externalReference': require_value('externalReference', reference),
            'billedFullName': require_value('billedFullName', billed_to),
            'billedPhoneNumber': require_value('billedPhoneNumber', phone_number),
            'billedPeriod': billing_period,
            'invoiceName': require_value('invoiceName', invoice_name),
            'dueDate': format_date(due_date, INVOICE_DATE_FORMAT, field='dueDate'),
            'amount': floor_amount(amount, field='amount'),
            'invoiceItems': _invoice_items(items),
        }
        return self._build('send_invoice', APIEndpoints.BILL_MANAGER_INVOICE, payload)
