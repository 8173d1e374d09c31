"""
Ratiba service for recurring (standing order) payments.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from ..constants import (
    ACCOUNT_REFERENCE_MAX_LENGTH, APIEndpoints, TRANSACTION_DESC_MAX_LENGTH
)
from ..exceptions import ValidationError
from ..results import OperationRequest
from ..utils.validators import (
    floor_amount, format_date, identifier_type_code, normalize_phone,
    recurring_frequency_code, recurring_transaction_type_label,
    require_callback_url, require_value, truncate
)
from .base import BaseService

logger = logging.getLogger(__name__)

RATIBA_DATE_FORMAT = '%Y%m%d'


class RatibaService(BaseService):
    """
    Service for standing order requests.
    """

    def build_standing_order(
        self,
        name: str,
        start_date: Union[date, str],
        end_date: Union[date, str],
        transaction_type: str,
        amount: Union[int, float, Decimal, str],
        phone_number: str,
        account_reference: str,
        description: Optional[str],
        frequency: str
    ) -> OperationRequest:
        """
        Build a standing order that debits a customer on a schedule.

        Args:
            name: Unique name of the standing order for this customer
            start_date: First debit date
            end_date: Last debit date
            transaction_type: paybill or tillnumber, the kind of receiving shortcode
            amount: Amount per debit, fractions are dropped
            phone_number: Customer being debited
            account_reference: Account shown to the customer (max 13 chars)
            description: Description, cut to 13 characters
            frequency: one-off, daily, weekly, monthly, bi-monthly,
                quarterly, half-year or yearly
        """
        start = format_date(start_date, RATIBA_DATE_FORMAT, field='StartDate')
        end = format_date(end_date, RATIBA_DATE_FORMAT, field='EndDate')
        if end < start:
            raise ValidationError(
                f"EndDate {end} is before StartDate {start}", field='EndDate'
            )

        payload = {
            'StandingOrderName': require_value('StandingOrderName', name),
            'StartDate': start,
            'EndDate': end,
            'BusinessShortCode': self.config.shortcode,
            'TransactionType': recurring_transaction_type_label(transaction_type),
            'ReceiverPartyIdentifierType': str(identifier_type_code(transaction_type)),
            'Amount': str(floor_amount(amount)),
            'PartyA': normalize_phone(phone_number),
            'CallBackURL': require_callback_url('CallBackURL', self.callbacks.ratiba_callback_url),
            'AccountReference': truncate(
                require_value('AccountReference', account_reference), ACCOUNT_REFERENCE_MAX_LENGTH
            ),
            'TransactionDesc': truncate(description or name, TRANSACTION_DESC_MAX_LENGTH),
            'Frequency': str(recurring_frequency_code(frequency)),
        }
        return self._build('standing_order', APIEndpoints.STANDING_ORDER, payload)
