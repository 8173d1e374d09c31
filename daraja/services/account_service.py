"""
Account service for Daraja account operations.
Builds balance, transaction status and transaction history requests.
"""

import logging
from datetime import datetime
from typing import Optional, Union

from ..constants import APIEndpoints, CommandID, OCCASION_MAX_LENGTH, REMARKS_MAX_LENGTH
from ..exceptions import ValidationError
from ..results import OperationRequest
from ..utils.validators import (
    format_date, identifier_type_code, normalize_phone,
    require_callback_url, require_value, truncate
)
from .base import BaseService

logger = logging.getLogger(__name__)

PULL_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class AccountService(BaseService):
    """
    Service for account-related requests.
    """

    def build_balance(self, remarks: str = 'balance') -> OperationRequest:
        """
        Build an account balance query for the configured shortcode.

        The balance itself is delivered asynchronously to the balance result URL.
        """
        payload = {
            **self._initiator_fields(),
            'CommandID': CommandID.ACCOUNT_BALANCE,
            'PartyA': self.config.shortcode,
            'IdentifierType': self.shortcode_type,
            'Remarks': truncate(remarks or 'balance', REMARKS_MAX_LENGTH),
            'QueueTimeOutURL': require_callback_url('QueueTimeOutURL', self.callbacks.balance_timeout_url),
            'ResultURL': require_callback_url('ResultURL', self.callbacks.balance_result_url),
        }
        return self._build('balance', APIEndpoints.ACCOUNT_BALANCE, payload)

    def build_transaction_status(
        self,
        transaction_id: str,
        identifier_type: str,
        remarks: str,
        original_conversation_id: Optional[str] = None,
        occasion: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a transaction status query.

        Args:
            transaction_id: M-Pesa receipt, e.g. LXXXXXX1234
            identifier_type: msisdn, tillnumber, shortcode or paybill
            remarks: Comments sent along with the query
            original_conversation_id: Conversation ID of the original request
            occasion: Optional extra information
        """
        payload = {
            **self._initiator_fields(),
            'CommandID': CommandID.TRANSACTION_STATUS,
            'TransactionID': require_value('TransactionID', transaction_id),
            'PartyA': self.config.shortcode,
            'IdentifierType': identifier_type_code(identifier_type),
            'Remarks': truncate(remarks or 'status', REMARKS_MAX_LENGTH),
            'Occasion': truncate(occasion, OCCASION_MAX_LENGTH),
            'OriginalConversationID': original_conversation_id,
            'ResultURL': require_callback_url('ResultURL', self.callbacks.transaction_status_result_url),
            'QueueTimeOutURL': require_callback_url(
                'QueueTimeOutURL', self.callbacks.transaction_status_timeout_url
            ),
        }
        return self._build('transaction_status', APIEndpoints.TRANSACTION_STATUS, payload)

    def build_pull_register(self, nominated_number: str) -> OperationRequest:
        """
        Build the one-off registration of the shortcode for the Pull API.

        Args:
            nominated_number: Safaricom number that receives the activation notice
        """
        payload = {
            'ShortCode': self.config.shortcode,
            'RequestType': 'Pull',
            'NominatedNumber': normalize_phone(nominated_number),
            'CallBackURL': require_callback_url('CallBackURL', self.callbacks.pull_callback_url),
        }
        return self._build('pull_register', APIEndpoints.PULL_REGISTER, payload)

    def build_pull_transactions(
        self,
        start_date: Union[datetime, str],
        end_date: Union[datetime, str],
        offset: int = 0
    ) -> OperationRequest:
        """
        Build a transaction history query.

        Args:
            start_date: Start of the window
            end_date: End of the window
            offset: Paging offset, starting at 0
        """
        try:
            offset = max(int(offset or 0), 0)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid OffSetValue: {offset}", field='OffSetValue')

        payload = {
            'ShortCode': self.config.shortcode,
            'StartDate': format_date(start_date, PULL_DATE_FORMAT, field='StartDate'),
            'EndDate': format_date(end_date, PULL_DATE_FORMAT, field='EndDate'),
            'OffSetValue': str(offset),
        }
        return self._build('pull_transactions', APIEndpoints.PULL_TRANSACTIONS, payload)
