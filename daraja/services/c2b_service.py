"""
C2B service for customer-to-business payments.
Builds URL registration, simulation, STK push and reversal requests.
"""

import logging
from typing import Optional, Union
from decimal import Decimal

from ..constants import (
    APIEndpoints, C2BCommand, C2BResponseType, CommandID,
    DEFAULT_STK_DESCRIPTION, OCCASION_MAX_LENGTH, REMARKS_MAX_LENGTH,
    STK_ACCOUNT_REFERENCE_MAX_LENGTH, TRANSACTION_DESC_MAX_LENGTH
)
from ..results import OperationRequest
from ..utils.security import generate_password, generate_timestamp
from ..utils.validators import (
    floor_amount, normalize_phone, require_callback_url,
    require_value, truncate, validate_choice
)
from .base import BaseService

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]


class C2BService(BaseService):
    """
    Service for customer-to-business requests.
    Handles URL registration, simulation, STK push and reversals.
    """

    def build_register_urls(self, response_type: Union[str, C2BResponseType] = C2BResponseType.COMPLETED) -> OperationRequest:
        """
        Build the registration of the validation and confirmation URLs.

        Args:
            response_type: What the gateway does when the validation URL
                cannot be reached (Completed or Cancelled)
        """
        payload = {
            'ShortCode': self.config.shortcode,
            'ResponseType': validate_choice(C2BResponseType, response_type, 'ResponseType'),
            'ConfirmationURL': require_callback_url('ConfirmationURL', self.callbacks.stk_confirmation_url),
            'ValidationURL': require_callback_url('ValidationURL', self.callbacks.stk_validation_url),
        }
        return self._build('c2b_register_url', APIEndpoints.C2B_REGISTER_URL, payload)

    def build_simulate(
        self,
        amount: Amount,
        phone_number: str,
        bill_ref_number: str,
        command_id: Union[str, C2BCommand] = C2BCommand.PAYBILL
    ) -> OperationRequest:
        """
        Build a simulated customer payment (sandbox).

        Args:
            amount: Amount paid, fractions are dropped
            phone_number: Paying customer's number
            bill_ref_number: Account number credited
            command_id: CustomerPayBillOnline or CustomerBuyGoodsOnline
        """
        if not self.config.is_sandbox:
            logger.warning("C2B simulate requested outside the sandbox environment")

        payload = {
            'ShortCode': self.config.shortcode,
            'CommandID': validate_choice(C2BCommand, command_id, 'CommandID'),
            'Amount': floor_amount(amount),
            'Msisdn': normalize_phone(phone_number),
            'BillRefNumber': bill_ref_number,
        }
        return self._build('c2b_simulate', APIEndpoints.C2B_SIMULATE, payload)

    def build_stk_push(
        self,
        account_reference: str,
        phone_number: str,
        amount: Amount,
        transaction_desc: Optional[str] = None,
        transaction_type: Union[str, C2BCommand] = C2BCommand.PAYBILL
    ) -> OperationRequest:
        """
        Build an STK push (Lipa na M-Pesa Online) request.
        Prompts the customer's phone to authorize the payment.

        Args:
            account_reference: Account number shown to the customer (max 12 chars)
            phone_number: Customer phone number
            amount: Amount to collect, fractions are dropped
            transaction_desc: Description, cut to 13 characters
            transaction_type: CustomerPayBillOnline or CustomerBuyGoodsOnline
        """
        passkey = self._require_passkey()
        phone = normalize_phone(phone_number)
        timestamp = generate_timestamp()

        payload = {
            'BusinessShortCode': self.config.shortcode,
            'Password': generate_password(self.config.shortcode, passkey, timestamp),
            'Timestamp': timestamp,
            'TransactionType': validate_choice(C2BCommand, transaction_type, 'TransactionType'),
            'Amount': floor_amount(amount),
            'PartyA': phone,
            'PartyB': self.config.shortcode,
            'PhoneNumber': phone,
            'AccountReference': truncate(
                require_value('AccountReference', account_reference), STK_ACCOUNT_REFERENCE_MAX_LENGTH
            ),
            'TransactionDesc': truncate(transaction_desc or DEFAULT_STK_DESCRIPTION, TRANSACTION_DESC_MAX_LENGTH),
            'CallBackURL': require_callback_url('CallBackURL', self.callbacks.stk_callback_url),
        }
        return self._build('stk_push', APIEndpoints.STK_PUSH, payload)

    def build_stk_push_status(self, checkout_request_id: str) -> OperationRequest:
        """
        Build a status query for an STK push.

        Args:
            checkout_request_id: CheckoutRequestID returned by the push
        """
        passkey = self._require_passkey()
        timestamp = generate_timestamp()

        payload = {
            'BusinessShortCode': self.config.shortcode,
            'Password': generate_password(self.config.shortcode, passkey, timestamp),
            'Timestamp': timestamp,
            'CheckoutRequestID': require_value('CheckoutRequestID', checkout_request_id),
        }
        return self._build('stk_push_status', APIEndpoints.STK_PUSH_QUERY, payload)

    def build_reversal(
        self,
        transaction_id: str,
        amount: Amount,
        receiver_shortcode: Optional[str] = None,
        remarks: Optional[str] = None,
        occasion: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a reversal of a C2B transaction.

        Args:
            transaction_id: M-Pesa receipt of the payment being reversed
            amount: Amount to reverse, fractions are dropped
            receiver_shortcode: Organization that received the payment
                (defaults to the configured shortcode)
            remarks: Comments sent along with the reversal
            occasion: Optional extra information
        """
        payload = {
            **self._initiator_fields(),
            'CommandID': CommandID.TRANSACTION_REVERSAL,
            'TransactionID': require_value('TransactionID', transaction_id),
            'Amount': floor_amount(amount),
            'ReceiverParty': receiver_shortcode or self.config.shortcode,
            'RecieverIdentifierType': self.shortcode_type,
            'Remarks': truncate(remarks or 'Reversal', REMARKS_MAX_LENGTH),
            'Occasion': truncate(occasion or '', OCCASION_MAX_LENGTH),
            'ResultURL': require_callback_url('ResultURL', self.callbacks.reversal_result_url),
            'QueueTimeOutURL': require_callback_url('QueueTimeOutURL', self.callbacks.reversal_timeout_url),
        }
        return self._build('reversal', APIEndpoints.REVERSAL, payload)
