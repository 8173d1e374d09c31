"""
B2C service for business-to-customer disbursements.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional, Union

from ..constants import (
    ACCOUNT_REFERENCE_MAX_LENGTH, APIEndpoints, B2CCommand, CommandID,
    NATIONAL_ID_TYPE, OCCASION_MAX_LENGTH, REMARKS_MAX_LENGTH
)
from ..results import OperationRequest
from ..utils.security import generate_timestamp
from ..utils.validators import (
    floor_amount, normalize_optional_phone, normalize_phone,
    require_callback_url, require_value, truncate, validate_choice
)
from .base import BaseService

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]


class B2CService(BaseService):
    """
    Service for business-to-customer requests.
    Handles payments, ID-validated payments and B2C account top-ups.
    """

    def _result_urls(self):
        return {
            'QueueTimeOutURL': require_callback_url('QueueTimeOutURL', self.callbacks.b2c_timeout_url),
            'ResultURL': require_callback_url('ResultURL', self.callbacks.b2c_result_url),
        }

    def build_payment(
        self,
        conversation_id: Optional[str],
        command_id: Union[str, B2CCommand],
        phone_number: str,
        amount: Amount,
        remarks: str,
        occasion: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a B2C payment (salaries, winnings, refunds ...).

        Args:
            conversation_id: Unique OriginatorConversationID; generated when empty
            command_id: SalaryPayment, BusinessPayment or PromotionPayment
            phone_number: Receiving customer's number
            amount: Amount to send, fractions are dropped
            remarks: Comments sent along with the payment (max 100 chars)
            occasion: Optional extra information (max 100 chars)
        """
        payload = {
            'OriginatorConversationID': conversation_id or str(uuid.uuid4()),
            **self._initiator_fields('InitiatorName'),
            'CommandID': validate_choice(B2CCommand, command_id, 'CommandID'),
            'Amount': floor_amount(amount),
            'PartyA': self.config.shortcode,
            'PartyB': normalize_phone(phone_number),
            'Remarks': truncate(require_value('Remarks', remarks), REMARKS_MAX_LENGTH),
            'Occassion': truncate(occasion or '', OCCASION_MAX_LENGTH),
            **self._result_urls(),
        }
        return self._build('b2c_payment', APIEndpoints.B2C_PAYMENT, payload)

    def build_validated_payment(
        self,
        command_id: Union[str, B2CCommand],
        phone_number: str,
        amount: Amount,
        remarks: str,
        id_number: str,
        occasion: Optional[str] = None,
        id_type: str = NATIONAL_ID_TYPE
    ) -> OperationRequest:
        """
        Build a B2C payment that the gateway checks against the receiver's ID.

        Args:
            command_id: SalaryPayment, BusinessPayment or PromotionPayment
            phone_number: Receiving customer's number
            amount: Amount to send, fractions are dropped
            remarks: Comments sent along with the payment
            id_number: Receiver's identity document number
            occasion: Optional extra information
            id_type: Identity document type, 01 for national ID
        """
        payload = {
            **self._initiator_fields('InitiatorName'),
            'CommandID': validate_choice(B2CCommand, command_id, 'CommandID'),
            'Amount': floor_amount(amount),
            'PartyA': self.config.shortcode,
            'PartyB': normalize_phone(phone_number),
            'Remarks': truncate(require_value('Remarks', remarks), REMARKS_MAX_LENGTH),
            'Occasion': truncate(occasion, OCCASION_MAX_LENGTH),
            'OriginatorConversationID': generate_timestamp(),
            'IDType': id_type,
            'IDNumber': require_value('IDNumber', id_number),
            **self._result_urls(),
        }
        return self._build('validated_b2c_payment', APIEndpoints.B2C_PAYMENT, payload)

    def build_account_topup(
        self,
        amount: Amount,
        receiver_shortcode: str,
        account_reference: str,
        requester: Optional[str] = None,
        remarks: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a top-up of a B2C (bulk payment) shortcode from the working account.

        Args:
            amount: Amount to move, fractions are dropped
            receiver_shortcode: B2C shortcode being loaded
            account_reference: Reference for the transfer (max 13 chars)
            requester: Optional consumer number on whose behalf the top-up is made
            remarks: Comments sent along with the transfer
        """
        payload = {
            **self._initiator_fields(),
            'CommandID': CommandID.BUSINESS_PAY_TO_BULK,
            'SenderIdentifierType': self.shortcode_type,
            'RecieverIdentifierType': self.shortcode_type,
            'Amount': floor_amount(amount),
            'PartyA': self.config.shortcode,
            'PartyB': require_value('PartyB', receiver_shortcode),
            'AccountReference': truncate(
                require_value('AccountReference', account_reference), ACCOUNT_REFERENCE_MAX_LENGTH
            ),
            'Requester': normalize_optional_phone(requester),
            'Remarks': truncate(remarks or 'B2C top up', REMARKS_MAX_LENGTH),
            **self._result_urls(),
        }
        return self._build('b2c_topup', APIEndpoints.B2B_PAYMENT, payload)
