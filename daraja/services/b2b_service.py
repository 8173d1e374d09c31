"""
B2B service for business-to-business payments.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional, Union

from ..constants import ACCOUNT_REFERENCE_MAX_LENGTH, APIEndpoints, CommandID, REMARKS_MAX_LENGTH
from ..results import OperationRequest
from ..utils.validators import (
    floor_amount, normalize_optional_phone, require_callback_url,
    require_value, truncate
)
from .base import BaseService

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]


class B2BService(BaseService):
    """
    Service for business-to-business requests.
    Handles paybill and till payments, express checkout and tax remittance.
    """

    def _business_payment(
        self,
        operation: str,
        command_id: str,
        dest_shortcode: str,
        amount: Amount,
        remarks: str,
        account_number: str,
        requester: Optional[str]
    ) -> OperationRequest:
        payload = {
            **self._initiator_fields(),
            'CommandID': command_id,
            'SenderIdentifierType': self.shortcode_type,
            'RecieverIdentifierType': self.shortcode_type,
            'Amount': floor_amount(amount),
            'PartyA': self.config.shortcode,
            'PartyB': require_value('PartyB', dest_shortcode),
            'AccountReference': truncate(
                require_value('AccountReference', account_number), ACCOUNT_REFERENCE_MAX_LENGTH
            ),
            'Requester': normalize_optional_phone(requester),
            'Remarks': truncate(require_value('Remarks', remarks), REMARKS_MAX_LENGTH),
            'QueueTimeOutURL': require_callback_url('QueueTimeOutURL', self.callbacks.b2b_timeout_url),
            'ResultURL': require_callback_url('ResultURL', self.callbacks.b2b_result_url),
        }
        return self._build(operation, APIEndpoints.B2B_PAYMENT, payload)

    def build_paybill(
        self,
        dest_shortcode: str,
        amount: Amount,
        remarks: str,
        account_number: str,
        requester: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a payment from the business account to a paybill number.

        Args:
            dest_shortcode: Paybill receiving the payment
            amount: Amount to pay, fractions are dropped
            remarks: Comments sent along with the payment
            account_number: Account at the receiving paybill (max 13 chars)
            requester: Optional consumer number on whose behalf the payment is made
        """
        return self._business_payment(
            'b2b_paybill', CommandID.BUSINESS_PAY_BILL,
            dest_shortcode, amount, remarks, account_number, requester
        )

    def build_buy_goods(
        self,
        dest_shortcode: str,
        amount: Amount,
        remarks: str,
        account_number: str,
        requester: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a payment from the business account to a till number.
        """
        return self._business_payment(
            'b2b_buy_goods', CommandID.BUSINESS_BUY_GOODS,
            dest_shortcode, amount, remarks, account_number, requester
        )

    def build_express_checkout(
        self,
        primary_shortcode: str,
        amount: Amount,
        payment_ref: str,
        partner_name: str,
        request_ref_id: Optional[str] = None,
        receiver_shortcode: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a B2B express checkout: a USSD prompt sent to another merchant's
        till asking it to pay this business.

        Args:
            primary_shortcode: Till of the merchant being prompted to pay
            amount: Amount requested, fractions are dropped
            payment_ref: Reference shown on the prompt
            partner_name: Name shown to the paying merchant
            request_ref_id: Unique request ID; generated when empty
            receiver_shortcode: Receiving paybill (defaults to the configured shortcode)
        """
        payload = {
            'primaryShortCode': require_value('primaryShortCode', primary_shortcode),
            'receiverShortCode': receiver_shortcode or self.config.shortcode,
            'amount': str(floor_amount(amount, field='amount')),
            'paymentRef': require_value('paymentRef', payment_ref),
            'callbackUrl': require_callback_url('callbackUrl', self.callbacks.b2b_stk_callback_url),
            'partnerName': require_value('partnerName', partner_name),
            'RequestRefID': request_ref_id or str(uuid.uuid4()),
        }
        return self._build('b2b_express_checkout', APIEndpoints.B2B_EXPRESS_CHECKOUT, payload)

    def build_tax_remittance(
        self,
        amount: Amount,
        receiver_shortcode: str,
        account_reference: str,
        remarks: Optional[str] = None
    ) -> OperationRequest:
        """
        Build a tax remittance to the revenue authority's shortcode.

        Args:
            amount: Amount to remit, fractions are dropped
            receiver_shortcode: Revenue authority shortcode
            account_reference: Payment registration number
            remarks: Comments sent along with the remittance
        """
        payload = {
            **self._initiator_fields(),
            'CommandID': CommandID.BUSINESS_PAYMENT,
            'SenderIdentifierType': self.shortcode_type,
            'RecieverIdentifierType': self.shortcode_type,
            'Amount': floor_amount(amount),
            'PartyA': self.config.shortcode,
            'PartyB': require_value('PartyB', receiver_shortcode),
            'AccountReference': require_value('AccountReference', account_reference),
            'Remarks': truncate(remarks or 'Tax remittance', REMARKS_MAX_LENGTH),
            'QueueTimeOutURL': require_callback_url('QueueTimeOutURL', self.callbacks.tax_remittance_timeout_url),
            'ResultURL': require_callback_url('ResultURL', self.callbacks.tax_remittance_result_url),
        }
        return self._build('tax_remittance', APIEndpoints.TAX_REMITTANCE, payload)
