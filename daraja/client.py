"""
High-level Daraja client.

``MpesaClient`` is the single entry point: every public method builds the
request (validation happens here, before any network call), dispatches it with
a cached bearer token and returns an ``OperationResult``.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Union

import requests

from .config import ClientConfig
from .constants import B2CCommand, C2BCommand, C2BResponseType, NATIONAL_ID_TYPE, QRTransactionCode
from .results import OperationRequest, OperationResult
from .services import (
    AccountService, AuthService, B2BService, B2CService, BillingService,
    C2BService, RatibaService, TransportService
)
from .utils.http_client import HTTPClient
from .utils.security import security_credential

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]


class MpesaClient:
    """
    Client for the M-Pesa Daraja API.

    Each instance owns its token cache and security credential, so one client
    per shortcode is safe in multi-tenant hosts.

    Usage::

        client = MpesaClient()  # reads Django settings
        result = client.stk_push('INV-001', '0712345678', 100)
        if result.ok:
            checkout_id = result.json()['CheckoutRequestID']
    """

    def __init__(self, config: Optional[ClientConfig] = None, session: Optional[requests.Session] = None):
        """
        Args:
            config: Client settings; loaded from Django settings when omitted
            session: Optional requests session to send calls through

        Raises:
            ConfigurationError: If settings are missing
            CryptoError: If the certificate or initiator password is unusable
        """
        self.config = config or ClientConfig.from_settings()

        # fail at construction, not on the first privileged call
        self.security_credential = security_credential(
            self.config.initiator_password, self.config.certificate
        )

        self.http_client = HTTPClient(self.config.base_url, timeout=self.config.timeout, session=session)
        self.auth_service = AuthService(self.config, http_client=self.http_client)
        self.transport = TransportService(self.http_client, self.auth_service, debug=self.config.debug)

        self.account = AccountService(self.config, self.security_credential)
        self.c2b = C2BService(self.config, self.security_credential)
        self.b2c = B2CService(self.config, self.security_credential)
        self.b2b = B2BService(self.config, self.security_credential)
        self.billing = BillingService(self.config, self.security_credential)
        self.ratiba = RatibaService(self.config, self.security_credential)

        logger.info(
            f"Daraja client ready for shortcode {self.config.shortcode} "
            f"({self.config.environment.value})"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the underlying HTTP session."""
        self.http_client.close()

    def dispatch(self, request: OperationRequest, timeout: Optional[float] = None) -> OperationResult:
        """Send an already built request."""
        return self.transport.dispatch(request, timeout=timeout)

    # Account

    def get_balance(self, remarks: str = 'balance', timeout: Optional[float] = None) -> OperationResult:
        """Query the shortcode's account balance (result delivered to the balance result URL)."""
        return self.dispatch(self.account.build_balance(remarks), timeout=timeout)

    def get_transaction_status(
        self,
        transaction_id: str,
        identifier_type: str,
        remarks: str,
        original_conversation_id: Optional[str] = None,
        occasion: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Query the status of a transaction by its M-Pesa receipt."""
        request = self.account.build_transaction_status(
            transaction_id, identifier_type, remarks, original_conversation_id, occasion
        )
        return self.dispatch(request, timeout=timeout)

    def pull_register(self, nominated_number: str, timeout: Optional[float] = None) -> OperationResult:
        """Register the shortcode for transaction history pulls."""
        return self.dispatch(self.account.build_pull_register(nominated_number), timeout=timeout)

    def pull_transactions(
        self,
        start_date: Union[datetime, str],
        end_date: Union[datetime, str],
        offset: int = 0,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Fetch transaction history for a time window."""
        request = self.account.build_pull_transactions(start_date, end_date, offset)
        return self.dispatch(request, timeout=timeout)

    # C2B

    def c2b_register_url(
        self,
        response_type: Union[str, C2BResponseType] = C2BResponseType.COMPLETED,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Register the configured validation and confirmation URLs."""
        return self.dispatch(self.c2b.build_register_urls(response_type), timeout=timeout)

    def c2b_simulate(
        self,
        amount: Amount,
        phone_number: str,
        bill_ref_number: str,
        command_id: Union[str, C2BCommand] = C2BCommand.PAYBILL,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Simulate a customer payment (sandbox)."""
        request = self.c2b.build_simulate(amount, phone_number, bill_ref_number, command_id)
        return self.dispatch(request, timeout=timeout)

    def stk_push(
        self,
        account_number: str,
        phone_number: str,
        amount: Amount,
        transaction_desc: Optional[str] = None,
        transaction_type: Union[str, C2BCommand] = C2BCommand.PAYBILL,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Prompt the customer's phone to authorize a payment."""
        request = self.c2b.build_stk_push(
            account_number, phone_number, amount, transaction_desc, transaction_type
        )
        return self.dispatch(request, timeout=timeout)

    def stk_push_status(self, checkout_request_id: str, timeout: Optional[float] = None) -> OperationResult:
        """Query the outcome of an STK push."""
        return self.dispatch(self.c2b.build_stk_push_status(checkout_request_id), timeout=timeout)

    def reverse(
        self,
        transaction_id: str,
        amount: Amount,
        receiver_shortcode: Optional[str] = None,
        remarks: Optional[str] = None,
        occasion: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Reverse a C2B transaction."""
        request = self.c2b.build_reversal(transaction_id, amount, receiver_shortcode, remarks, occasion)
        return self.dispatch(request, timeout=timeout)

    # B2C

    def b2c_transaction(
        self,
        conversation_id: Optional[str],
        command_id: Union[str, B2CCommand],
        phone_number: str,
        amount: Amount,
        remarks: str,
        occasion: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Send money from the business to a customer."""
        request = self.b2c.build_payment(conversation_id, command_id, phone_number, amount, remarks, occasion)
        return self.dispatch(request, timeout=timeout)

    def validated_b2c_transaction(
        self,
        command_id: Union[str, B2CCommand],
        phone_number: str,
        amount: Amount,
        remarks: str,
        id_number: str,
        occasion: Optional[str] = None,
        id_type: str = NATIONAL_ID_TYPE,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Send money to a customer after the gateway checks their ID number."""
        request = self.b2c.build_validated_payment(
            command_id, phone_number, amount, remarks, id_number, occasion, id_type
        )
        return self.dispatch(request, timeout=timeout)

    def b2c_topup(
        self,
        amount: Amount,
        receiver_shortcode: str,
        account_reference: str,
        requester: Optional[str] = None,
        remarks: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Load funds into a B2C shortcode."""
        request = self.b2c.build_account_topup(amount, receiver_shortcode, account_reference, requester, remarks)
        return self.dispatch(request, timeout=timeout)

    # B2B

    def b2b_paybill(
        self,
        dest_shortcode: str,
        amount: Amount,
        remarks: str,
        account_number: str,
        requester: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Pay a paybill number from the business account."""
        request = self.b2b.build_paybill(dest_shortcode, amount, remarks, account_number, requester)
        return self.dispatch(request, timeout=timeout)

    def b2b_buy_goods(
        self,
        dest_shortcode: str,
        amount: Amount,
        remarks: str,
        account_number: str,
        requester: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Pay a till number from the business account."""
        request = self.b2b.build_buy_goods(dest_shortcode, amount, remarks, account_number, requester)
        return self.dispatch(request, timeout=timeout)

    def b2b_express_checkout(
        self,
        primary_shortcode: str,
        amount: Amount,
        payment_ref: str,
        partner_name: str,
        request_ref_id: Optional[str] = None,
        receiver_shortcode: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Send a USSD payment prompt to another merchant's till."""
        request = self.b2b.build_express_checkout(
            primary_shortcode, amount, payment_ref, partner_name, request_ref_id, receiver_shortcode
        )
        return self.dispatch(request, timeout=timeout)

    def tax_remittance(
        self,
        amount: Amount,
        receiver_shortcode: str,
        account_reference: str,
        remarks: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Remit tax to the revenue authority."""
        request = self.b2b.build_tax_remittance(amount, receiver_shortcode, account_reference, remarks)
        return self.dispatch(request, timeout=timeout)

    # Billing

    def dynamic_qr(
        self,
        merchant_name: str,
        ref_no: str,
        amount: Amount,
        trx_code: Union[str, QRTransactionCode],
        cpi: str,
        size: Union[int, str] = 300,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Generate a payment QR code."""
        request = self.billing.build_dynamic_qr(merchant_name, ref_no, amount, trx_code, cpi, size)
        return self.dispatch(request, timeout=timeout)

    def bill_manager_optin(
        self,
        email: str,
        phone_number: str,
        send_reminders: bool = True,
        logo: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Opt the shortcode in to Bill Manager."""
        request = self.billing.build_optin(email, phone_number, send_reminders, logo)
        return self.dispatch(request, timeout=timeout)

    def send_invoice(
        self,
        reference: str,
        billed_to: str,
        phone_number: str,
        billing_period: str,
        invoice_name: str,
        due_date: Union[date, str],
        amount: Amount,
        items: Optional[Iterable[Dict[str, Any]]] = None,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Send a single Bill Manager invoice."""
        request = self.billing.build_invoice(
            reference, billed_to, phone_number, billing_period, invoice_name, due_date, amount, items
        )
        return self.dispatch(request, timeout=timeout)

    # Ratiba

    def standing_order(
        self,
        name: str,
        start_date: Union[date, str],
        end_date: Union[date, str],
        transaction_type: str,
        amount: Amount,
        phone_number: str,
        account_reference: str,
        description: Optional[str],
        frequency: str,
        timeout: Optional[float] = None
    ) -> OperationResult:
        """Create a recurring standing order."""
        request = self.ratiba.build_standing_order(
            name, start_date, end_date, transaction_type, amount,
            phone_number, account_reference, description, frequency
        )
        return self.dispatch(request, timeout=timeout)
