import base64
import uuid
from datetime import date, datetime
from unittest.mock import patch

import pytest

from daraja.config import CallbackURLs
from daraja.constants import APIEndpoints, B2CCommand, C2BCommand
from daraja.exceptions import ConfigurationError, ValidationError
from daraja.services import (
    AccountService, B2BService, B2CService, BillingService, C2BService, RatibaService
)

CREDENTIAL = "c2VjdXJpdHktY3JlZGVudGlhbA=="


@pytest.fixture
def account(client_config):
    return AccountService(client_config, CREDENTIAL)


@pytest.fixture
def c2b(client_config):
    return C2BService(client_config, CREDENTIAL)


@pytest.fixture
def b2c(client_config):
    return B2CService(client_config, CREDENTIAL)


@pytest.fixture
def b2b(client_config):
    return B2BService(client_config, CREDENTIAL)


@pytest.fixture
def billing(client_config):
    return BillingService(client_config, CREDENTIAL)


@pytest.fixture
def ratiba(client_config):
    return RatibaService(client_config, CREDENTIAL)


class TestAccountBuilders:

    def test_balance(self, account, client_config):
        request = account.build_balance()

        assert request.endpoint_path == APIEndpoints.ACCOUNT_BALANCE
        assert request.payload == {
            'Initiator': 'testapi',
            'SecurityCredential': CREDENTIAL,
            'CommandID': 'AccountBalance',
            'PartyA': '174379',
            'IdentifierType': 4,
            'Remarks': 'balance',
            'QueueTimeOutURL': client_config.callbacks.balance_timeout_url,
            'ResultURL': client_config.callbacks.balance_result_url,
        }

    def test_balance_needs_credential(self, client_config):
        with pytest.raises(ConfigurationError):
            AccountService(client_config).build_balance()

    def test_transaction_status(self, account):
        request = account.build_transaction_status("OEI2AK4Q16", "msisdn", "checking")

        assert request.endpoint_path == "/mpesa/transactionstatus/v1/query"
        assert request.payload['CommandID'] == 'TransactionStatusQuery'
        assert request.payload['TransactionID'] == 'OEI2AK4Q16'
        assert request.payload['IdentifierType'] == 1
        assert request.payload['OriginalConversationID'] is None

    def test_transaction_status_unknown_identifier(self, account):
        with pytest.raises(ValidationError) as exc:
            account.build_transaction_status("OEI2AK4Q16", "bank", "checking")
        assert exc.value.field == "identifier_type"

    def test_pull_register(self, account, client_config):
        request = account.build_pull_register("0722000000")

        assert request.endpoint_path == "/pulltransactions/v1/register"
        assert request.payload == {
            'ShortCode': '174379',
            'RequestType': 'Pull',
            'NominatedNumber': '254722000000',
            'CallBackURL': client_config.callbacks.pull_callback_url,
        }

    def test_pull_transactions(self, account):
        request = account.build_pull_transactions(
            datetime(2024, 1, 1, 8, 0), "2024-01-01 17:30:00", offset=2
        )

        assert request.endpoint_path == "/pulltransactions/v1/query"
        assert request.payload['StartDate'] == "2024-01-01 08:00:00"
        assert request.payload['EndDate'] == "2024-01-01 17:30:00"
        assert request.payload['OffSetValue'] == "2"

    def test_pull_transactions_bad_offset(self, account):
        with pytest.raises(ValidationError, match="OffSetValue"):
            account.build_pull_transactions("2024-01-01", "2024-01-02", offset="first")


class TestC2BBuilders:

    def test_register_urls(self, c2b, client_config):
        request = c2b.build_register_urls()

        assert request.endpoint_path == "/mpesa/c2b/v2/registerurl"
        assert request.payload == {
            'ShortCode': '174379',
            'ResponseType': 'Completed',
            'ConfirmationURL': client_config.callbacks.stk_confirmation_url,
            'ValidationURL': client_config.callbacks.stk_validation_url,
        }

    def test_register_urls_rejects_unknown_response_type(self, c2b):
        with pytest.raises(ValidationError, match="ResponseType"):
            c2b.build_register_urls("Maybe")

    def test_simulate(self, c2b):
        request = c2b.build_simulate(100.99, "0712345678", "INV-1", C2BCommand.BUY_GOODS)

        assert request.endpoint_path == "/mpesa/c2b/v1/simulate"
        assert request.payload == {
            'ShortCode': '174379',
            'CommandID': 'CustomerBuyGoodsOnline',
            'Amount': 100,
            'Msisdn': '254712345678',
            'BillRefNumber': 'INV-1',
        }

    def test_stk_push_payload(self, c2b, client_config):
        with patch('daraja.services.c2b_service.generate_timestamp', return_value='20240101120000'):
            request = c2b.build_stk_push("ACC-1", "0712345678", 100.99)

        payload = request.payload
        assert request.endpoint_path == "/mpesa/stkpush/v1/processrequest"
        assert payload['Amount'] == 100
        assert payload['PartyA'] == payload['PhoneNumber'] == '254712345678'
        assert payload['PartyB'] == payload['BusinessShortCode'] == '174379'
        assert payload['Timestamp'] == '20240101120000'
        assert base64.b64decode(payload['Password']).decode() == '174379test_passkey20240101120000'
        assert payload['TransactionType'] == 'CustomerPayBillOnline'
        assert payload['TransactionDesc'] == 'STK Push'
        assert payload['CallBackURL'] == client_config.callbacks.stk_callback_url

    def test_stk_push_truncates_text(self, c2b):
        request = c2b.build_stk_push(
            "ACCOUNT-REFERENCE-LONG", "0712345678", 10, "A very long description"
        )

        assert request.payload['AccountReference'] == "ACCOUNT-REFE"
        assert request.payload['TransactionDesc'] == "A very long d"

    def test_stk_push_password_and_timestamp_agree(self, c2b):
        request = c2b.build_stk_push("ACC-1", "0712345678", 10)

        decoded = base64.b64decode(request.payload['Password']).decode()
        assert decoded.endswith(request.payload['Timestamp'])

    def test_stk_push_requires_passkey(self, client_config):
        service = C2BService(client_config.with_overrides(passkey=''), CREDENTIAL)
        with pytest.raises(ConfigurationError, match="MPESA_PASSKEY"):
            service.build_stk_push("ACC-1", "0712345678", 10)

    def test_stk_push_rejects_bad_callback(self, client_config):
        callbacks = CallbackURLs(stk_callback_url="https://mpesa-hooks.example.com/cb")
        service = C2BService(client_config.with_overrides(callbacks=callbacks), CREDENTIAL)

        with pytest.raises(ValidationError) as exc:
            service.build_stk_push("ACC-1", "0712345678", 10)
        assert exc.value.field == "CallBackURL"

    def test_stk_push_rejects_bad_phone(self, c2b):
        with pytest.raises(ValidationError):
            c2b.build_stk_push("ACC-1", "07-12", 10)

    def test_stk_push_status(self, c2b):
        request = c2b.build_stk_push_status("ws_CO_0101202412000000")

        assert request.endpoint_path == "/mpesa/stkpushquery/v1/query"
        assert request.payload['CheckoutRequestID'] == "ws_CO_0101202412000000"
        assert set(request.payload) == {'BusinessShortCode', 'Password', 'Timestamp', 'CheckoutRequestID'}

    def test_reversal(self, c2b, client_config):
        request = c2b.build_reversal("OEI2AK4Q16", 50.5)

        assert request.endpoint_path == "/mpesa/reversal/v1/request"
        assert request.payload['CommandID'] == 'TransactionReversal'
        assert request.payload['Amount'] == 50
        assert request.payload['ReceiverParty'] == '174379'
        assert request.payload['RecieverIdentifierType'] == 4
        assert request.payload['Remarks'] == 'Reversal'
        assert request.payload['ResultURL'] == client_config.callbacks.reversal_result_url


class TestB2CBuilders:

    def test_payment(self, b2c, client_config):
        request = b2c.build_payment("conv-1", B2CCommand.SALARY_PAYMENT, "0712345678", 1500.75, "June salary")

        assert request.endpoint_path == "/mpesa/b2c/v1/paymentrequest"
        assert request.payload == {
            'OriginatorConversationID': 'conv-1',
            'InitiatorName': 'testapi',
            'SecurityCredential': CREDENTIAL,
            'CommandID': 'SalaryPayment',
            'Amount': 1500,
            'PartyA': '174379',
            'PartyB': '254712345678',
            'Remarks': 'June salary',
            'Occassion': '',
            'QueueTimeOutURL': client_config.callbacks.b2c_timeout_url,
            'ResultURL': client_config.callbacks.b2c_result_url,
        }

    def test_payment_generates_conversation_id(self, b2c):
        request = b2c.build_payment(None, "BusinessPayment", "0712345678", 10, "refund")
        uuid.UUID(request.payload['OriginatorConversationID'])

    def test_payment_rejects_unknown_command(self, b2c):
        with pytest.raises(ValidationError, match="CommandID"):
            b2c.build_payment(None, "Payroll", "0712345678", 10, "refund")

    def test_remarks_truncated(self, b2c):
        request = b2c.build_payment(None, "BusinessPayment", "0712345678", 10, "r" * 150)
        assert len(request.payload['Remarks']) == 100

    def test_validated_payment(self, b2c):
        request = b2c.build_validated_payment(
            "PromotionPayment", "0712345678", 20, "prize", "12345678"
        )

        assert request.endpoint_path == "/mpesa/b2c/v1/paymentrequest"
        assert request.payload['IDType'] == '01'
        assert request.payload['IDNumber'] == '12345678'
        assert len(request.payload['OriginatorConversationID']) == 14
        assert 'Occasion' in request.payload

    def test_account_topup(self, b2c, client_config):
        request = b2c.build_account_topup(5000, "600000", "TOPUP-JUNE", requester="0712345678")

        assert request.endpoint_path == "/mpesa/b2b/v1/paymentrequest"
        assert request.payload['CommandID'] == 'BusinessPayToBulk'
        assert request.payload['PartyB'] == '600000'
        assert request.payload['Requester'] == '254712345678'
        assert request.payload['ResultURL'] == client_config.callbacks.b2c_result_url


class TestB2BBuilders:

    def test_paybill(self, b2b, client_config):
        request = b2b.build_paybill("600000", 999.9, "supplier", "ACC-2024-00001-X")

        assert request.endpoint_path == "/mpesa/b2b/v1/paymentrequest"
        assert request.payload['CommandID'] == 'BusinessPayBill'
        assert request.payload['Amount'] == 999
        assert request.payload['AccountReference'] == 'ACC-2024-0000'
        assert request.payload['SenderIdentifierType'] == 4
        assert request.payload['RecieverIdentifierType'] == 4
        assert request.payload['Requester'] is None
        assert request.payload['ResultURL'] == client_config.callbacks.b2b_result_url

    def test_buy_goods(self, b2b):
        request = b2b.build_buy_goods("000001", 10, "stock", "ACC1")
        assert request.payload['CommandID'] == 'BusinessBuyGoods'

    def test_express_checkout(self, b2b, client_config):
        request = b2b.build_express_checkout("000001", 250.4, "INV-9", "Vendor Ltd", "ref-1")

        assert request.endpoint_path == "/v1/ussdpush/get-msisdn"
        assert request.payload == {
            'primaryShortCode': '000001',
            'receiverShortCode': '174379',
            'amount': '250',
            'paymentRef': 'INV-9',
            'callbackUrl': client_config.callbacks.b2b_stk_callback_url,
            'partnerName': 'Vendor Ltd',
            'RequestRefID': 'ref-1',
        }

    def test_express_checkout_without_callback(self, client_config):
        service = B2BService(client_config.with_overrides(callbacks=CallbackURLs()), CREDENTIAL)
        with pytest.raises(ValidationError) as exc:
            service.build_express_checkout("000001", 10, "INV-9", "Vendor Ltd")
        assert exc.value.field == "callbackUrl"

    def test_tax_remittance(self, b2b, client_config):
        request = b2b.build_tax_remittance(1200, "572572", "PRN1234XN")

        assert request.endpoint_path == "/mpesa/b2b/v1/remittax"
        assert request.payload['CommandID'] == 'BusinessPayment'
        assert request.payload['AccountReference'] == 'PRN1234XN'
        assert request.payload['QueueTimeOutURL'] == client_config.callbacks.tax_remittance_timeout_url


class TestBillingBuilders:

    def test_dynamic_qr(self, billing):
        request = billing.build_dynamic_qr("Shop", "INV-1", 100.5, "BG", "373132")

        assert request.endpoint_path == "/mpesa/qrcode/v1/generate"
        assert request.payload == {
            'MerchantName': 'Shop',
            'RefNo': 'INV-1',
            'Amount': 100,
            'TrxCode': 'BG',
            'CPI': '373132',
            'Size': '300',
        }

    @pytest.mark.parametrize("size", [0, -5, "big"])
    def test_dynamic_qr_bad_size(self, billing, size):
        with pytest.raises(ValidationError, match="Size"):
            billing.build_dynamic_qr("Shop", "INV-1", 100, "BG", "373132", size)

    def test_dynamic_qr_bad_code(self, billing):
        with pytest.raises(ValidationError, match="TrxCode"):
            billing.build_dynamic_qr("Shop", "INV-1", 100, "XX", "373132")

    def test_optin(self, billing, client_config):
        request = billing.build_optin("billing@example.com", "0712345678", send_reminders=False)

        assert request.endpoint_path == "/v1/billmanager-invoice/optin"
        assert request.payload['sendReminders'] == '0'
        assert request.payload['officialContact'] == '254712345678'
        assert request.payload['callbackurl'] == client_config.callbacks.bill_optin_callback_url

    def test_invoice(self, billing):
        request = billing.build_invoice(
            "INV12345", "Jane Doe", "0712345678", "Jan 2024", "water bill",
            date(2024, 2, 1), 1500.9,
            items=[{'itemName': 'water', 'amount': 1000.5}, {'itemName': 'sewer'}],
        )

        assert request.endpoint_path == "/v1/billmanager-invoice/single-invoicing"
        assert request.payload['dueDate'] == "2024-02-01"
        assert request.payload['amount'] == 1500
        assert request.payload['invoiceItems'] == [
            {'itemName': 'water', 'amount': 1000},
            {'itemName': 'sewer'},
        ]

    def test_invoice_item_without_name(self, billing):
        with pytest.raises(ValidationError, match="itemName"):
            billing.build_invoice(
                "INV1", "Jane", "0712345678", "Jan", "bill", "2024-02-01", 10,
                items=[{'amount': 10}],
            )


class TestRatibaBuilder:

    def test_standing_order(self, ratiba, client_config):
        request = ratiba.build_standing_order(
            "Gym membership", date(2024, 1, 1), "2024-12-31", "paybill",
            2500.99, "0712345678", "MEMBER-00001-A", None, "monthly"
        )

        assert request.endpoint_path == "/standingorder/v1/createStandingOrderExternal"
        assert request.payload == {
            'StandingOrderName': 'Gym membership',
            'StartDate': '20240101',
            'EndDate': '20241231',
            'BusinessShortCode': '174379',
            'TransactionType': 'Standing Order Customer Pay Bill',
            'ReceiverPartyIdentifierType': '4',
            'Amount': '2500',
            'PartyA': '254712345678',
            'CallBackURL': client_config.callbacks.ratiba_callback_url,
            'AccountReference': 'MEMBER-00001-',
            'TransactionDesc': 'Gym membershi',
            'Frequency': '4',
        }

    def test_till_standing_order(self, ratiba):
        request = ratiba.build_standing_order(
            "Coffee", "2024-01-01", "2024-01-31", "tillnumber",
            100, "0712345678", "ACC", "Daily coffee", "daily"
        )

        assert request.payload['TransactionType'] == 'Standing Order Customer Pay Merchant'
        assert request.payload['ReceiverPartyIdentifierType'] == '2'
        assert request.payload['Frequency'] == '2'

    def test_end_before_start(self, ratiba):
        with pytest.raises(ValidationError, match="EndDate"):
            ratiba.build_standing_order(
                "Gym", "2024-12-31", "2024-01-01", "paybill",
                100, "0712345678", "ACC", None, "monthly"
            )

    def test_unknown_frequency(self, ratiba):
        with pytest.raises(ValidationError, match="frequency"):
            ratiba.build_standing_order(
                "Gym", "2024-01-01", "2024-12-31", "paybill",
                100, "0712345678", "ACC", None, "fortnightly"
            )
