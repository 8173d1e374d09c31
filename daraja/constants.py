"""
Constants and enums for M-Pesa Daraja operations.
"""

from enum import Enum


class Environment(str, Enum):
    """Daraja deployment environments."""
    SANDBOX = "sandbox"
    PRODUCTION = "production"


BASE_URLS = {
    Environment.SANDBOX: "https://sandbox.safaricom.co.ke",
    Environment.PRODUCTION: "https://api.safaricom.co.ke",
}


class C2BCommand(str, Enum):
    """Command IDs accepted by the C2B simulate endpoint."""
    PAYBILL = "CustomerPayBillOnline"
    BUY_GOODS = "CustomerBuyGoodsOnline"


class B2CCommand(str, Enum):
    """B2C transaction types."""
    SALARY_PAYMENT = "SalaryPayment"
    BUSINESS_PAYMENT = "BusinessPayment"
    PROMOTION_PAYMENT = "PromotionPayment"


class C2BResponseType(str, Enum):
    """What the gateway does when the validation URL is unreachable."""
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class QRTransactionCode(str, Enum):
    """Transaction types encoded into a dynamic QR code."""
    BUY_GOODS = "BG"
    WITHDRAW_AGENT = "WA"
    PAYBILL = "PB"
    SEND_MONEY = "SM"
    SEND_TO_BUSINESS = "SB"


class CommandID:
    """Fixed command IDs used by the privileged endpoints."""
    ACCOUNT_BALANCE = "AccountBalance"
    TRANSACTION_REVERSAL = "TransactionReversal"
    TRANSACTION_STATUS = "TransactionStatusQuery"
    BUSINESS_PAY_BILL = "BusinessPayBill"
    BUSINESS_BUY_GOODS = "BusinessBuyGoods"
    BUSINESS_PAY_TO_BULK = "BusinessPayToBulk"
    BUSINESS_PAYMENT = "BusinessPayment"


# API Endpoints
class APIEndpoints:
    """Daraja API endpoints."""
    GENERATE_TOKEN = "/oauth/v1/generate"

    # Account endpoints
    ACCOUNT_BALANCE = "/mpesa/accountbalance/v1/query"
    TRANSACTION_STATUS = "/mpesa/transactionstatus/v1/query"
    PULL_REGISTER = "/pulltransactions/v1/register"
    PULL_TRANSACTIONS = "/pulltransactions/v1/query"

    # C2B endpoints
    C2B_REGISTER_URL = "/mpesa/c2b/v2/registerurl"
    C2B_SIMULATE = "/mpesa/c2b/v1/simulate"
    STK_PUSH = "/mpesa/stkpush/v1/processrequest"
    STK_PUSH_QUERY = "/mpesa/stkpushquery/v1/query"
    REVERSAL = "/mpesa/reversal/v1/request"

    # B2C / B2B endpoints
    B2C_PAYMENT = "/mpesa/b2c/v1/paymentrequest"
    B2B_PAYMENT = "/mpesa/b2b/v1/paymentrequest"
    B2B_EXPRESS_CHECKOUT = "/v1/ussdpush/get-msisdn"
    TAX_REMITTANCE = "/mpesa/b2b/v1/remittax"

    # Billing endpoints
    DYNAMIC_QR = "/mpesa/qrcode/v1/generate"
    BILL_MANAGER_OPTIN = "/v1/billmanager-invoice/optin"
    BILL_MANAGER_INVOICE = "/v1/billmanager-invoice/single-invoicing"

    # Ratiba (standing orders)
    STANDING_ORDER = "/standingorder/v1/createStandingOrderExternal"


IDENTIFIER_TYPES = {
    "msisdn": 1,
    "tillnumber": 2,
    "shortcode": 4,
    "paybill": 4,
}

RATIBA_FREQUENCIES = {
    "one-off": 1,
    "daily": 2,
    "weekly": 3,
    "monthly": 4,
    "bi-monthly": 5,
    "quarterly": 6,
    "half-year": 7,
    "yearly": 8,
}

RATIBA_TRANSACTION_TYPES = {
    "paybill": "Standing Order Customer Pay Bill",
    "tillnumber": "Standing Order Customer Pay Merchant",
}

# Substrings a callback URL may not contain
BLOCKED_URL_KEYWORDS = ("mpesa", "safaricom", "daraja")

# Payload fields that carry a callback URL
URL_FIELDS = (
    "CallBackURL",
    "ResultURL",
    "QueueTimeOutURL",
    "ConfirmationURL",
    "ValidationURL",
    "callbackurl",
    "callbackUrl",
)

# Payload fields never written to logs in clear
SENSITIVE_FIELDS = ("SecurityCredential", "Password")

# Token settings
DEFAULT_TOKEN_TTL_SECONDS = 3600

# Phone number settings
KENYA_COUNTRY_CODE = "254"
PHONE_SUBSCRIBER_DIGITS = 9

# Field length caps
TRANSACTION_DESC_MAX_LENGTH = 13
STK_ACCOUNT_REFERENCE_MAX_LENGTH = 12
ACCOUNT_REFERENCE_MAX_LENGTH = 13
REMARKS_MAX_LENGTH = 100
OCCASION_MAX_LENGTH = 100

# Default settings
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_STK_DESCRIPTION = "STK Push"
NATIONAL_ID_TYPE = "01"
