"""
Pytest Configuration and Fixtures
"""
import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import django
import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from django.conf import settings

from daraja.config import CallbackURLs, ClientConfig


def _make_certificate():
    """Throwaway RSA-2048 key and self-signed certificate."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "apicrypt.test")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return key, cert.public_bytes(serialization.Encoding.PEM)


PRIVATE_KEY, CERTIFICATE = _make_certificate()

CALLBACK_BASE = "https://merchant.example.com/payments"

CALLBACKS = CallbackURLs(
    stk_callback_url=f"{CALLBACK_BASE}/stk/callback",
    stk_validation_url=f"{CALLBACK_BASE}/c2b/validation",
    stk_confirmation_url=f"{CALLBACK_BASE}/c2b/confirmation",
    reversal_result_url=f"{CALLBACK_BASE}/reversal/result",
    reversal_timeout_url=f"{CALLBACK_BASE}/reversal/timeout",
    balance_result_url=f"{CALLBACK_BASE}/balance/result",
    balance_timeout_url=f"{CALLBACK_BASE}/balance/timeout",
    transaction_status_result_url=f"{CALLBACK_BASE}/status/result",
    transaction_status_timeout_url=f"{CALLBACK_BASE}/status/timeout",
    b2c_result_url=f"{CALLBACK_BASE}/b2c/result",
    b2c_timeout_url=f"{CALLBACK_BASE}/b2c/timeout",
    b2b_result_url=f"{CALLBACK_BASE}/b2b/result",
    b2b_timeout_url=f"{CALLBACK_BASE}/b2b/timeout",
    b2b_stk_callback_url=f"{CALLBACK_BASE}/b2b/checkout",
    bill_optin_callback_url=f"{CALLBACK_BASE}/bills/optin",
    tax_remittance_result_url=f"{CALLBACK_BASE}/tax/result",
    tax_remittance_timeout_url=f"{CALLBACK_BASE}/tax/timeout",
    ratiba_callback_url=f"{CALLBACK_BASE}/ratiba/callback",
    pull_callback_url=f"{CALLBACK_BASE}/pull/callback",
)


def pytest_configure(config):
    """Minimal Django settings for the library's app and commands."""
    if settings.configured:
        return

    fd, cert_path = tempfile.mkstemp(suffix=".cer")
    with os.fdopen(fd, "wb") as fh:
        fh.write(CERTIFICATE)

    settings.configure(
        DEBUG=False,
        INSTALLED_APPS=["daraja"],
        MPESA_ENV="sandbox",
        MPESA_SHORTCODE="174379",
        MPESA_CONSUMER_KEY="test_consumer_key",
        MPESA_CONSUMER_SECRET="test_consumer_secret",
        MPESA_INITIATOR_NAME="testapi",
        MPESA_INITIATOR_PASSWORD="Safcom496!",
        MPESA_PASSKEY="test_passkey",
        MPESA_CERTIFICATE_PATHS={"sandbox": cert_path},
        MPESA_STK_CALLBACK_URL=CALLBACKS.stk_callback_url,
        MPESA_STK_VALIDATION_URL=CALLBACKS.stk_validation_url,
        MPESA_STK_CONFIRMATION_URL=CALLBACKS.stk_confirmation_url,
    )
    django.setup()


def mock_http_response(json_data=None, status_code=200, text=None) -> Mock:
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text if text is not None else json.dumps(json_data)
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON")
    else:
        resp.json.return_value = json_data
    return resp


def token_response(expires_in="3599") -> Mock:
    """Valid Daraja OAuth token response."""
    return mock_http_response({"access_token": "daraja_tok_abc", "expires_in": expires_in})


@pytest.fixture
def private_key():
    return PRIVATE_KEY


@pytest.fixture
def certificate():
    return CERTIFICATE


@pytest.fixture
def client_config():
    return ClientConfig(
        shortcode="174379",
        consumer_key="test_consumer_key",
        consumer_secret="test_consumer_secret",
        initiator_name="testapi",
        initiator_password="Safcom496!",
        certificate=CERTIFICATE,
        passkey="test_passkey",
        callbacks=CALLBACKS,
    )


@pytest.fixture
def mock_session():
    """Stand-in for requests.Session; queue responses on .request."""
    return Mock(spec=requests.Session)
