import pytest
from django.test import override_settings

from conftest import CALLBACKS, CERTIFICATE
from daraja.config import CallbackURLs, ClientConfig
from daraja.constants import Environment
from daraja.exceptions import ConfigurationError, CryptoError


class TestFromSettings:

    def test_reads_django_settings(self):
        config = ClientConfig.from_settings()

        assert config.environment is Environment.SANDBOX
        assert config.base_url == "https://sandbox.safaricom.co.ke"
        assert config.shortcode == "174379"
        assert config.initiator_name == "testapi"
        assert config.certificate == CERTIFICATE
        assert config.callbacks.stk_callback_url == CALLBACKS.stk_callback_url
        assert config.callbacks.b2c_result_url == ''
        assert config.timeout == 30

    def test_overrides_win(self):
        config = ClientConfig.from_settings(shortcode="600999", callbacks=CALLBACKS, timeout=5)

        assert config.shortcode == "600999"
        assert config.callbacks is CALLBACKS
        assert config.timeout == 5

    @override_settings(MPESA_SHORTCODE=174379)
    def test_shortcode_is_text(self):
        assert ClientConfig.from_settings().shortcode == "174379"

    @override_settings(MPESA_CONSUMER_KEY="")
    def test_missing_required_setting(self):
        with pytest.raises(ConfigurationError, match="MPESA_CONSUMER_KEY"):
            ClientConfig.from_settings()

    @override_settings(MPESA_ENV="staging")
    def test_invalid_environment(self):
        with pytest.raises(ConfigurationError, match="MPESA_ENV"):
            ClientConfig.from_settings()

    @override_settings(MPESA_ENV="production")
    def test_missing_certificate_for_environment(self):
        with pytest.raises(ConfigurationError, match="production"):
            ClientConfig.from_settings()

    @override_settings(MPESA_ENV="PRODUCTION")
    def test_certificate_override_skips_file(self):
        config = ClientConfig.from_settings(certificate=CERTIFICATE)

        assert config.environment is Environment.PRODUCTION
        assert config.base_url == "https://api.safaricom.co.ke"

    @override_settings(MPESA_CERTIFICATE_PATHS={"sandbox": "/nonexistent/sandbox.cer"})
    def test_unreadable_certificate(self):
        with pytest.raises(CryptoError):
            ClientConfig.from_settings()

    @override_settings(MPESA_DEBUG=True)
    def test_debug_flag(self):
        assert ClientConfig.from_settings().debug is True

    @override_settings(MPESA_B2C_RESULT_URL="https://merchant.example.com/b2c/result")
    def test_callback_settings(self):
        assert ClientConfig.from_settings().callbacks.b2c_result_url == "https://merchant.example.com/b2c/result"


class TestClientConfig:

    def test_repr_hides_secrets(self, client_config):
        text = repr(client_config)
        assert "test_passkey" not in text
        assert "BEGIN CERTIFICATE" not in text

    def test_is_immutable(self, client_config):
        with pytest.raises(AttributeError):
            client_config.shortcode = "600999"

    def test_get_full_url(self, client_config):
        assert client_config.get_full_url("/mpesa/b2c/v1/paymentrequest") == \
            "https://sandbox.safaricom.co.ke/mpesa/b2c/v1/paymentrequest"

    def test_default_callbacks_are_empty(self):
        assert CallbackURLs().stk_callback_url == ''
