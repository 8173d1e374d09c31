"""
Configuration management for the Daraja client.

A ``ClientConfig`` is an immutable value built once per client. Hosts either
construct it directly (multi-tenant setups, one per shortcode) or load it from
Django settings with ``ClientConfig.from_settings()``.
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .constants import BASE_URLS, DEFAULT_TIMEOUT, Environment
from .exceptions import ConfigurationError
from .utils.security import load_certificate


# Django setting name for each CallbackURLs field
CALLBACK_SETTINGS = {
    'stk_callback_url': 'MPESA_STK_CALLBACK_URL',
    'stk_validation_url': 'MPESA_STK_VALIDATION_URL',
    'stk_confirmation_url': 'MPESA_STK_CONFIRMATION_URL',
    'reversal_result_url': 'MPESA_REVERSAL_RESULT_URL',
    'reversal_timeout_url': 'MPESA_REVERSAL_TIMEOUT_URL',
    'balance_result_url': 'MPESA_BALANCE_RESULT_URL',
    'balance_timeout_url': 'MPESA_BALANCE_TIMEOUT_URL',
    'transaction_status_result_url': 'MPESA_TRANSACTION_STATUS_RESULT_URL',
    'transaction_status_timeout_url': 'MPESA_TRANSACTION_STATUS_TIMEOUT_URL',
    'b2c_result_url': 'MPESA_B2C_RESULT_URL',
    'b2c_timeout_url': 'MPESA_B2C_TIMEOUT_URL',
    'b2b_result_url': 'MPESA_B2B_RESULT_URL',
    'b2b_timeout_url': 'MPESA_B2B_TIMEOUT_URL',
    'b2b_stk_callback_url': 'MPESA_B2B_STK_CALLBACK_URL',
    'bill_optin_callback_url': 'MPESA_BILL_OPTIN_CALLBACK_URL',
    'tax_remittance_result_url': 'MPESA_TAX_REMITTANCE_RESULT_URL',
    'tax_remittance_timeout_url': 'MPESA_TAX_REMITTANCE_TIMEOUT_URL',
    'ratiba_callback_url': 'MPESA_RATIBA_CALLBACK_URL',
    'pull_callback_url': 'MPESA_PULL_CALLBACK_URL',
}


@dataclass(frozen=True)
class CallbackURLs:
    """One result/timeout (or callback) URL per operation family."""
    stk_callback_url: str = ''
    stk_validation_url: str = ''
    stk_confirmation_url: str = ''
    reversal_result_url: str = ''
    reversal_timeout_url: str = ''
    balance_result_url: str = ''
    balance_timeout_url: str = ''
    transaction_status_result_url: str = ''
    transaction_status_timeout_url: str = ''
    b2c_result_url: str = ''
    b2c_timeout_url: str = ''
    b2b_result_url: str = ''
    b2b_timeout_url: str = ''
    b2b_stk_callback_url: str = ''
    bill_optin_callback_url: str = ''
    tax_remittance_result_url: str = ''
    tax_remittance_timeout_url: str = ''
    ratiba_callback_url: str = ''
    pull_callback_url: str = ''


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable per-client settings.

    ``certificate`` holds the public-key certificate bytes for ``environment``;
    the security credential is derived from it and ``initiator_password``.
    """
    shortcode: str
    consumer_key: str
    consumer_secret: str = field(repr=False)
    initiator_name: str
    initiator_password: str = field(repr=False)
    certificate: bytes = field(repr=False)
    environment: Environment = Environment.SANDBOX
    passkey: str = field(default='', repr=False)
    debug: bool = False
    callbacks: CallbackURLs = field(default_factory=CallbackURLs)
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        try:
            environment = Environment(str(getattr(self.environment, 'value', self.environment)).lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid environment: {self.environment}. "
                f"Use one of: {', '.join(e.value for e in Environment)}"
            )
        object.__setattr__(self, 'environment', environment)
        object.__setattr__(self, 'shortcode', str(self.shortcode))

        for name in ('shortcode', 'consumer_key', 'consumer_secret'):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required to build a Daraja client.")

    @property
    def base_url(self) -> str:
        """Get Daraja API base URL for the configured environment."""
        return BASE_URLS[self.environment]

    @property
    def is_sandbox(self) -> bool:
        return self.environment is Environment.SANDBOX

    def get_full_url(self, endpoint):
        """
        Get full URL for an API endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full URL combining base URL and endpoint
        """
        base = self.base_url.rstrip('/')
        endpoint = endpoint.lstrip('/')
        return f"{base}/{endpoint}"

    def with_overrides(self, **changes) -> 'ClientConfig':
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> 'ClientConfig':
        """
        Build a config from Django settings.

        Args:
            settings: Settings object (defaults to ``django.conf.settings``)
            **overrides: Field values that take precedence over settings

        Raises:
            ConfigurationError: If a required setting is missing
        """
        if settings is None:
            from django.conf import settings

        def required(name, attr):
            if attr in overrides:
                return overrides.pop(attr)
            value = getattr(settings, name, '')
            if not value:
                raise ConfigurationError(
                    f"{name} is not configured in Django settings. "
                    "Please add it to your settings.py or .env file."
                )
            return value

        raw_env = overrides.pop('environment', None) or getattr(settings, 'MPESA_ENV', Environment.SANDBOX.value)
        try:
            environment = Environment(str(getattr(raw_env, 'value', raw_env)).lower())
        except ValueError:
            raise ConfigurationError(f"MPESA_ENV must be 'sandbox' or 'production', got '{raw_env}'.")

        certificate = overrides.pop('certificate', None)
        if certificate is None:
            paths: Mapping[str, str] = getattr(settings, 'MPESA_CERTIFICATE_PATHS', {}) or {}
            path: Optional[str] = paths.get(environment.value)
            if not path:
                raise ConfigurationError(
                    f"MPESA_CERTIFICATE_PATHS has no entry for '{environment.value}'."
                )
            certificate = load_certificate(path)

        callbacks = overrides.pop('callbacks', None) or CallbackURLs(**{
            attr: getattr(settings, setting_name, '') or ''
            for attr, setting_name in CALLBACK_SETTINGS.items()
        })

        values = {
            'environment': environment,
            'shortcode': required('MPESA_SHORTCODE', 'shortcode'),
            'consumer_key': required('MPESA_CONSUMER_KEY', 'consumer_key'),
            'consumer_secret': required('MPESA_CONSUMER_SECRET', 'consumer_secret'),
            'initiator_name': required('MPESA_INITIATOR_NAME', 'initiator_name'),
            'initiator_password': required('MPESA_INITIATOR_PASSWORD', 'initiator_password'),
            'passkey': getattr(settings, 'MPESA_PASSKEY', ''),
            'debug': bool(getattr(settings, 'MPESA_DEBUG', getattr(settings, 'DEBUG', False))),
            'timeout': getattr(settings, 'MPESA_TIMEOUT', DEFAULT_TIMEOUT),
            'certificate': certificate,
            'callbacks': callbacks,
        }
        values.update(overrides)
        return cls(**values)
