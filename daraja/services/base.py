"""
Shared plumbing for the request builder services.
"""

import logging
from typing import Any, Dict

from ..config import ClientConfig
from ..constants import URL_FIELDS
from ..exceptions import ConfigurationError
from ..results import OperationRequest
from ..utils.validators import identifier_type_code, require_callback_url

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base class for services that turn caller arguments into an OperationRequest.

    Builders never touch the network; the security credential is computed by
    the client and handed in.
    """

    def __init__(self, config: ClientConfig, security_credential: str = ''):
        self.config = config
        self.security_credential = security_credential

    @property
    def callbacks(self):
        return self.config.callbacks

    @property
    def shortcode_type(self) -> int:
        return identifier_type_code('shortcode')

    def _initiator_fields(self, name_key: str = 'Initiator') -> Dict[str, Any]:
        if not self.security_credential:
            raise ConfigurationError("Security credential is not available for privileged operations")
        return {
            name_key: self.config.initiator_name,
            'SecurityCredential': self.security_credential,
        }

    def _require_passkey(self) -> str:
        if not self.config.passkey:
            raise ConfigurationError(
                "MPESA_PASSKEY is not configured. It is required for STK push operations."
            )
        return self.config.passkey

    def _build(self, operation: str, endpoint: str, payload: Dict[str, Any]) -> OperationRequest:
        """
        Wrap a payload into an OperationRequest.

        Every URL-typed field present in the payload is checked again here so
        no request can leave with a disallowed callback.
        """
        for key in URL_FIELDS:
            if key in payload and payload[key] is not None:
                require_callback_url(key, payload[key])

        logger.debug(f"Built {operation} request for {endpoint}")
        return OperationRequest(endpoint_path=endpoint, payload=payload, operation=operation)
