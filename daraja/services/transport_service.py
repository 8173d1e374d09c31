"""
Transport service: sends built requests to the gateway and classifies the answer.
"""

import logging
from typing import Optional

from ..results import Failure, OperationRequest, OperationResult, Success
from ..utils.formatters import sanitize_payload
from ..utils.http_client import HTTPClient
from .auth_service import AuthService

logger = logging.getLogger(__name__)


class TransportService:
    """
    Dispatches OperationRequests with a bearer token.

    HTTP-level failures come back as ``Failure`` values carrying the gateway's
    body untouched. Only delivery problems (``APIError``) and token rejection
    (``AuthenticationError``) raise. Nothing is retried.
    """

    def __init__(self, http_client: HTTPClient, auth_service: AuthService, debug: bool = False):
        self.http_client = http_client
        self.auth_service = auth_service
        self.debug = debug

    def _trace(self, message: str):
        # payloads go out at INFO in debug mode
        logger.log(logging.INFO if self.debug else logging.DEBUG, message)

    def dispatch(self, request: OperationRequest, timeout: Optional[float] = None) -> OperationResult:
        """
        Send a request and classify the response.

        Args:
            request: Built request
            timeout: Per-call timeout, passed unchanged to the HTTP layer

        Returns:
            Success with the raw body for 2xx, Failure otherwise

        Raises:
            AuthenticationError: If no token could be obtained
            APIError: If the request could not be delivered
        """
        operation = request.operation or request.endpoint_path
        logger.info(f"Dispatching {operation} to {request.endpoint_path}")
        self._trace(f"{operation} request data: {sanitize_payload(request.payload)}")

        headers = self.auth_service.get_auth_header(timeout=timeout)
        response = self.http_client.post(
            endpoint=request.endpoint_path,
            data=request.payload,
            headers=headers,
            timeout=timeout
        )

        body = response.text or ''
        self._trace(f"{operation} response data: {body}")

        if 200 <= response.status_code < 300:
            logger.info(f"{operation} accepted with status {response.status_code}")
            return Success(raw_body=body, status_code=response.status_code)

        logger.warning(f"{operation} failed with status {response.status_code}: {body}")
        return Failure(status_code=response.status_code, diagnostic=body)
