"""
HTTP client for Daraja API communication.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from daraja.constants import DEFAULT_TIMEOUT
from daraja.exceptions import APIError
from daraja.utils.formatters import sanitize_headers

logger = logging.getLogger(__name__)


class HTTPClient:
    """
    HTTP client wrapper for Daraja API requests.
    Makes a single attempt per call and hands back the raw response;
    classifying it is the caller's job.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for API requests
            timeout: Default request timeout in seconds
            session: Optional pre-built session (shared pools, tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_full_url(self, endpoint: str) -> str:
        """Get full URL for endpoint."""
        endpoint = endpoint.lstrip('/')
        return f"{self.base_url}/{endpoint}"

    def _log_request(self, method: str, url: str, headers: Dict):
        """Log API request details."""
        logger.info(f"Daraja API Request: {method} {url}")
        logger.debug(f"Headers: {sanitize_headers(headers)}")

    def _log_response(self, response: requests.Response):
        """Log API response details."""
        # bodies are traced by the caller; token responses must not reach the logs
        logger.info(f"Daraja API Response: {response.status_code}")

    def _send(self, method: str, url: str, timeout: Optional[float], **kwargs) -> requests.Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout if timeout is None else timeout,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Daraja API {method} {url} failed: {str(e)}")
            raise APIError(f"Request to {url} failed: {str(e)}")

        self._log_response(response)
        return response

    def post(
        self,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> requests.Response:
        """
        Make POST request to API.

        Args:
            endpoint: API endpoint path
            data: Request payload, sent as JSON
            headers: Request headers
            timeout: Per-call timeout, overrides the default

        Returns:
            Raw response

        Raises:
            APIError: If the request could not be delivered
        """
        url = self._get_full_url(endpoint)
        headers = dict(headers or {})
        headers.setdefault('Content-Type', 'application/json')
        headers.setdefault('Accept', 'application/json')

        self._log_request('POST', url, headers)
        return self._send('POST', url, timeout, json=data, headers=headers)

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[Tuple[str, str]] = None,
        timeout: Optional[float] = None
    ) -> requests.Response:
        """
        Make GET request to API.

        Args:
            endpoint: API endpoint path
            params: Query parameters
            headers: Request headers
            auth: Basic auth (username, password)
            timeout: Per-call timeout, overrides the default

        Returns:
            Raw response

        Raises:
            APIError: If the request could not be delivered
        """
        url = self._get_full_url(endpoint)
        headers = dict(headers or {})

        self._log_request('GET', url, headers)
        return self._send(
            'GET',
            url,
            timeout,
            params=params,
            headers=headers,
            auth=HTTPBasicAuth(*auth) if auth else None
        )

    def close(self):
        """Close the session."""
        self.session.close()
