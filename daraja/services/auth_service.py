"""
Authentication service for the Daraja API.
Handles OAuth token generation and in-memory caching.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import ClientConfig
from ..constants import APIEndpoints, DEFAULT_TOKEN_TTL_SECONDS
from ..exceptions import AuthenticationError
from ..utils.http_client import HTTPClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessToken:
    """Bearer token with the moment it was obtained and its lifetime."""
    value: str
    obtained_at: float
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS

    def is_expired(self, now: float) -> bool:
        return now - self.obtained_at >= self.ttl_seconds


class AuthService:
    """
    Service for managing Daraja access tokens.

    The cached token is an immutable value swapped in by reference, so reads
    need no lock. Refreshes are serialized so concurrent callers that find the
    cache empty wait for one fetch instead of each hitting the token endpoint.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[HTTPClient] = None,
        clock: Callable[[], float] = time.time
    ):
        self.config = config
        self.http_client = http_client or HTTPClient(config.base_url, timeout=config.timeout)
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._refresh_lock = threading.Lock()

    @property
    def cached_token(self) -> Optional[AccessToken]:
        return self._token

    def _is_usable(self, token: Optional[AccessToken]) -> bool:
        return token is not None and not token.is_expired(self._clock())

    def fetch_token(self, timeout: Optional[float] = None) -> AccessToken:
        """
        Request a new access token from the Daraja API.

        Args:
            timeout: Per-call timeout, overrides the configured one

        Returns:
            Fresh AccessToken

        Raises:
            AuthenticationError: If token generation fails
            APIError: If the token endpoint could not be reached
        """
        logger.info("Generating new Daraja access token")

        response = self.http_client.get(
            endpoint=APIEndpoints.GENERATE_TOKEN,
            params={'grant_type': 'client_credentials'},
            auth=(self.config.consumer_key, self.config.consumer_secret),
            timeout=timeout
        )

        if not 200 <= response.status_code < 300:
            logger.error(f"Token request rejected with status {response.status_code}")
            raise AuthenticationError(
                f"Token generation failed with status {response.status_code}",
                error_code=response.status_code,
                response_data=response.text
            )

        try:
            data = response.json()
        except ValueError:
            raise AuthenticationError(
                "Token generation failed: response is not JSON",
                error_code=response.status_code,
                response_data=response.text
            )

        value = data.get('access_token') if isinstance(data, dict) else None
        if not value:
            raise AuthenticationError(
                "Token generation failed: No access_token in response",
                error_code=response.status_code,
                response_data=response.text
            )

        try:
            ttl = int(data.get('expires_in') or DEFAULT_TOKEN_TTL_SECONDS)
        except (TypeError, ValueError):
            logger.warning(f"Unreadable expires_in {data.get('expires_in')!r}, using default TTL")
            ttl = DEFAULT_TOKEN_TTL_SECONDS

        token = AccessToken(value=value, obtained_at=self._clock(), ttl_seconds=ttl)
        self._token = token

        logger.info(f"Obtained new access token valid for {ttl}s")
        return token

    def get_valid_token(self, force_refresh: bool = False, timeout: Optional[float] = None) -> AccessToken:
        """
        Get a valid access token.
        Returns cached token if still within its TTL, otherwise fetches a new one.

        Args:
            force_refresh: Fetch a new token even if the cached one is valid
            timeout: Per-call timeout for a fetch

        Returns:
            Valid AccessToken
        """
        token = self._token
        if not force_refresh and self._is_usable(token):
            logger.debug("Using cached token")
            return token

        with self._refresh_lock:
            # another thread may have refreshed while we waited
            token = self._token
            if not force_refresh and self._is_usable(token):
                return token

            if token is None:
                logger.info("No cached token found")
            elif not force_refresh:
                logger.info("Cached token expired, refreshing")
            return self.fetch_token(timeout=timeout)

    def invalidate_token(self):
        """
        Drop the cached token.
        Useful when you know a token is invalid.
        """
        logger.info("Invalidating cached token")
        self._token = None

    def get_auth_header(self, force_refresh: bool = False, timeout: Optional[float] = None) -> dict:
        """
        Get authorization header for API requests.

        Returns:
            Dictionary with Authorization header
        """
        token = self.get_valid_token(force_refresh=force_refresh, timeout=timeout)
        return {'Authorization': f'Bearer {token.value}'}
