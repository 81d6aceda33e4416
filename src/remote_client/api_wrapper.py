"""API wrapper for the remote documentation service REST API.

This module wraps a requests Session and provides error translation from HTTP
responses to our typed exception hierarchy. It integrates with the retry logic
for handling rate limits and short-circuits every write while in dry-run mode.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from .auth import Authenticator, RemoteConfig
from .errors import (
    APIError,
    APIUnreachableError,
    InvalidCredentialsError,
    NotFoundError,
    RateLimitError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

# Categories are listed 100 per page
PAGE_SIZE = 100

WRITE_METHODS = {'post', 'put', 'delete'}


class APIWrapper:
    """Thin wrapper over the documentation service REST API.

    This class:
    1. Adds bearer authentication to every call
    2. Translates HTTP errors to typed exceptions with endpoint and status
    3. Retries 429 rate limits with exponential backoff
    4. Logs instead of sending writes when dry_run is set

    Example:
        >>> api = APIWrapper(RemoteConfig.from_env())
        >>> categories = api.list_categories(page=1)
    """

    def __init__(
        self,
        remote_config: RemoteConfig,
        dry_run: bool = False,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the API wrapper.

        Args:
            remote_config: Connection settings and credential
            dry_run: If True, write calls are logged and never sent
            session: Optional pre-built session (mainly for tests)
        """
        self._config = remote_config
        self._authenticator = Authenticator(remote_config)
        self._session = session
        self.dry_run = dry_run

    def _get_session(self) -> requests.Session:
        """Get or lazily create the HTTP session.

        Raises:
            InvalidCredentialsError: If the API key is missing
        """
        if self._session is None:
            session = requests.Session()
            session.headers.update(self._authenticator.get_headers())
            self._session = session
        return self._session

    def _url(self, endpoint: str) -> str:
        base = self._config.base_url.rstrip('/')
        if not endpoint.startswith('/'):
            endpoint = '/' + endpoint
        return f"{base}{endpoint}"

    @staticmethod
    def _sanitize_credentials(text: str) -> str:
        """Mask bearer tokens and key-like values in error text."""
        if not text:
            return text

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r"\']+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(api_?key|token)["\']?\s*[:=]\s*["\']?([^"\'\s&,}]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'\brdme_[a-zA-Z0-9]{8,}\b',
            '***REDACTED***',
            sanitized
        )
        return sanitized

    def _translate_response(self, method: str, endpoint: str, response: requests.Response) -> None:
        """Raise the typed exception matching an error response."""
        status = response.status_code
        if status < 400:
            return

        body = self._sanitize_credentials((response.text or '')[:500])

        if status in (401, 403):
            raise InvalidCredentialsError(
                endpoint=self._url(endpoint),
                reason=f"HTTP {status}"
            )
        if status == 404:
            raise NotFoundError(method, endpoint, status, body)
        if status == 429:
            raise RateLimitError(method, endpoint, status, body)

        logger.error(f"API operation failed: {method.upper()} {endpoint} - HTTP {status}")
        raise APIError(method, endpoint, status, body)

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request with throttling, error translation and retries.

        Returns:
            Decoded JSON body, or None for empty/204 responses and dry-run writes

        Raises:
            InvalidCredentialsError: On missing key or 401/403
            NotFoundError: On 404
            APIUnreachableError: On timeouts and connection failures
            APIAccessError: If rate limit persists after retries
            APIError: On any other error status, a failed request or a
                non-JSON body
        """
        method = method.lower()

        if self.dry_run and method in WRITE_METHODS:
            logger.info(f"[DRY-RUN] {method.upper()} {endpoint}")
            return None

        def _send():
            session = self._get_session()
            if self._config.api_call_delay:
                time.sleep(self._config.api_call_delay)

            logger.debug(f"API: {method.upper()} {endpoint}")
            try:
                response = session.request(
                    method,
                    self._url(endpoint),
                    params=params,
                    json=payload if method not in ('get', 'delete') else None,
                    timeout=self._config.timeout,
                )
            except (Timeout, ConnectionError) as e:
                raise APIUnreachableError(endpoint=self._url(endpoint)) from e
            except RequestException as e:
                logger.error(f"API request failed: {method.upper()} {endpoint} - {e}")
                raise APIError(method, endpoint, 0, self._sanitize_credentials(str(e))) from e

            self._translate_response(method, endpoint, response)

            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                body = self._sanitize_credentials((response.text or '')[:200])
                logger.error(f"API returned a non-JSON body: {method.upper()} {endpoint}")
                raise APIError(method, endpoint, response.status_code, f"Invalid JSON response: {body}") from e

        return retry_on_rate_limit(_send)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_categories(self, page: int = 1, per_page: int = PAGE_SIZE) -> List[Dict[str, Any]]:
        """Fetch one page of categories."""
        result = self._request('get', '/categories', params={'page': page, 'perPage': per_page})
        return result or []

    def list_category_docs(self, category_slug: str) -> List[Dict[str, Any]]:
        """Fetch the nested document tree of one category."""
        result = self._request('get', f'/categories/{category_slug}/docs')
        return result or []

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_category(self, title: str, category_type: str) -> Optional[Dict[str, Any]]:
        return self._request('post', '/categories', payload={'title': title, 'type': category_type})

    def update_category(self, slug: str, title: str, category_type: str) -> Optional[Dict[str, Any]]:
        return self._request('put', f'/categories/{slug}', payload={'title': title, 'type': category_type})

    def delete_category(self, slug: str) -> bool:
        """Delete a category. Returns False if it was already gone."""
        return self._delete(f'/categories/{slug}')

    def create_doc(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._request('post', '/docs', payload=payload)

    def update_doc(self, slug: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._request('put', f'/docs/{slug}', payload=payload)

    def delete_doc(self, slug: str) -> bool:
        """Delete a document. Returns False if it was already gone."""
        return self._delete(f'/docs/{slug}')

    def _delete(self, endpoint: str) -> bool:
        try:
            self._request('delete', endpoint)
        except NotFoundError:
            logger.warning(f"{endpoint} was already deleted")
            return False
        return True
