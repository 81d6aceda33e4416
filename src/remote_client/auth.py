"""Authentication and connection settings for the documentation service.

This module handles loading the remote service settings from environment
variables using python-dotenv. The API key is validated lazily, only when a
remote call is about to be made, so purely local commands (validate, manifest,
move) never require a credential.
"""

import os
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_BASE_URL = 'https://dash.readme.com/api/v1'


@dataclass(frozen=True)
class RemoteConfig:
    """Connection and throttling settings for the remote service.

    Attributes:
        base_url: API base URL
        api_key: Bearer credential (None when not configured)
        version: Optional documentation version sent as x-readme-version
        category_type: Only remote categories of this type are mirrored
        max_concurrent_api_calls: Cap on simultaneous in-flight requests
        api_call_delay: Seconds to wait before each request
        timeout: Per-request timeout in seconds
    """
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    version: Optional[str] = None
    category_type: str = 'guide'
    max_concurrent_api_calls: int = 5
    api_call_delay: float = 0.25
    timeout: int = 30

    @classmethod
    def from_env(cls, **overrides) -> 'RemoteConfig':
        """Build a RemoteConfig from environment variables (and a .env file)."""
        load_dotenv()
        values = {
            'base_url': os.getenv('README_BASE_URL') or DEFAULT_BASE_URL,
            'api_key': os.getenv('README_API_KEY') or None,
            'version': os.getenv('README_VERSION') or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class Credentials(NamedTuple):
    """Remote API credentials."""
    base_url: str
    api_key: str
    version: Optional[str]


class Authenticator:
    """Validates credentials and produces request headers.

    Credentials are never cached outside the RemoteConfig value and are never
    logged.

    Raises:
        InvalidCredentialsError: If the API key is missing

    Example:
        >>> auth = Authenticator(RemoteConfig.from_env())
        >>> headers = auth.get_headers()
    """

    def __init__(self, remote_config: RemoteConfig):
        self._config = remote_config

    def get_credentials(self) -> Credentials:
        """Return the credentials, failing fast when the API key is missing.

        Raises:
            InvalidCredentialsError: If README_API_KEY is not configured
        """
        if not self._config.api_key:
            raise InvalidCredentialsError(
                endpoint=self._config.base_url,
                reason="README_API_KEY is not set in the environment or .env file"
            )
        return Credentials(
            base_url=self._config.base_url.rstrip('/'),
            api_key=self._config.api_key,
            version=self._config.version,
        )

    def get_headers(self) -> Dict[str, str]:
        """Build the authorization headers sent with every request."""
        creds = self.get_credentials()
        headers = {
            'Authorization': f'Bearer {creds.api_key}',
            'Accept': 'application/json',
        }
        if creds.version:
            headers['x-readme-version'] = creds.version
        return headers
