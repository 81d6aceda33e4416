"""Application configuration loading and validation.

Configuration is read once at startup and frozen into an AppConfig value.
Sources, lowest precedence first:

1. Built-in defaults
2. Environment variables (a .env file is honored via python-dotenv)
3. An optional YAML file (``.docs-hierarchy.yaml`` in the working directory)
4. Explicit overrides from the command line

Configuration file structure:
    docs_root: docs
    max_depth: 3
    destination_policy: category
    target_branch: main
    remote:
      base_url: https://dash.readme.com/api/v1
      version: "1.0"
      category_type: guide
      max_concurrent_api_calls: 5
      api_call_delay: 0.25
      timeout: 30
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from src.remote_client.auth import RemoteConfig

from .errors import ConfigError, FilesystemError
from .models import MANIFEST_FILENAME, MAX_DOC_DEPTH, AppConfig, DestinationPolicy

DEFAULT_CONFIG_FILE = '.docs-hierarchy.yaml'
DEFAULT_DOCS_ROOT = 'docs'


class ConfigLoader:
    """Builds the immutable AppConfig for one run."""

    ALLOWED_TOP_LEVEL_FIELDS = {'docs_root', 'max_depth', 'destination_policy', 'target_branch', 'remote'}

    ALLOWED_REMOTE_FIELDS = {
        'base_url', 'version', 'category_type',
        'max_concurrent_api_calls', 'api_call_delay', 'timeout',
    }

    @classmethod
    def load(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        docs_root: Optional[Union[str, Path]] = None,
        dry_run: bool = False,
        no_commit: bool = False,
        **overrides: Any,
    ) -> AppConfig:
        """Load configuration from environment, file and overrides.

        Args:
            config_path: YAML file to read; ``.docs-hierarchy.yaml`` is used
                when it exists and no path is given
            docs_root: Document root override
            dry_run: Suppress all writes
            no_commit: Skip the git commit after local changes
            **overrides: Any other AppConfig field

        Returns:
            Frozen AppConfig

        Raises:
            FilesystemError: If an explicitly given file cannot be read
            ConfigError: If any value is invalid
        """
        load_dotenv()

        file_values: Dict[str, Any] = {}
        if config_path is not None:
            file_values = cls._read_file(Path(config_path))
        elif Path(DEFAULT_CONFIG_FILE).is_file():
            file_values = cls._read_file(Path(DEFAULT_CONFIG_FILE))

        root = Path(docs_root or file_values.get('docs_root') or DEFAULT_DOCS_ROOT).resolve()

        max_depth = overrides.pop('max_depth', None) or file_values.get('max_depth', MAX_DOC_DEPTH)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ConfigError(f"must be a positive integer, got {max_depth!r}", 'max_depth')

        policy_value = overrides.pop('destination_policy', None) or file_values.get(
            'destination_policy', DestinationPolicy.CATEGORY_WINS.value
        )
        try:
            policy = DestinationPolicy(policy_value)
        except ValueError:
            allowed = ', '.join(p.value for p in DestinationPolicy)
            raise ConfigError(f"must be one of: {allowed}, got {policy_value!r}", 'destination_policy')

        target_branch = (
            overrides.pop('target_branch', None)
            or file_values.get('target_branch')
            or os.getenv('TARGET_GIT_BRANCH')
            or 'main'
        )

        remote = cls._parse_remote(file_values.get('remote') or {})

        return AppConfig(
            docs_root=root,
            manifest_path=root / MANIFEST_FILENAME,
            max_depth=max_depth,
            dry_run=dry_run,
            no_commit=no_commit,
            destination_policy=policy,
            target_branch=str(target_branch),
            remote=remote,
        )

    @classmethod
    def _read_file(cls, config_path: Path) -> Dict[str, Any]:
        try:
            content = config_path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise FilesystemError(str(config_path), 'read', 'Configuration file not found')
        except PermissionError:
            raise FilesystemError(str(config_path), 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(str(config_path), 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        unknown = set(config_dict) - cls.ALLOWED_TOP_LEVEL_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")
        return config_dict

    @classmethod
    def _parse_remote(cls, remote_dict: Any) -> RemoteConfig:
        if not isinstance(remote_dict, dict):
            raise ConfigError(
                f"must be a dictionary, got {type(remote_dict).__name__}", 'remote'
            )

        unknown = set(remote_dict) - cls.ALLOWED_REMOTE_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}", 'remote')

        cap = remote_dict.get('max_concurrent_api_calls')
        if cap is not None and (isinstance(cap, bool) or not isinstance(cap, int) or cap < 1):
            raise ConfigError(f"must be a positive integer, got {cap!r}", 'remote.max_concurrent_api_calls')

        delay = remote_dict.get('api_call_delay')
        if delay is not None and (isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0):
            raise ConfigError(f"must be a non-negative number, got {delay!r}", 'remote.api_call_delay')

        return RemoteConfig.from_env(**remote_dict)
