"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError so the commands can catch them in one
place and map them to an exit code.
"""

from src.remote_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class DocsRootNotFoundError(CLIError):
    """Raised when the configured document root does not exist."""

    def __init__(self, docs_root: str):
        super().__init__(f"Docs root not found at {docs_root}")
        self.docs_root = docs_root
