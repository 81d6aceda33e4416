"""Command-line interface for the docs hierarchy tool.

This package provides the `docs-hierarchy` CLI that validates the local
document tree, maintains its manifest, performs bulk moves and pushes the
result to the remote documentation service, with rich terminal output and
exit codes suitable for git hooks and CI.
"""

from .errors import CLIError, DocsRootNotFoundError
from .hierarchy_command import HierarchyCommand
from .models import ExitCode
from .output import OutputHandler
from .sync_command import SyncCommand

__all__ = [
    'CLIError',
    'DocsRootNotFoundError',
    'ExitCode',
    'HierarchyCommand',
    'OutputHandler',
    'SyncCommand',
]
