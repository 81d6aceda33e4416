"""Git integration for change tracking and committing hierarchy edits."""

from src.git_integration.change_tracker import ChangeTracker
from src.git_integration.errors import GitRepositoryError
from src.git_integration.git_repository import GitRepository

__all__ = [
    'ChangeTracker',
    'GitRepository',
    'GitRepositoryError',
]
