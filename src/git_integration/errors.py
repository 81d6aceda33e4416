"""Typed exceptions for git integration errors.

All exceptions inherit from SyncError so the CLI can catch every
application-level failure in one place.
"""

from src.remote_client.errors import SyncError


class GitRepositoryError(SyncError):
    """Raised when git repository operations fail.

    Attributes:
        repo_path: Path to git repository
        message: Error description
        git_output: Git command stderr output
    """

    def __init__(self, repo_path: str, message: str, git_output: str = ""):
        full_message = f"Git repository error at {repo_path}: {message}"
        if git_output.strip():
            full_message += f" ({git_output.strip()})"
        super().__init__(full_message)
        self.repo_path = repo_path
        self.message = message
        self.git_output = git_output
