"""Git repository access for the documentation working tree.

This module provides the GitRepository class, a thin subprocess wrapper over
the handful of git commands the tool needs: branch diffs for sync, the staged
diff and HEAD contents for the pre-commit structural check, and add/reset/
commit after local hierarchy edits.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from src.git_integration.errors import GitRepositoryError

logger = logging.getLogger(__name__)

# Git command timeout in seconds
GIT_TIMEOUT = 10


class GitRepository:
    """Runs git commands inside a working tree.

    Example:
        >>> repo = GitRepository(".")
        >>> repo.diff_names("main...HEAD")
        ['docs/guides/intro.md']
        >>> repo.show("HEAD", "docs/guides/intro.md")
        '---\\nslug: intro\\n---\\n...'
    """

    def __init__(self, repo_path: Union[str, Path] = "."):
        """Initialize git repository access.

        Args:
            repo_path: Any directory inside the working tree
        """
        self.repo_path = os.path.abspath(str(repo_path))
        self._toplevel: Optional[Path] = None

    def _run(self, args: Sequence[str], description: str) -> subprocess.CompletedProcess:
        """Run a git command, translating launch failures and timeouts.

        Raises:
            GitRepositoryError: If git is missing or the command times out
        """
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message=f"Git {description} timed out after {GIT_TIMEOUT} seconds",
            )
        except FileNotFoundError:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message="Git command not found. Please install git.",
            )

    def _run_checked(self, args: Sequence[str], description: str) -> str:
        result = self._run(args, description)
        if result.returncode != 0:
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message=f"Failed to {description}",
                git_output=result.stderr,
            )
        return result.stdout

    def toplevel(self) -> Path:
        """Absolute root of the working tree.

        Raises:
            GitRepositoryError: If repo_path is not inside a git repository
        """
        if self._toplevel is None:
            output = self._run_checked(["rev-parse", "--show-toplevel"], "locate repository root")
            self._toplevel = Path(output.strip()).resolve()
        return self._toplevel

    def diff_names(self, revision_range: str) -> List[str]:
        """Paths (relative to the repository root) changed in a revision range.

        Raises:
            GitRepositoryError: If the diff fails (e.g. unknown branch)
        """
        output = self._run_checked(["diff", "--name-only", revision_range], f"diff {revision_range}")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def staged_names(self) -> List[str]:
        """Paths staged for the next commit, relative to the repository root.

        Raises:
            GitRepositoryError: If the diff fails
        """
        output = self._run_checked(["diff", "--name-only", "--cached"], "list staged files")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def show(self, revision: str, relative_path: str) -> Optional[str]:
        """File contents at a revision, or None if the file is not in it.

        Raises:
            GitRepositoryError: If git cannot be run
        """
        result = self._run(["show", f"{revision}:{relative_path}"], f"show {revision}:{relative_path}")
        if result.returncode != 0:
            logger.debug(f"{relative_path} not found at {revision}: {result.stderr.strip()}")
            return None
        return result.stdout

    def is_staged(self, relative_path: str) -> bool:
        return relative_path in self.staged_names()

    def add(self, paths: Sequence[Union[str, Path]]) -> None:
        """Stage paths.

        Raises:
            GitRepositoryError: If git add fails
        """
        self._run_checked(["add", "--", *[str(p) for p in paths]], "stage files")
        logger.debug(f"Staged: {', '.join(str(p) for p in paths)}")

    def unstage(self, path: Union[str, Path]) -> None:
        """Remove a path from the index, keeping the working-tree file.

        Raises:
            GitRepositoryError: If git reset fails
        """
        self._run_checked(["reset", "-q", "HEAD", "--", str(path)], f"unstage {path}")

    def commit(self, message: str) -> bool:
        """Commit the index. Returns False when there is nothing to commit.

        Raises:
            GitRepositoryError: If the commit fails for any other reason
        """
        result = self._run(["commit", "-m", message], "commit")
        if result.returncode != 0:
            if "nothing to commit" in result.stdout or "nothing to commit" in result.stderr:
                logger.debug("No changes to commit")
                return False
            raise GitRepositoryError(
                repo_path=self.repo_path,
                message="Failed to commit",
                git_output=result.stderr,
            )
        logger.info(f"Committed: {message}")
        return True
