"""Test fixtures shared by the unit tests.

This module provides:
- Docs tree builders (category markers, Markdown with front matter)
- AppConfig construction for a temporary docs root
- Real git repositories in temporary directories
"""

from .docs_trees import (
    build_standard_tree,
    make_config,
    write_category,
    write_doc,
    write_manifest,
)
from .git_test_repos import commit_all, git, init_git_repo, last_commit_message

__all__ = [
    "build_standard_tree",
    "commit_all",
    "git",
    "init_git_repo",
    "last_commit_message",
    "make_config",
    "write_category",
    "write_doc",
    "write_manifest",
]
