"""Root pytest configuration for all tests.

Provides a populated docs tree and a matching AppConfig for every test
that asks for them, plus the same tree committed in a real git repository.
"""

import logging

import pytest

from tests.fixtures.docs_trees import build_standard_tree, make_config, write_manifest
from tests.fixtures.git_test_repos import commit_all, init_git_repo

# Keep connection-pool chatter out of captured logs.
logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture
def docs_root(tmp_path):
    """Standard two-category docs tree under tmp_path/docs."""
    return build_standard_tree(tmp_path / "docs").resolve()


@pytest.fixture
def config(docs_root):
    """AppConfig for the standard docs tree."""
    return make_config(docs_root)


@pytest.fixture
def repo_config(tmp_path):
    """AppConfig for a standard docs tree committed on 'main' in a real git repo.

    The manifest is built and committed with the docs, so the tree starts
    valid and clean.
    """
    repo_path = init_git_repo(tmp_path / "repo")
    docs = build_standard_tree(repo_path / "docs").resolve()
    app_config = make_config(docs)
    write_manifest(app_config)
    commit_all(repo_path, "Initial docs")
    return app_config
