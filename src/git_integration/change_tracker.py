"""Change detection on top of git.

Two questions are answered here:

- Which documentation files changed on this branch? (drives sync gating)
- Does the staged commit change any document's position in the tree?
  (drives the pre-commit manifest rebuild)
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Union

from src.git_integration.errors import GitRepositoryError
from src.git_integration.git_repository import GitRepository
from src.hierarchy.errors import FrontmatterError
from src.hierarchy.frontmatter_handler import FrontmatterHandler

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = ('.md', '.mdx')


class ChangeTracker:
    """Maps git diffs onto documentation paths.

    Example:
        >>> tracker = ChangeTracker(GitRepository("."), config.docs_root, config.manifest_path)
        >>> tracker.changed_paths("main")
        {PosixPath('/repo/docs/guides/intro.md')}
    """

    def __init__(
        self,
        repo: GitRepository,
        docs_root: Union[str, Path],
        manifest_path: Union[str, Path],
    ):
        self.repo = repo
        self.docs_root = Path(docs_root).resolve()
        self.manifest_path = Path(manifest_path).resolve()

    def _is_doc(self, path: Path) -> bool:
        return path.suffix.lower() in CONTENT_SUFFIXES and self.docs_root in path.parents

    def changed_paths(self, target_branch: str) -> Optional[Set[Path]]:
        """Existing docs (and the manifest) changed since ``target_branch``.

        Returns:
            Absolute paths, or None if the diff could not be computed, in
            which case callers must treat every file as changed
        """
        logger.info(f"Checking git for files changed relative to '{target_branch}'...")
        try:
            root = self.repo.toplevel()
            names = self.repo.diff_names(f"{target_branch}...HEAD")
        except GitRepositoryError as e:
            logger.warning(f"Git diff failed ({e}). Running full sync (no deletions gated).")
            return None

        changed: Set[Path] = set()
        for name in names:
            path = (root / name).resolve()
            if (path == self.manifest_path or self._is_doc(path)) and path.exists():
                changed.add(path)

        logger.info(f"Git detected {len(changed)} changed documentation file(s)")
        return changed

    def staged_doc_names(self) -> List[str]:
        """Staged documentation files, relative to the repository root.

        Raises:
            GitRepositoryError: If git cannot list the index
        """
        root = self.repo.toplevel()
        return [name for name in self.repo.staged_names() if self._is_doc((root / name).resolve())]

    def has_structural_changes(self) -> bool:
        """Whether any staged document changes its position in the hierarchy.

        A staged deletion or a file new since HEAD always counts. Otherwise
        the structural front matter keys are compared case-insensitively
        against HEAD.
        """
        try:
            root = self.repo.toplevel()
            staged = self.staged_doc_names()
        except GitRepositoryError as e:
            logger.warning(f"Could not read the staged diff ({e}). Assuming no structural changes.")
            return False

        for name in staged:
            path = root / name
            if not path.exists():
                logger.info(f"File deleted: {name}. Forcing rebuild.")
                return True

            head_content = self.repo.show("HEAD", name)
            if head_content is None:
                logger.info(f"New file detected: {name}. Forcing rebuild.")
                return True

            try:
                current_fm, _ = FrontmatterHandler.read(path)
                head_fm, _ = FrontmatterHandler.extract_frontmatter_and_content(head_content, name)
            except FrontmatterError as e:
                logger.info(f"Unparsable front matter in {name} ({e}). Forcing rebuild.")
                return True

            current = FrontmatterHandler.structural_view(current_fm)
            previous = FrontmatterHandler.structural_view(head_fm)
            for key, value in current.items():
                if value != previous[key]:
                    logger.info(f"Change detected in {name}: {key} changed from \"{previous[key]}\" to \"{value}\".")
                    return True

        return False

    def manifest_relative(self) -> str:
        """Manifest path relative to the repository root."""
        return str(self.manifest_path.relative_to(self.repo.toplevel()))
