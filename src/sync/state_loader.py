"""Local state loading for sync.

Builds the LocalState straight from the filesystem: marker files are the
ground truth for categories and Markdown front matter for documents, so a
file deleted on disk is simply absent from the state.
"""

import logging
from pathlib import Path
from typing import Union

from src.hierarchy.category_index import CategoryIndex
from src.hierarchy.document_index import DocumentIndex, hidden_value, order_value
from src.hierarchy.frontmatter_handler import FrontmatterHandler

from .models import LocalCategory, LocalDoc, LocalState

logger = logging.getLogger(__name__)


class LocalStateLoader:
    """Reads the local hierarchy into the sync state shape.

    Example:
        >>> local = LocalStateLoader(config.docs_root).load()
        >>> len(local.docs)
        42
    """

    def __init__(self, docs_root: Union[str, Path]):
        self.docs_root = Path(docs_root).resolve()

    def load(self) -> LocalState:
        """Load categories and documents.

        Raises:
            FrontmatterError: If a file has malformed front matter
            FilesystemError: If a file cannot be read
        """
        logger.info("Loading local hierarchy and content...")
        state = LocalState()

        for category in CategoryIndex.load(self.docs_root):
            key = category.key
            if key in state.categories:
                continue
            state.categories[key] = LocalCategory(slug=key, title=category.title, type=category.type)

        if not self.docs_root.is_dir():
            return state

        for path in DocumentIndex.content_files(self.docs_root):
            frontmatter, content = FrontmatterHandler.read(path)
            slug = str(frontmatter.get('slug') or '').strip().lower()
            if not slug:
                logger.warning(f"Skipping file with no slug: {path.relative_to(self.docs_root)}")
                continue
            if slug in state.docs:
                logger.warning(f"Duplicate slug \"{slug}\" in {path.relative_to(self.docs_root)}; keeping first")
                continue

            category = frontmatter.get('category')
            parent = frontmatter.get('parent')
            state.docs[slug] = LocalDoc(
                slug=slug,
                title=frontmatter.get('title') or 'Untitled',
                category_slug=str(category).lower() if category else None,
                parent_slug=str(parent).lower() if parent else None,
                order=order_value(frontmatter),
                hidden=hidden_value(frontmatter) is True,
                excerpt=frontmatter.get('excerpt') or '',
                content=content.strip(),
                path=path.resolve(),
            )

        logger.info(f"Local state: {len(state.categories)} categories, {len(state.docs)} docs")
        return state
