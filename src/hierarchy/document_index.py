"""Document discovery from Markdown front matter.

The document index is the in-memory mirror of every content file's structural
metadata. It is built once per command and then either read (validation,
manifest rebuild) or mutated op-by-op by the move executor so later
operations in the same batch see the updated tree.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import DuplicateSlugError
from .frontmatter_handler import FrontmatterHandler
from .models import CATEGORY_MARKER, MANIFEST_FILENAME, Document

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = ('.md', '.mdx')

# Distinguishes "leave unchanged" from an explicit None in relocate()
_UNSET: Any = object()


def order_value(frontmatter: Dict[str, Any]) -> Optional[float]:
    """Numeric 'order' from front matter, None for anything else."""
    order = frontmatter.get('order')
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        return None
    return order


def hidden_value(frontmatter: Dict[str, Any]) -> Optional[bool]:
    """Boolean 'hidden' from front matter; strings such as "false" do not count."""
    hidden = frontmatter.get('hidden')
    return hidden if isinstance(hidden, bool) else None


class DocumentIndex:
    """Slug and path index over the content files of a document root.

    Attributes:
        docs_root: Absolute document root
        by_slug: Slug -> Document (first file wins on a duplicate)
        by_path: Absolute path -> Document for every file with a slug
        duplicates: Slug -> every path declaring it, only for clashing slugs

    Example:
        >>> documents = DocumentIndex.load(Path("docs"))
        >>> documents.require_unique_slugs()
        >>> documents.by_slug["install"].parent
        'getting-started'
    """

    def __init__(self, docs_root: Union[str, Path]):
        self.docs_root = Path(docs_root).resolve()
        self.by_slug: Dict[str, Document] = {}
        self.by_path: Dict[Path, Document] = {}
        self.duplicates: Dict[str, List[Path]] = {}

    @classmethod
    def load(cls, docs_root: Union[str, Path]) -> 'DocumentIndex':
        """Scan every .md/.mdx file under a document root.

        Dot-files and files inside dot-directories are ignored, as are files
        without a slug in their front matter. ``order`` is kept only when it
        is a number and ``hidden`` only when it is a boolean.

        Raises:
            FrontmatterError: If a file has malformed front matter
            FilesystemError: If a file cannot be read
        """
        index = cls(docs_root)
        root = index.docs_root
        if not root.is_dir():
            logger.warning(f"Document root not found: {root}")
            return index

        for path in cls.content_files(root):
            frontmatter, _ = FrontmatterHandler.read(path)
            document = cls._to_document(frontmatter, path)
            if document is None:
                logger.debug(f"Skipping file with no slug: {index.relative(path)}")
                continue
            index.add(document)

        logger.debug(f"Loaded {len(index.by_slug)} documents from {root}")
        return index

    @staticmethod
    def content_files(root: Path) -> List[Path]:
        """Every content file under root, sorted, skipping dot-files and dot-dirs."""
        files = []
        for path in root.rglob('*'):
            if not path.is_file() or path.suffix.lower() not in CONTENT_SUFFIXES:
                continue
            rel_parts = path.relative_to(root).parts
            if any(part.startswith('.') for part in rel_parts):
                continue
            if path.name in (CATEGORY_MARKER, MANIFEST_FILENAME):
                continue
            files.append(path)
        return sorted(files)

    @staticmethod
    def _to_document(frontmatter: Dict[str, Any], path: Path) -> Optional[Document]:
        slug = str(frontmatter.get('slug') or '').strip()
        if not slug:
            return None

        parent = frontmatter.get('parent')
        parent = str(parent).strip() if parent not in (None, '') else None

        return Document(
            slug=slug,
            title=str(frontmatter.get('title') or ''),
            category=str(frontmatter.get('category') or ''),
            parent=parent,
            order=order_value(frontmatter),
            hidden=hidden_value(frontmatter),
            path=path.resolve(),
        )

    def add(self, document: Document) -> None:
        """Register a document, recording a duplicate if its slug is taken."""
        self.by_path[document.path] = document
        existing = self.by_slug.get(document.slug)
        if existing is None:
            self.by_slug[document.slug] = document
            return
        paths = self.duplicates.setdefault(document.slug, [existing.path])
        paths.append(document.path)

    def require_unique_slugs(self) -> None:
        """Raise if any slug is declared by more than one file.

        Raises:
            DuplicateSlugError: Listing every slug and all of its paths
        """
        if self.duplicates:
            for slug, paths in self.duplicates.items():
                logger.warning(f"Duplicate slug \"{slug}\" in: {', '.join(self.relative(p) for p in paths)}")
            raise DuplicateSlugError(self.duplicates)

    def get(self, slug: Optional[str]) -> Optional[Document]:
        if not slug:
            return None
        return self.by_slug.get(slug)

    def snapshot(self) -> 'DocumentIndex':
        """Return an independent deep copy for hypothetical edits."""
        clone = DocumentIndex(self.docs_root)
        clone.by_slug = {slug: copy.copy(doc) for slug, doc in self.by_slug.items()}
        clone.by_path = {doc.path: doc for doc in clone.by_slug.values()}
        clone.duplicates = {slug: list(paths) for slug, paths in self.duplicates.items()}
        return clone

    def relocate(
        self,
        slug: str,
        path: Optional[Path] = None,
        category: Optional[str] = None,
        parent: Any = _UNSET,
        order: Any = _UNSET,
    ) -> Document:
        """Update one document's position in place.

        Args:
            slug: Document to update
            path: New file path (unchanged if None)
            category: New category slug (unchanged if None)
            parent: New parent slug, or None to detach (unchanged if omitted)
            order: New order (unchanged if omitted)

        Returns:
            The updated Document

        Raises:
            KeyError: If the slug is not indexed
        """
        document = self.by_slug[slug]
        if path is not None:
            self.by_path.pop(document.path, None)
            document.path = Path(path).resolve()
            self.by_path[document.path] = document
        if category is not None:
            document.category = category
        if parent is not _UNSET:
            document.parent = parent
        if order is not _UNSET:
            document.order = order
        return document

    def children_of(self, slug: str) -> List[Document]:
        """Direct children of a document, in slug order."""
        return sorted(
            (doc for doc in self.by_slug.values() if doc.parent == slug),
            key=lambda doc: doc.slug,
        )

    def relative(self, path: Union[str, Path]) -> str:
        """Path relative to the document root, for messages."""
        path = Path(path)
        try:
            return str(path.resolve().relative_to(self.docs_root))
        except ValueError:
            return str(path)

    def __contains__(self, slug: object) -> bool:
        return slug in self.by_slug

    def __iter__(self):
        return iter(self.by_slug.values())

    def __len__(self) -> int:
        return len(self.by_slug)
