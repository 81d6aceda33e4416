"""Category discovery from _category.yml marker files.

Every folder under the document root that holds a marker file is a category.
The marker carries the category slug and title:

    slug: getting-started
    title: Getting Started
    type: guide
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .models import CATEGORY_MARKER, Category

logger = logging.getLogger(__name__)


class CategoryIndex:
    """Case-insensitive index of the categories found under a document root.

    Attributes:
        list: Categories in scan order (sorted by marker path)
        by_slug: Lowercase slug -> Category (first marker wins on a clash)

    Example:
        >>> categories = CategoryIndex.load(Path("docs"))
        >>> categories.get("Getting-Started").title
        'Getting Started'
    """

    def __init__(self, categories: Optional[List[Category]] = None):
        self.list: List[Category] = []
        self.by_slug: Dict[str, Category] = {}
        for category in categories or []:
            self.add(category)

    @classmethod
    def load(cls, docs_root: Union[str, Path]) -> 'CategoryIndex':
        """Scan a document root for marker files.

        Markers missing a slug or title, or that are not valid YAML, are
        skipped with a warning. A folder name that differs from the slug
        is only a warning.

        Args:
            docs_root: Document root directory

        Returns:
            Populated CategoryIndex (empty if the root does not exist)
        """
        root = Path(docs_root)
        index = cls()
        if not root.is_dir():
            logger.warning(f"Document root not found: {root}")
            return index

        for marker_path in sorted(root.rglob(CATEGORY_MARKER)):
            category = cls._read_marker(marker_path, root)
            if category is not None:
                index.add(category)

        logger.debug(f"Loaded {len(index.list)} categories from {root}")
        return index

    @staticmethod
    def _read_marker(marker_path: Path, root: Path) -> Optional[Category]:
        rel = marker_path.relative_to(root)
        try:
            data = yaml.safe_load(marker_path.read_text(encoding='utf-8')) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Skipping unreadable {CATEGORY_MARKER} at {rel}: {e}")
            return None

        if not isinstance(data, dict) or not data.get('slug') or not data.get('title'):
            logger.warning(f"Skipping invalid {CATEGORY_MARKER} at {rel}: missing slug or title.")
            return None

        slug = str(data['slug'])
        folder = marker_path.parent.resolve()
        if folder.name.lower() != slug.lower():
            logger.warning(
                f"Folder \"{folder.name}\" does not match slug \"{slug}\" in {CATEGORY_MARKER}. "
                f"Consider renaming for consistency."
            )

        return Category(
            slug=slug,
            title=str(data['title']),
            folder_path=folder,
            marker_path=marker_path.resolve(),
            type=str(data.get('type') or 'guide'),
        )

    def add(self, category: Category) -> None:
        self.list.append(category)
        if category.key not in self.by_slug:
            self.by_slug[category.key] = category
        else:
            logger.warning(
                f"Category slug \"{category.slug}\" is declared more than once; "
                f"keeping {self.by_slug[category.key].marker_path}"
            )

    def get(self, slug: Optional[str]) -> Optional[Category]:
        """Look up a category by slug, ignoring case."""
        if not slug:
            return None
        return self.by_slug.get(str(slug).lower())

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and slug.lower() in self.by_slug

    def __iter__(self):
        return iter(self.list)

    def __len__(self) -> int:
        return len(self.list)
