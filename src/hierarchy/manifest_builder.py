"""Manifest rebuilding, serialization and persistence.

The manifest is a derived snapshot of the hierarchy:

    {
      "categories": [
        {"slug": "guides", "title": "Guides", "docs": [
          {"slug": "intro", "title": "Intro", "order": 1, "parent": null, "children": []}
        ]}
      ]
    }

It is never edited by hand. Rebuilding it from the same indices always
yields byte-identical text.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .category_index import CategoryIndex
from .document_index import DocumentIndex
from .errors import CycleError, FilesystemError, ManifestError
from .models import MAX_DOC_DEPTH, Manifest, ManifestCategory, ManifestNode

logger = logging.getLogger(__name__)

# slug -> (category slug, parent slug)
FlatManifest = Dict[str, Tuple[str, Optional[str]]]


class ManifestStore:
    """Reads and writes the manifest file."""

    def __init__(self, path: Union[str, Path], dry_run: bool = False):
        self.path = Path(path)
        self.dry_run = dry_run

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, Any]:
        """Parse the manifest JSON.

        Raises:
            ManifestError: If the file is missing or not valid JSON
        """
        try:
            text = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise ManifestError(str(self.path), 'file does not exist')
        except OSError as e:
            raise ManifestError(str(self.path), str(e))

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestError(str(self.path), f"invalid JSON: {e}")

        if not isinstance(data, dict):
            raise ManifestError(str(self.path), 'top level must be an object')
        return data

    def flatten(self, data: Dict[str, Any]) -> Tuple[FlatManifest, List[str]]:
        """Flatten a parsed manifest into slug -> (category, parent).

        Returns:
            Tuple of (document map, category slugs in manifest order)

        Raises:
            ManifestError: If the structure does not match the manifest shape
        """
        documents: FlatManifest = {}
        category_slugs: List[str] = []

        def walk(nodes: List[Dict[str, Any]], category_slug: str) -> None:
            for node in nodes:
                documents[node['slug']] = (category_slug, node.get('parent') or None)
                walk(node.get('children') or [], category_slug)

        try:
            for category in data['categories']:
                category_slugs.append(category['slug'])
                walk(category.get('docs') or [], category['slug'])
        except (KeyError, TypeError, AttributeError) as e:
            raise ManifestError(str(self.path), f"unexpected structure: {e}")

        return documents, category_slugs

    def write(self, manifest: Manifest) -> bool:
        """Persist the manifest. Returns False in dry-run mode.

        Raises:
            FilesystemError: If the file cannot be written
        """
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would write manifest: {self.path}")
            return False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(ManifestBuilder.serialize(manifest), encoding='utf-8')
        except OSError as e:
            raise FilesystemError(str(self.path), 'write', str(e))

        logger.info(f"Manifest written: {self.path}")
        return True


class ManifestBuilder:
    """Builds the canonical manifest from the category and document indices.

    Example:
        >>> builder = ManifestBuilder(validator)
        >>> manifest = builder.rebuild(documents, categories)
        >>> store.write(manifest)
    """

    def __init__(self, validator, max_depth: int = MAX_DOC_DEPTH):
        """Initialize the builder.

        Args:
            validator: HierarchyValidator run before every rebuild
            max_depth: Recursion cap while sorting the tree
        """
        self.validator = validator
        self.max_depth = max_depth

    def rebuild(self, documents: DocumentIndex, categories: CategoryIndex) -> Manifest:
        """Validate the tree and derive its manifest.

        Args:
            documents: Loaded document index
            categories: Loaded category index

        Returns:
            Manifest with categories sorted by slug and each level sorted by
            (order, slug)

        Raises:
            StructureValidationError: If the tree is structurally broken
        """
        self.validator.validate(categories, documents, skip_manifest_check=True)

        nodes: Dict[str, ManifestNode] = {}
        for doc in documents:
            nodes[doc.slug] = ManifestNode(
                slug=doc.slug,
                title=doc.title or doc.slug,
                order=doc.sort_order,
                parent=doc.parent,
            )

        roots: Dict[str, List[ManifestNode]] = {category.key: [] for category in categories}
        for doc in documents:
            key = doc.category.lower()
            if key not in roots:
                continue
            parent = documents.get(doc.parent)
            if parent is not None and parent.category.lower() == key:
                nodes[parent.slug].children.append(nodes[doc.slug])
            else:
                # orphans within a category become roots
                nodes[doc.slug].parent = None
                roots[key].append(nodes[doc.slug])

        manifest = Manifest()
        for category in sorted(categories.by_slug.values(), key=lambda c: c.slug):
            level = roots.get(category.key, [])
            self._sort_level(level, 1)
            manifest.categories.append(
                ManifestCategory(slug=category.slug, title=category.title, docs=level)
            )

        logger.debug(f"Manifest rebuilt: {len(manifest.categories)} categories, {len(nodes)} documents")
        return manifest

    def _sort_level(self, level: List[ManifestNode], depth: int) -> None:
        if level and depth > self.max_depth:
            raise CycleError(level[0].slug)
        level.sort(key=lambda node: (node.order, node.slug))
        for node in level:
            self._sort_level(node.children, depth + 1)

    @staticmethod
    def serialize(manifest: Manifest) -> str:
        """Deterministic JSON text: indent 2, trailing newline."""
        return json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"
