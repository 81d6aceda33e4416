"""Structural validation of the document hierarchy.

The validator checks every invariant that ties front matter, physical file
locations and the persisted manifest together:

1. A declared parent exists
2. A document and its parent share a category
3. Depth never exceeds the configured maximum
4. Parent links are acyclic
5. The referenced category has a marker file
6. The file sits at ``{category folder}/{ancestor slugs...}/{slug}.md``
7. The manifest lists exactly the documents and categories on disk

Violations are collected, never raised one at a time, so a single run reports
everything that needs fixing.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .ancestry import Ancestry
from .category_index import CategoryIndex
from .document_index import DocumentIndex
from .errors import CycleError, ManifestError, StructureValidationError
from .manifest_builder import ManifestStore
from .models import MANIFEST_FILENAME, AppConfig, Document

logger = logging.getLogger(__name__)

REBUILD_HINT = "Please run 'manifest'."


class HierarchyValidator:
    """Validates categories and documents against the hierarchy invariants.

    Example:
        >>> validator = HierarchyValidator(config, ManifestStore(config.manifest_path))
        >>> validator.validate(categories, documents)  # raises on any violation
    """

    def __init__(self, config: AppConfig, manifest_store: Optional[ManifestStore] = None):
        """Initialize the validator.

        Args:
            config: Application configuration (max depth, manifest path)
            manifest_store: Manifest reader; built from config when omitted
        """
        self.config = config
        self.max_depth = config.max_depth
        self.manifest_store = manifest_store or ManifestStore(config.manifest_path, dry_run=config.dry_run)

    def validate(
        self,
        categories: CategoryIndex,
        documents: DocumentIndex,
        skip_manifest_check: bool = False,
    ) -> None:
        """Validate the whole hierarchy.

        Args:
            categories: Loaded category index
            documents: Loaded document index
            skip_manifest_check: Skip the manifest cross-check (used right
                before the manifest is rebuilt)

        Raises:
            DuplicateSlugError: If any slug is declared twice
            StructureValidationError: With every violation found
        """
        documents.require_unique_slugs()

        errors = self.collect_errors(categories, documents, skip_manifest_check)
        if errors:
            logger.debug(f"Validation found {len(errors)} error(s)")
            raise StructureValidationError(errors)
        logger.info(f"Structure valid: {len(categories)} categories, {len(documents)} documents")

    def collect_errors(
        self,
        categories: CategoryIndex,
        documents: DocumentIndex,
        skip_manifest_check: bool = False,
    ) -> List[str]:
        """Run every check and return the violation messages in order."""
        errors: List[str] = []
        errors.extend(self._check_links(categories, documents))
        errors.extend(self._check_physical_paths(categories, documents))
        if not skip_manifest_check:
            errors.extend(self._check_manifest(categories, documents))
        return errors

    @staticmethod
    def check_same_category_parent(document: Document, parent: Optional[Document]) -> Optional[str]:
        """Error message if a document and its parent are in different categories."""
        if parent is None:
            return None
        if document.category.lower() != parent.category.lower():
            return (
                f"Parent category mismatch: Doc \"{document.slug}\" (Category: {document.category}) "
                f"must belong to the same category as parent \"{parent.slug}\" "
                f"(Category: {parent.category})."
            )
        return None

    def hypothetical_depth(self, parent_slug: Optional[str], documents: DocumentIndex) -> int:
        """Depth a new child would have under ``parent_slug`` (1 at a category root)."""
        if not parent_slug:
            return 1
        return Ancestry(documents.by_slug, self.max_depth).depth_of(parent_slug) + 1

    def expected_path(
        self,
        document: Document,
        categories: CategoryIndex,
        documents: DocumentIndex,
    ) -> Optional[Path]:
        """Where a document must live given its category and ancestors.

        Returns None if the category is unknown.

        Raises:
            CycleError: If the ancestor chain is longer than the maximum depth
        """
        category = categories.get(document.category)
        if category is None:
            return None
        chain = Ancestry(documents.by_slug, self.max_depth).chain_of(document.slug)
        return category.folder_path.joinpath(*chain, f"{document.slug}.md")

    def _check_links(self, categories: CategoryIndex, documents: DocumentIndex) -> List[str]:
        errors: List[str] = []
        ancestry = Ancestry(documents.by_slug, self.max_depth)

        for doc in documents:
            parent = documents.get(doc.parent)
            if doc.parent and parent is None:
                errors.append(
                    f"Missing Parent: Doc \"{doc.slug}\" references parent \"{doc.parent}\", "
                    f"but no doc with that slug exists."
                )

            mismatch = self.check_same_category_parent(doc, parent)
            if mismatch:
                errors.append(mismatch)

            depth = ancestry.depth_of(doc.slug)
            if depth > self.max_depth:
                errors.append(
                    f"Max Depth Exceeded: Doc \"{doc.slug}\" exceeds max depth "
                    f"(Level {depth} > max {self.max_depth})."
                )

            repeated = ancestry.find_cycle(doc.slug)
            if repeated:
                errors.append(
                    f"Circular Dependency: Cycle detected involving \"{doc.slug}\" and parent \"{repeated}\"."
                )

            if doc.category not in categories:
                errors.append(
                    f"Missing Category: Doc \"{doc.slug}\" references category \"{doc.category}\", "
                    f"which has no local _category.yml."
                )
        return errors

    def _check_physical_paths(self, categories: CategoryIndex, documents: DocumentIndex) -> List[str]:
        errors: List[str] = []
        for doc in documents:
            try:
                expected = self.expected_path(doc, categories, documents)
            except CycleError:
                # already reported by the link checks
                continue
            if expected is None:
                continue

            if str(doc.path.resolve()).lower() != str(expected.resolve()).lower():
                errors.append(
                    f"PHYSICAL MISMATCH for \"{doc.slug}\" in category \"{doc.category}\": "
                    f"Actual: {documents.relative(doc.path)} | "
                    f"Expected: {documents.relative(expected)}"
                )
        return errors

    def _check_manifest(self, categories: CategoryIndex, documents: DocumentIndex) -> List[str]:
        if not self.manifest_store.exists():
            return [
                f"MANIFEST MISSING: The '{MANIFEST_FILENAME}' file does not exist. {REBUILD_HINT}"
            ]

        try:
            manifest_docs, manifest_categories = self.manifest_store.flatten(self.manifest_store.load())
        except ManifestError as e:
            logger.debug(f"Manifest unreadable: {e}")
            return [
                f"MANIFEST INVALID: Could not parse '{MANIFEST_FILENAME}'. It may be corrupt."
            ]

        errors: List[str] = []
        disk_categories = set(categories.by_slug)
        listed_categories = {slug.lower() for slug in manifest_categories}

        for slug in sorted(listed_categories - disk_categories):
            errors.append(
                f"MANIFEST MISMATCH: Category \"{slug}\" exists in the manifest but its folder "
                f"is MISSING from the disk. {REBUILD_HINT}"
            )
        for slug in sorted(disk_categories - listed_categories):
            errors.append(
                f"MANIFEST MISMATCH: Category \"{slug}\" exists on disk but is MISSING "
                f"from the manifest. {REBUILD_HINT}"
            )

        for doc in documents:
            entry = manifest_docs.get(doc.slug)
            if entry is None:
                errors.append(
                    f"MANIFEST MISMATCH for \"{doc.slug}\": Doc exists on disk but is MISSING "
                    f"from the manifest. {REBUILD_HINT}"
                )
                continue
            category, parent = entry
            if doc.category.lower() != category.lower():
                errors.append(
                    f"MANIFEST MISMATCH for \"{doc.slug}\": Front matter has category "
                    f"\"{doc.category}\", but manifest has \"{category}\". {REBUILD_HINT}"
                )
            if doc.parent != parent:
                errors.append(
                    f"MANIFEST MISMATCH for \"{doc.slug}\": Front matter has parent "
                    f"\"{doc.parent or 'null'}\", but manifest has \"{parent or 'null'}\". {REBUILD_HINT}"
                )

        for slug in manifest_docs:
            if slug not in documents:
                errors.append(
                    f"MANIFEST MISMATCH for \"{slug}\": Doc is listed in the manifest but the file "
                    f"is MISSING from the disk. {REBUILD_HINT}"
                )
        return errors
