"""Planning of bulk moves (many sources, one destination).

A plan is computed entirely in memory against a working snapshot of the
document index, so every check runs as if the move had already happened and
nothing on disk is touched until the executor applies the plan.
"""

import copy
import logging
from typing import Callable, Dict, Iterable, List, Optional

from .ancestry import Ancestry
from .category_index import CategoryIndex
from .document_index import DocumentIndex
from .errors import CycleError, MoveError, PathCollisionError
from .models import (
    ORDER_SENTINEL,
    AppConfig,
    Category,
    ChildMode,
    Destination,
    DestinationPolicy,
    FileOperation,
    MovePlan,
    Promotion,
)
from .validator import HierarchyValidator

logger = logging.getLogger(__name__)

# Called with (source slug, descendant slugs) when the child mode is ASK
ChildModeResolver = Callable[[str, List[str]], ChildMode]


class BulkMovePlanner:
    """Computes a validated MovePlan for a multi-source move.

    Example:
        >>> planner = BulkMovePlanner(config, validator)
        >>> plan = planner.plan(categories, documents, ["a", "b"], "guides")
        >>> [op.slug for op in plan.file_operations]
        ['a', 'b']
    """

    def __init__(self, config: AppConfig, validator: HierarchyValidator):
        self.config = config
        self.validator = validator
        self.max_depth = config.max_depth

    def classify_destination(
        self,
        destination: str,
        categories: CategoryIndex,
        documents: DocumentIndex,
    ) -> Destination:
        """Resolve a destination slug to a category root or a parent document.

        When the slug names both, the configured DestinationPolicy decides.

        Raises:
            MoveError: If the slug names neither, or names both under the
                ERROR policy
        """
        category = categories.get(destination)
        document = documents.get(destination)

        if category and document:
            policy = self.config.destination_policy
            if policy == DestinationPolicy.ERROR:
                raise MoveError(
                    f"Destination slug \"{destination}\" is both a Category and a Doc."
                )
            if policy == DestinationPolicy.DOCUMENT_WINS:
                logger.warning(f"Destination slug \"{destination}\" is both a Category and a Doc. Treating as Doc.")
                return Destination(slug=destination, document=document)
            logger.warning(f"Destination slug \"{destination}\" is both a Category and a Doc. Treating as Category.")
            return Destination(slug=destination, category=category)

        if category:
            return Destination(slug=destination, category=category)
        if document:
            return Destination(slug=destination, document=document)

        raise MoveError(
            f"Destination slug \"{destination}\" is neither a valid Category nor a valid Doc slug."
        )

    def plan(
        self,
        categories: CategoryIndex,
        documents: DocumentIndex,
        source_slugs: Iterable[str],
        destination: Optional[str],
        child_mode: ChildMode = ChildMode.MOVE_ALL,
        resolve_child_mode: Optional[ChildModeResolver] = None,
    ) -> MovePlan:
        """Plan moving each source subtree under one destination.

        Args:
            categories: Loaded category index
            documents: Loaded document index (left untouched)
            source_slugs: Documents to move
            destination: Category slug or parent document slug
            child_mode: How descendants are handled (ASK defers to the resolver)
            resolve_child_mode: Per-source decision when child_mode is ASK

        Returns:
            MovePlan with file operations (roots before descendants) and
            promotions

        Raises:
            MoveError: On any failure; nothing has been written
            PathCollisionError: If a target path holds an unrelated file
        """
        sources = self._normalize_sources(source_slugs)
        if not sources:
            raise MoveError("No source slugs provided.")
        destination = (destination or '').strip()
        if not destination:
            raise MoveError("No destination slug provided.")

        documents.require_unique_slugs()
        target = self.classify_destination(destination, categories, documents)

        for slug in sources:
            if slug not in documents:
                raise MoveError(f"Source doc \"{slug}\" not found locally.")

        target_category = self._target_category(target, categories)
        target_parent = target.document.slug if target.document else None

        working = documents.snapshot()
        plan = MovePlan(sources=sources, destination=target)
        operations: Dict[str, FileOperation] = {}
        promotions: Dict[str, Promotion] = {}

        for slug in sources:
            # An explicit source is moved, never promoted by an earlier source
            if promotions.pop(slug, None) is not None:
                working.relocate(slug, order=documents.by_slug[slug].order)

            ancestry = Ancestry(working.by_slug, self.max_depth)
            descendants = self._descendants(ancestry, slug)

            if target_parent == slug or target_parent in descendants:
                raise MoveError(
                    f"Cannot move \"{slug}\" under itself or one of its descendants (\"{target_parent}\")."
                )

            mode = self._resolve_mode(slug, descendants, child_mode, resolve_child_mode)
            plan.child_modes[slug] = mode

            if mode == ChildMode.PROMOTE_ALL:
                for child in descendants:
                    original = working.by_slug[child]
                    promotions[child] = Promotion(
                        slug=child,
                        from_parent=original.parent,
                        category=original.category,
                        path=documents.by_slug[child].path,
                    )
                    working.relocate(child, parent=None, order=ORDER_SENTINEL)
                moving = [slug]
            else:
                moving = [slug] + descendants

            self._check_hypothetical(slug, target_category, target_parent, working, mode)

            working.relocate(slug, category=target_category.slug, parent=target_parent)
            for child in moving[1:]:
                working.relocate(child, category=target_category.slug)

            for moved in moving:
                to_path = self._target_path(moved, target_category, working)
                operations.pop(moved, None)
                operations[moved] = FileOperation(
                    slug=moved,
                    from_path=documents.by_slug[moved].path,
                    to_path=to_path,
                    new_category=target_category.slug,
                    new_parent=working.by_slug[moved].parent,
                )
                working.relocate(moved, path=to_path)

        plan.file_operations = list(operations.values())
        plan.promotions = list(promotions.values())
        self._check_collisions(plan.file_operations)

        logger.info(
            f"Move plan: {len(plan.file_operations)} file operation(s), "
            f"{len(plan.promotions)} promotion(s) -> \"{target.slug}\""
        )
        return plan

    @staticmethod
    def _normalize_sources(source_slugs: Iterable[str]) -> List[str]:
        sources: List[str] = []
        for slug in source_slugs:
            slug = (slug or '').strip()
            if slug and slug not in sources:
                sources.append(slug)
        return sources

    @staticmethod
    def _target_category(target: Destination, categories: CategoryIndex) -> Category:
        if target.category is not None:
            return target.category
        category = categories.get(target.document.category)
        if category is None:
            raise MoveError(
                f"Category record for \"{target.document.category}\" not found. Check _category.yml."
            )
        return category

    @staticmethod
    def _descendants(ancestry: Ancestry, slug: str) -> List[str]:
        try:
            return ancestry.descendants_of(slug)
        except CycleError as e:
            raise MoveError(str(e)) from e

    @staticmethod
    def _resolve_mode(
        slug: str,
        descendants: List[str],
        child_mode: ChildMode,
        resolve_child_mode: Optional[ChildModeResolver],
    ) -> ChildMode:
        if not descendants:
            return ChildMode.MOVE_ALL
        if child_mode != ChildMode.ASK:
            return child_mode
        if resolve_child_mode is None:
            raise MoveError(f"Doc \"{slug}\" has children and no child handling mode was chosen.")
        mode = resolve_child_mode(slug, descendants)
        if mode == ChildMode.ASK:
            raise MoveError(f"Child handling for \"{slug}\" must resolve to move or promote.")
        return mode

    def _check_hypothetical(
        self,
        slug: str,
        target_category: Category,
        target_parent: Optional[str],
        working: DocumentIndex,
        mode: ChildMode,
    ) -> None:
        moved = copy.copy(working.by_slug[slug])
        moved.category = target_category.slug
        moved.parent = target_parent

        mismatch = self.validator.check_same_category_parent(moved, working.get(target_parent))
        if mismatch:
            raise MoveError(mismatch)

        depth = self.validator.hypothetical_depth(target_parent, working)
        if mode == ChildMode.MOVE_ALL:
            depth += Ancestry(working.by_slug, self.max_depth).subtree_height(slug)
        if depth > self.max_depth:
            raise MoveError(
                f"Max Depth Exceeded: Moving \"{slug}\" here would result in depth "
                f"{depth} > max {self.max_depth}."
            )

    def _target_path(self, slug: str, category: Category, working: DocumentIndex):
        try:
            chain = Ancestry(working.by_slug, self.max_depth).chain_of(slug)
        except CycleError as e:
            raise MoveError(f"Path Chain Error: {e}") from e
        return category.folder_path.joinpath(*chain, f"{slug}.md")

    @staticmethod
    def _check_collisions(operations: List[FileOperation]) -> None:
        claimed: Dict[str, str] = {}
        for op in operations:
            key = str(op.to_path.resolve()).lower()
            if key in claimed and claimed[key] != op.slug:
                raise PathCollisionError(op.slug, str(op.to_path))
            claimed[key] = op.slug

            if op.to_path.exists() and op.relocates:
                raise PathCollisionError(op.slug, str(op.to_path))
