"""Parent-chain walking over a set of documents.

All walks are bounded by the maximum nesting depth so a cycle in the
``parent`` links surfaces as a reported error instead of an endless loop.
"""

from typing import Dict, List, Optional, Set

from .errors import CycleError
from .models import MAX_DOC_DEPTH, Document


class Ancestry:
    """Read-only view of the parent links of a slug -> Document map.

    Example:
        >>> ancestry = Ancestry(documents.by_slug)
        >>> ancestry.depth_of("install")
        2
        >>> ancestry.chain_of("install")
        ['getting-started']
    """

    def __init__(self, documents: Dict[str, Document], max_depth: int = MAX_DOC_DEPTH):
        self._documents = documents
        self.max_depth = max_depth

    def parent_of(self, slug: Optional[str]) -> Optional[str]:
        document = self._documents.get(slug) if slug else None
        if document is None or not document.parent:
            return None
        return document.parent

    def depth_of(self, slug: str) -> int:
        """Depth of a document, root = 1.

        The walk stops one level past the maximum, so any value above
        ``max_depth`` means "too deep" (or cyclic) rather than an exact depth.
        """
        depth = 1
        current = slug
        while True:
            parent = self.parent_of(current)
            if not parent:
                break
            depth += 1
            current = parent
            if depth > self.max_depth + 1:
                break
        return depth

    def chain_of(self, slug: str) -> List[str]:
        """Ancestor slugs of a document, root first.

        A parent slug that has no document is still included as the last
        link it can reach, so the chain mirrors the declared front matter.

        Raises:
            CycleError: If the chain is longer than the maximum depth
        """
        chain: List[str] = []
        cursor = self.parent_of(slug)
        while cursor:
            chain.insert(0, cursor)
            if len(chain) > self.max_depth:
                raise CycleError(slug)
            cursor = self.parent_of(cursor)
        return chain

    def find_cycle(self, slug: str) -> Optional[str]:
        """First slug revisited while walking up from ``slug``, if any."""
        seen: Set[str] = {slug}
        cursor = self.parent_of(slug)
        while cursor:
            if cursor in seen:
                return cursor
            seen.add(cursor)
            cursor = self.parent_of(cursor)
        return None

    def descendants_of(self, slug: str) -> List[str]:
        """Every document whose parent chain reaches ``slug``, parents first.

        Raises:
            CycleError: If the walk revisits a slug
        """
        children: Dict[str, List[str]] = {}
        for document in self._documents.values():
            if document.parent:
                children.setdefault(document.parent, []).append(document.slug)

        result: List[str] = []
        visited: Set[str] = {slug}

        def collect(parent: str, level: int) -> None:
            if level > self.max_depth + 1:
                raise CycleError(slug)
            for child in sorted(children.get(parent, [])):
                if child in visited:
                    raise CycleError(slug, repeated=child)
                visited.add(child)
                result.append(child)
                collect(child, level + 1)

        collect(slug, 1)
        return result

    def subtree_height(self, slug: str) -> int:
        """Number of levels below ``slug`` (0 for a leaf)."""
        height = 0
        for descendant in self.descendants_of(slug):
            levels = 0
            cursor: Optional[str] = descendant
            while cursor and cursor != slug:
                levels += 1
                cursor = self.parent_of(cursor)
            height = max(height, levels)
        return height
