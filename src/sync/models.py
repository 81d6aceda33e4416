"""Data models for remote synchronization.

Local and remote state share one shape so the planner can compare them
field by field. All slugs are lowercased on the way in.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

Order = Union[int, float]

# Absolute paths changed since the target branch; None means "unknown"
ChangedPaths = Optional[Set[Path]]


@dataclass
class LocalCategory:
    slug: str
    title: str
    type: str = 'guide'


@dataclass
class RemoteCategory:
    slug: str
    title: str
    type: str = 'guide'
    id: Optional[str] = None


@dataclass
class LocalDoc:
    """One document as read from disk.

    Attributes:
        slug: Lowercased slug
        title: Title ("Untitled" when missing)
        category_slug: Lowercased category slug
        parent_slug: Lowercased parent slug, or None
        order: Order from front matter, or None
        hidden: Visibility (missing counts as False)
        excerpt: Short description ("" when missing)
        content: Trimmed Markdown body
        path: Absolute file path
    """
    slug: str
    title: str
    category_slug: Optional[str]
    parent_slug: Optional[str]
    order: Optional[Order]
    hidden: bool
    excerpt: str = ''
    content: str = ''
    path: Optional[Path] = None


@dataclass
class RemoteDoc:
    slug: str
    title: str
    category_slug: Optional[str]
    parent_slug: Optional[str]
    order: Optional[Order]
    hidden: bool
    excerpt: str = ''
    id: Optional[str] = None


@dataclass
class LocalState:
    categories: Dict[str, LocalCategory] = field(default_factory=dict)
    docs: Dict[str, LocalDoc] = field(default_factory=dict)


@dataclass
class RemoteState:
    categories: Dict[str, RemoteCategory] = field(default_factory=dict)
    docs: Dict[str, RemoteDoc] = field(default_factory=dict)


@dataclass
class CategoryChange:
    """A planned category write.

    Creations and updates carry title and type; deletions carry the remote id.
    """
    slug: str
    title: Optional[str] = None
    type: Optional[str] = None
    remote_id: Optional[str] = None


@dataclass
class DocChange:
    """A planned document write. Deletions have no local doc."""
    slug: str
    doc: Optional[LocalDoc] = None


@dataclass
class SyncPlan:
    """Six buckets of remote operations, executed in a fixed order."""
    category_creations: List[CategoryChange] = field(default_factory=list)
    category_updates: List[CategoryChange] = field(default_factory=list)
    category_deletions: List[CategoryChange] = field(default_factory=list)
    doc_creations: List[DocChange] = field(default_factory=list)
    doc_updates: List[DocChange] = field(default_factory=list)
    doc_deletions: List[DocChange] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.category_creations) + len(self.category_updates) + len(self.category_deletions)
            + len(self.doc_creations) + len(self.doc_updates) + len(self.doc_deletions)
        )

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass
class SyncSummary:
    """Outcome of executing a SyncPlan.

    Attributes:
        succeeded: Operations that completed
        already_deleted: Deletions the remote reported as already gone
        failures: (operation, slug, error message) per failed operation
        dry_run: Whether writes were suppressed
    """
    succeeded: int = 0
    already_deleted: int = 0
    failures: List[Tuple[str, str, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> int:
        return len(self.failures)
