"""Data models for hierarchy management.

This module defines all data models used by the hierarchy package.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.remote_client.auth import RemoteConfig

# Order assigned to documents without an explicit order, and to promoted docs
ORDER_SENTINEL = 9999

# Maximum nesting depth (root = 1)
MAX_DOC_DEPTH = 3

CATEGORY_MARKER = '_category.yml'
MANIFEST_FILENAME = '.readme-structure.json'

Order = Union[int, float]


class ChildMode(str, Enum):
    """How a moved document's descendants are handled."""
    MOVE_ALL = 'move'
    PROMOTE_ALL = 'promote'
    ASK = 'ask'


class DestinationPolicy(str, Enum):
    """Tie-break when a destination slug names both a category and a document."""
    CATEGORY_WINS = 'category'
    DOCUMENT_WINS = 'document'
    ERROR = 'error'


@dataclass(frozen=True)
class AppConfig:
    """Process-wide configuration, read once at startup.

    Threaded explicitly into every component constructor.

    Attributes:
        docs_root: Absolute path of the document root
        manifest_path: Absolute path of the structure manifest
        max_depth: Maximum document nesting depth
        dry_run: Log every mutation instead of performing it
        no_commit: Skip the git commit after local mutations
        destination_policy: Category/document slug collision tie-break
        target_branch: Branch the sync diff is computed against
        remote: Remote service settings
    """
    docs_root: Path
    manifest_path: Path
    max_depth: int = MAX_DOC_DEPTH
    dry_run: bool = False
    no_commit: bool = False
    destination_policy: DestinationPolicy = DestinationPolicy.CATEGORY_WINS
    target_branch: str = 'main'
    remote: RemoteConfig = field(default_factory=RemoteConfig)


@dataclass
class Category:
    """A category folder identified by its _category.yml marker.

    Attributes:
        slug: Category slug as written in the marker
        title: Display title
        folder_path: Absolute folder holding the marker
        marker_path: Absolute path of the marker file
        type: Remote category type (defaults to "guide")
    """
    slug: str
    title: str
    folder_path: Path
    marker_path: Path
    type: str = 'guide'

    @property
    def key(self) -> str:
        """Case-insensitive identity."""
        return self.slug.lower()


@dataclass
class Document:
    """Structural metadata of one content file.

    Attributes:
        slug: Globally unique identifier
        title: Display title
        category: Category slug the document belongs to
        parent: Slug of the parent document (None for category roots)
        order: Sort position within its level (None if unset)
        hidden: Visibility flag (None if unset)
        path: Absolute path of the content file
    """
    slug: str
    title: str
    category: str
    parent: Optional[str]
    order: Optional[Order]
    hidden: Optional[bool]
    path: Path

    @property
    def sort_order(self) -> Order:
        return self.order if self.order is not None else ORDER_SENTINEL


@dataclass
class ManifestNode:
    """One document in the manifest tree."""
    slug: str
    title: str
    order: Order
    parent: Optional[str]
    children: List['ManifestNode'] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'title': self.title,
            'order': self.order,
            'parent': self.parent,
            'children': [child.to_dict() for child in self.children],
        }


@dataclass
class ManifestCategory:
    slug: str
    title: str
    docs: List[ManifestNode] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'title': self.title,
            'docs': [node.to_dict() for node in self.docs],
        }


@dataclass
class Manifest:
    """Derived snapshot of the whole hierarchy."""
    categories: List[ManifestCategory] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'categories': [c.to_dict() for c in self.categories]}


@dataclass
class Destination:
    """A resolved move destination: either a category root or a parent document."""
    slug: str
    category: Optional[Category] = None
    document: Optional[Document] = None

    @property
    def is_category(self) -> bool:
        return self.category is not None


@dataclass
class FileOperation:
    """A planned relocation (or in-place rewrite) of one document.

    Attributes:
        slug: Document slug
        from_path: Current file path
        to_path: Computed target path
        new_category: Category written to front matter
        new_parent: Parent written to front matter
    """
    slug: str
    from_path: Path
    to_path: Path
    new_category: str
    new_parent: Optional[str]

    @property
    def relocates(self) -> bool:
        return self.from_path.resolve() != self.to_path.resolve()


@dataclass
class Promotion:
    """A descendant left in place but detached from its parent."""
    slug: str
    from_parent: Optional[str]
    category: str
    path: Path


@dataclass
class MovePlan:
    """Fully validated bulk move, ready to execute.

    Attributes:
        sources: Source slugs in the order given
        destination: Resolved destination
        child_modes: Resolved child handling per source
        file_operations: Moves, roots before their descendants
        promotions: Descendants promoted to category roots
    """
    sources: List[str]
    destination: Destination
    child_modes: Dict[str, ChildMode] = field(default_factory=dict)
    file_operations: List[FileOperation] = field(default_factory=list)
    promotions: List[Promotion] = field(default_factory=list)


@dataclass
class MoveResult:
    """Outcome of executing a MovePlan."""
    moved: List[str] = field(default_factory=list)
    promoted: List[str] = field(default_factory=list)
    changed_files: List[Path] = field(default_factory=list)
