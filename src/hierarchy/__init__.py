"""Local document hierarchy: indexing, validation, manifest and bulk moves."""

from .category_editor import CategoryEditor
from .category_index import CategoryIndex
from .config_loader import ConfigLoader
from .document_index import DocumentIndex
from .errors import (
    HierarchyError,
    FilesystemError,
    ConfigError,
    FrontmatterError,
    ManifestError,
    CycleError,
    StructureValidationError,
    DuplicateSlugError,
    MoveError,
    PathCollisionError,
)
from .manifest_builder import ManifestBuilder, ManifestStore
from .models import (
    AppConfig,
    Category,
    ChildMode,
    DestinationPolicy,
    Document,
    Manifest,
    MovePlan,
    MoveResult,
)
from .move_executor import BulkMoveExecutor
from .move_planner import BulkMovePlanner
from .validator import HierarchyValidator

__all__ = [
    "AppConfig",
    "BulkMoveExecutor",
    "BulkMovePlanner",
    "Category",
    "CategoryEditor",
    "CategoryIndex",
    "ChildMode",
    "ConfigError",
    "ConfigLoader",
    "CycleError",
    "DestinationPolicy",
    "Document",
    "DocumentIndex",
    "DuplicateSlugError",
    "FilesystemError",
    "FrontmatterError",
    "HierarchyError",
    "HierarchyValidator",
    "Manifest",
    "ManifestBuilder",
    "ManifestError",
    "ManifestStore",
    "MoveError",
    "MovePlan",
    "MoveResult",
    "PathCollisionError",
    "StructureValidationError",
]
