"""Typed exception hierarchy for hierarchy management errors.

This module defines all custom exceptions used by the hierarchy package.
All exceptions inherit from HierarchyError base class for easy catching and
include descriptive messages with context to help with debugging.

Structural problems are never raised one at a time: the validator collects
every violation and raises a single StructureValidationError.
"""

from pathlib import Path
from typing import Dict, List, Optional

from src.remote_client.errors import SyncError


class HierarchyError(SyncError):
    """Base exception for all hierarchy errors."""
    pass


class FilesystemError(HierarchyError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(HierarchyError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class FrontmatterError(HierarchyError):
    """Raised when YAML frontmatter parsing or validation fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message


class ManifestError(HierarchyError):
    """Raised when the structure manifest is missing or cannot be parsed."""

    def __init__(self, manifest_path: str, reason: str):
        super().__init__(f"Manifest error at {manifest_path}: {reason}")
        self.manifest_path = manifest_path
        self.reason = reason


class CycleError(HierarchyError):
    """Raised when a parent chain walk exceeds the depth cap or revisits a slug."""

    def __init__(self, slug: str, repeated: Optional[str] = None):
        if repeated:
            message = f"Cycle detected while walking parents of '{slug}' (revisited '{repeated}')"
        else:
            message = f"Parent chain of '{slug}' is unusually long. Check for cycles."
        super().__init__(message)
        self.slug = slug
        self.repeated = repeated


class StructureValidationError(HierarchyError):
    """Raised once with every structural violation found in a validation pass."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        numbered = "\n".join(f"   {i}. {e}" for i, e in enumerate(self.errors, 1))
        super().__init__(
            f"Structure Validation Failed:\n\n{numbered}\n\n"
            f"FIX ALL ERRORS. For manifest mismatches, running 'manifest' is recommended."
        )


class DuplicateSlugError(StructureValidationError):
    """Raised when two or more documents declare the same slug."""

    def __init__(self, duplicates: Dict[str, List[Path]]):
        self.duplicates = duplicates
        errors = []
        for slug, paths in duplicates.items():
            listed = ", ".join(str(p) for p in paths)
            errors.append(f"Duplicate Slug: \"{slug}\" is declared by {len(paths)} files: {listed}")
        super().__init__(errors)


class MoveError(HierarchyError):
    """Raised when a bulk move cannot be planned. Nothing has been written."""
    pass


class PathCollisionError(MoveError):
    """Raised when a move target is already occupied by an unrelated file."""

    def __init__(self, slug: str, target_path: str):
        super().__init__(
            f"Destination already has a file: {target_path} (slug conflict for '{slug}')"
        )
        self.slug = slug
        self.target_path = target_path
