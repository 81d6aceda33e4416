"""YAML frontmatter parsing and generation for markdown files.

This module handles reading and writing YAML frontmatter in content files.
Frontmatter carries the structural metadata that places a document in the
hierarchy:

- slug, title, category, parent, order, hidden, excerpt

Any other keys pass through untouched, except the legacy export timestamps
(createdAt, updatedAt) which are dropped whenever a file is rewritten.
"""

import re
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from .errors import FilesystemError, FrontmatterError

STRUCTURAL_KEYS = ('slug', 'title', 'category', 'parent', 'order', 'hidden')


class FrontmatterHandler:
    """Handles YAML frontmatter operations for markdown files.

    Frontmatter format:
        ---
        slug: getting-started
        title: Getting Started
        category: guides
        parent: null
        order: 1
        ---
        Body content...

    Files without frontmatter parse to an empty dict and the full content.
    """

    # Regex pattern to match YAML frontmatter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'^---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|$)',
        re.DOTALL
    )

    # Keys removed during normalization
    LEGACY_KEYS = ('createdAt', 'updatedAt')

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj: Any, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}."
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def extract_frontmatter_and_content(cls, content: str, file_path: str = "<unknown>") -> Tuple[Dict[str, Any], str]:
        """Extract frontmatter dict and body separately.

        Args:
            content: Full markdown content including frontmatter
            file_path: Path used in error messages

        Returns:
            Tuple of (frontmatter_dict, markdown_content).
            Returns ({}, content) if no frontmatter found.

        Raises:
            FrontmatterError: If frontmatter is malformed or has invalid YAML
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        frontmatter_str = match.group(1) or ''
        markdown_content = content[match.end():]

        try:
            frontmatter = yaml.safe_load(frontmatter_str)
        except yaml.YAMLError as e:
            raise FrontmatterError(
                file_path,
                f"Invalid YAML syntax: {str(e)}"
            )

        if frontmatter is None:
            return {}, markdown_content

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except FrontmatterError as e:
            raise FrontmatterError(file_path, e.message)

        return frontmatter, markdown_content

    @classmethod
    def normalize(cls, frontmatter: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of frontmatter without the legacy timestamp keys."""
        return {k: v for k, v in frontmatter.items() if k not in cls.LEGACY_KEYS}

    @classmethod
    def generate(cls, frontmatter: Dict[str, Any], content: str) -> str:
        """Generate markdown content with YAML frontmatter.

        Key order is preserved. Legacy timestamp keys are dropped.

        Args:
            frontmatter: Frontmatter fields
            content: Markdown body (without frontmatter)

        Returns:
            Full file content
        """
        yaml_str = yaml.safe_dump(
            cls.normalize(frontmatter),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
        return f"---\n{yaml_str}---\n{content}"

    @classmethod
    def read(cls, file_path: Union[str, Path]) -> Tuple[Dict[str, Any], str]:
        """Read a file and split it into (frontmatter, body).

        Raises:
            FilesystemError: If the file cannot be read
            FrontmatterError: If the frontmatter is malformed
        """
        path = Path(file_path)
        try:
            content = path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise FilesystemError(str(path), 'read', 'File not found')
        except PermissionError:
            raise FilesystemError(str(path), 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(str(path), 'read', str(e))

        return cls.extract_frontmatter_and_content(content, str(path))

    @classmethod
    def write(cls, file_path: Union[str, Path], frontmatter: Dict[str, Any], content: str) -> None:
        """Write frontmatter and body to a file, creating parent folders.

        Raises:
            FilesystemError: If the file cannot be written
        """
        path = Path(file_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(cls.generate(frontmatter, content), encoding='utf-8')
        except PermissionError:
            raise FilesystemError(str(path), 'write', 'Permission denied')
        except OSError as e:
            raise FilesystemError(str(path), 'write', str(e))

    @classmethod
    def structural_view(cls, frontmatter: Dict[str, Any]) -> Dict[str, str]:
        """Normalized structural keys for change comparison.

        Values are stringified, lowercased and stripped; missing and null
        values both compare as the empty string.
        """
        view = {}
        for key in STRUCTURAL_KEYS:
            value = frontmatter.get(key)
            view[key] = '' if value is None or value == '' else str(value).lower().strip()
        return view
