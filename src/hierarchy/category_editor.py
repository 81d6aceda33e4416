"""Category creation and title edits.

A new category is created remotely first so its folder is named after the
slug the service assigns. A title edit only changes the marker file; the
remote category is updated by the next sync.
"""

import logging
import re
from typing import Any, Optional

import yaml

from .category_index import CategoryIndex
from .errors import ConfigError, FilesystemError, HierarchyError
from .models import CATEGORY_MARKER, AppConfig, Category

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Lowercase, hyphen-separated slug of a title."""
    slug = re.sub(r"[\s_]+", "-", title.lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


class CategoryEditor:
    """Creates category folders and rewrites _category.yml markers."""

    def __init__(self, config: AppConfig):
        self.dry_run = config.dry_run
        self.docs_root = config.docs_root
        self.category_type = config.remote.category_type

    def create(self, categories: CategoryIndex, title: str, api: Any) -> Category:
        """Create a category remotely, then its folder and marker locally.

        Args:
            categories: Loaded category index
            title: Display title of the new category
            api: Remote API wrapper (dry-run writes return no body)

        Returns:
            The new Category, named after the slug the service returned

        Raises:
            ConfigError: If the title is empty or yields no slug
            HierarchyError: If the slug already exists locally
            RemoteError: If the remote call fails (nothing is written locally)
            FilesystemError: If the folder or marker cannot be written
        """
        title = (title or '').strip()
        expected_slug = slugify(title)
        if not expected_slug:
            raise ConfigError("Title is required", 'title')
        if expected_slug in categories:
            raise HierarchyError(
                f"Category slug \"{expected_slug}\" (derived from title) already exists locally. "
                f"Please use a unique title."
            )

        logger.info(f"Calling API to create category: {title}")
        response = api.create_category(title, self.category_type) or {}
        slug = str(response.get('slug') or expected_slug)
        if slug != expected_slug and slug in categories:
            raise HierarchyError(
                f"Remote category was created as \"{slug}\", which already exists locally."
            )

        folder = self.docs_root / slug
        marker = folder / CATEGORY_MARKER
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would create category folder {folder} with {CATEGORY_MARKER} (slug: {slug})")
        else:
            if marker.exists():
                raise HierarchyError(f"{marker} already exists.")
            try:
                folder.mkdir(parents=True, exist_ok=True)
                marker.write_text(
                    yaml.safe_dump({'slug': slug, 'title': title}, default_flow_style=False,
                                   allow_unicode=True, sort_keys=False, width=120),
                    encoding='utf-8',
                )
            except OSError as e:
                raise FilesystemError(str(marker), 'write', str(e))
            logger.info(f"Created category {slug}: {marker}")

        category = Category(slug=slug, title=title, folder_path=folder, marker_path=marker,
                            type=self.category_type)
        categories.add(category)
        return category

    def rename(self, categories: CategoryIndex, slug: str, new_title: str) -> Optional[Category]:
        """Change a category's display title.

        Args:
            categories: Loaded category index
            slug: Category slug (case-insensitive)
            new_title: Replacement title

        Returns:
            The updated Category, or None when the title is unchanged

        Raises:
            HierarchyError: If the category does not exist
            ConfigError: If the new title is empty
            FilesystemError: If the marker cannot be read or written
        """
        category = categories.get(slug)
        if category is None:
            raise HierarchyError(f"Category with slug \"{slug}\" not found in index.")

        new_title = (new_title or '').strip()
        if not new_title:
            raise ConfigError("Title is required", 'title')
        if new_title == category.title:
            logger.info("No change.")
            return None

        marker = category.marker_path
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would update {marker} title -> \"{new_title}\"")
        else:
            try:
                data = yaml.safe_load(marker.read_text(encoding='utf-8')) or {}
            except (OSError, yaml.YAMLError) as e:
                raise FilesystemError(str(marker), 'read', str(e))
            data['title'] = new_title
            try:
                marker.write_text(
                    yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False, width=120),
                    encoding='utf-8',
                )
            except OSError as e:
                raise FilesystemError(str(marker), 'write', str(e))
            logger.info(f"Updated category {category.slug}: \"{category.title}\" -> \"{new_title}\"")

        category.title = new_title
        return category
