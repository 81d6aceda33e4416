"""Unit tests for hierarchy.category_editor module."""

from unittest.mock import Mock

import pytest
import yaml

from src.hierarchy.category_editor import CategoryEditor, slugify
from src.hierarchy.category_index import CategoryIndex
from src.hierarchy.errors import ConfigError, HierarchyError
from src.remote_client.errors import APIError
from tests.fixtures.docs_trees import make_config


def _api(response=None):
    api = Mock()
    api.create_category.return_value = response
    return api


class TestSlugify:
    """Test cases for deriving a slug from a title."""

    @pytest.mark.parametrize('title,slug', [
        ('API Reference', 'api-reference'),
        ('Getting  Started!', 'getting-started'),
        ('snake_case title', 'snake-case-title'),
        (' -- Edge -- ', 'edge'),
        ('???', ''),
    ])
    def test_slugify(self, title, slug):
        assert slugify(title) == slug


class TestCreate:
    """Test cases for creating a category."""

    def test_folder_named_after_remote_slug(self, config):
        """The marker uses the slug the service returned."""
        categories = CategoryIndex.load(config.docs_root)
        api = _api({'slug': 'api-reference-1', 'title': 'API Reference'})

        created = CategoryEditor(config).create(categories, 'API Reference', api)

        api.create_category.assert_called_once_with('API Reference', 'guide')
        marker = config.docs_root / 'api-reference-1' / '_category.yml'
        assert yaml.safe_load(marker.read_text(encoding='utf-8')) == {'slug': 'api-reference-1', 'title': 'API Reference'}
        assert created.slug == 'api-reference-1'
        assert categories.get('api-reference-1') is created
        assert CategoryIndex.load(config.docs_root).get('api-reference-1').title == 'API Reference'

    def test_existing_slug_rejected_before_api_call(self, config):
        api = _api()

        with pytest.raises(HierarchyError, match="already exists locally"):
            CategoryEditor(config).create(CategoryIndex.load(config.docs_root), 'GUIDES', api)

        api.create_category.assert_not_called()

    def test_remote_slug_clash_rejected(self, config):
        """A server slug matching a local category is not written over."""
        api = _api({'slug': 'guides'})

        with pytest.raises(HierarchyError, match="already exists locally"):
            CategoryEditor(config).create(CategoryIndex.load(config.docs_root), 'Guide Book', api)

        assert not (config.docs_root / 'guide-book').exists()

    def test_blank_title(self, config):
        api = _api()

        with pytest.raises(ConfigError):
            CategoryEditor(config).create(CategoryIndex.load(config.docs_root), '  ', api)

        api.create_category.assert_not_called()

    def test_remote_failure_writes_nothing(self, config):
        api = _api()
        api.create_category.side_effect = APIError('post', '/categories', 500, 'boom')

        with pytest.raises(APIError):
            CategoryEditor(config).create(CategoryIndex.load(config.docs_root), 'Tutorials', api)

        assert not (config.docs_root / 'tutorials').exists()

    def test_dry_run_uses_derived_slug(self, docs_root):
        """In dry run the API returns no body and nothing is written."""
        config = make_config(docs_root, dry_run=True)

        created = CategoryEditor(config).create(CategoryIndex.load(docs_root), 'Tutorials', _api(None))

        assert created.slug == 'tutorials'
        assert not (docs_root / 'tutorials').exists()


class TestRename:
    """Test cases for editing a category title."""

    def test_title_rewritten(self, config):
        """The marker keeps its slug and gets the new title."""
        categories = CategoryIndex.load(config.docs_root)

        updated = CategoryEditor(config).rename(categories, 'GUIDES', 'User Guides')

        marker = yaml.safe_load((config.docs_root / 'guides' / '_category.yml').read_text(encoding='utf-8'))
        assert marker == {'slug': 'guides', 'title': 'User Guides'}
        assert updated.title == 'User Guides'

    def test_unchanged_title_returns_none(self, config):
        """Renaming to the same title is a no-op."""
        categories = CategoryIndex.load(config.docs_root)

        assert CategoryEditor(config).rename(categories, 'guides', 'Guides') is None

    def test_unknown_category(self, config):
        """An unknown slug is rejected."""
        with pytest.raises(HierarchyError, match="not found"):
            CategoryEditor(config).rename(CategoryIndex.load(config.docs_root), 'nope', 'X')

    def test_empty_title(self, config):
        """A blank title is rejected."""
        with pytest.raises(ConfigError):
            CategoryEditor(config).rename(CategoryIndex.load(config.docs_root), 'guides', '   ')

    def test_dry_run_leaves_marker(self, docs_root):
        """Dry run does not touch the marker file."""
        marker = docs_root / 'guides' / '_category.yml'
        before = marker.read_text(encoding='utf-8')
        config = make_config(docs_root, dry_run=True)

        updated = CategoryEditor(config).rename(CategoryIndex.load(docs_root), 'guides', 'Renamed')

        assert marker.read_text(encoding='utf-8') == before
        assert updated.title == 'Renamed'
