"""Unit tests for sync.remote_state module."""

import json
import logging
from unittest.mock import MagicMock, Mock

import pytest

from src.remote_client.api_wrapper import PAGE_SIZE, APIWrapper
from src.remote_client.auth import RemoteConfig
from src.remote_client.errors import APIError, InvalidCredentialsError
from src.sync.remote_state import MAX_REMOTE_DEPTH, RemoteStateFetcher


@pytest.fixture
def remote_config():
    return RemoteConfig(api_key='test-key', api_call_delay=0, max_concurrent_api_calls=2)


def _api(categories, docs_by_category=None):
    """Mock API serving one page of categories and per-category doc trees."""
    api = Mock()
    api.dry_run = False
    pages = [categories] if categories else []

    def list_categories(page=1, per_page=PAGE_SIZE):
        return pages[page - 1] if page <= len(pages) else []

    api.list_categories.side_effect = list_categories
    api.list_category_docs.side_effect = lambda slug: (docs_by_category or {}).get(slug, [])
    return api


class TestFetchCategories:
    """Test cases for category listing."""

    def test_only_configured_type_kept(self, remote_config):
        """Reference categories are ignored when mirroring guides."""
        api = _api([
            {'slug': 'guides', 'title': 'Guides', 'type': 'guide', '_id': 'c1'},
            {'slug': 'api-ref', 'title': 'API', 'type': 'reference', '_id': 'c2'},
        ])

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert set(state.categories) == {'guides'}
        assert state.categories['guides'].id == 'c1'
        api.list_category_docs.assert_called_once_with('guides')

    def test_slugs_lowercased(self, remote_config):
        api = _api([{'slug': 'Guides', 'title': 'Guides', 'type': 'guide', 'id': 'x'}])

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert 'guides' in state.categories
        assert state.categories['guides'].id == 'x'

    def test_paginates_until_short_page(self, remote_config):
        """A full page triggers a request for the next one."""
        first = [{'slug': f'cat-{i}', 'title': str(i), 'type': 'guide'} for i in range(PAGE_SIZE)]
        second = [{'slug': 'last', 'title': 'Last', 'type': 'guide'}]
        api = Mock()
        api.list_categories.side_effect = [first, second]
        api.list_category_docs.return_value = []

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert len(state.categories) == PAGE_SIZE + 1
        assert api.list_categories.call_count == 2
        api.list_categories.assert_called_with(page=2, per_page=PAGE_SIZE)

    def test_empty_remote(self, remote_config):
        state = RemoteStateFetcher(_api([]), remote_config).fetch()

        assert state.categories == {}
        assert state.docs == {}


class TestFetchDocs:
    """Test cases for flattening remote document trees."""

    def test_nested_tree_flattened(self, remote_config):
        """Children carry their parent's slug and the category slug."""
        api = _api(
            [{'slug': 'guides', 'title': 'Guides', 'type': 'guide'}],
            {'guides': [
                {
                    'slug': 'intro', 'title': 'Intro', 'order': 1, 'hidden': False, '_id': 'd1',
                    'children': [
                        {'slug': 'setup', 'title': 'Setup', 'order': 2, 'hidden': True, 'children': []},
                    ],
                },
                {'slug': 'faq', 'title': 'FAQ', 'order': 3},
            ]},
        )

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert set(state.docs) == {'intro', 'setup', 'faq'}
        assert state.docs['intro'].parent_slug is None
        assert state.docs['intro'].id == 'd1'
        assert state.docs['setup'].parent_slug == 'intro'
        assert state.docs['setup'].category_slug == 'guides'
        assert state.docs['setup'].hidden is True
        assert state.docs['faq'].hidden is False
        assert state.docs['faq'].order == 3

    def test_hidden_coerced_to_bool(self, remote_config):
        api = _api(
            [{'slug': 'guides', 'title': 'Guides', 'type': 'guide'}],
            {'guides': [{'slug': 'a', 'title': 'A', 'hidden': None}, {'slug': 'b', 'title': 'B', 'hidden': 1}]},
        )

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert state.docs['a'].hidden is False
        assert state.docs['b'].hidden is True

    def test_failed_category_docs_skipped(self, remote_config, caplog):
        """A category whose docs cannot be read is kept without documents."""
        api = _api([
            {'slug': 'guides', 'title': 'Guides', 'type': 'guide'},
            {'slug': 'broken', 'title': 'Broken', 'type': 'guide'},
        ])

        def list_docs(slug):
            if slug == 'broken':
                raise APIError('get', f'/categories/{slug}/docs', 500, 'boom')
            return [{'slug': 'intro', 'title': 'Intro'}]

        api.list_category_docs.side_effect = list_docs

        with caplog.at_level(logging.WARNING, logger='src'):
            state = RemoteStateFetcher(api, remote_config).fetch()

        assert set(state.categories) == {'guides', 'broken'}
        assert set(state.docs) == {'intro'}
        assert "Failed to fetch docs for category broken" in caplog.text

    def test_non_json_category_docs_skipped(self, remote_config, caplog):
        """An HTML answer for one category does not abort the fetch."""
        def request(method, url, **kwargs):
            response = MagicMock()
            response.status_code = 200
            if url.endswith('/categories/bad/docs'):
                response.text = '<html>gateway</html>'
                response.json.side_effect = json.JSONDecodeError('Expecting value', response.text, 0)
            else:
                if url.endswith('/categories'):
                    body = [
                        {'slug': 'guides', 'title': 'Guides', 'type': 'guide'},
                        {'slug': 'bad', 'title': 'Bad', 'type': 'guide'},
                    ]
                else:
                    body = [{'slug': 'intro', 'title': 'Intro'}]
                response.text = json.dumps(body)
                response.json.return_value = body
            response.content = response.text.encode()
            return response

        session = MagicMock()
        session.request.side_effect = request
        api = APIWrapper(remote_config, session=session)

        with caplog.at_level(logging.WARNING, logger='src'):
            state = RemoteStateFetcher(api, remote_config).fetch()

        assert set(state.categories) == {'guides', 'bad'}
        assert set(state.docs) == {'intro'}
        assert "Failed to fetch docs for category bad" in caplog.text

    def test_invalid_credentials_propagate(self, remote_config):
        api = _api([{'slug': 'guides', 'title': 'Guides', 'type': 'guide'}])
        api.list_category_docs.side_effect = InvalidCredentialsError('https://docs.example.test')

        with pytest.raises(InvalidCredentialsError):
            RemoteStateFetcher(api, remote_config).fetch()

    def test_deep_tree_truncated(self, remote_config):
        """Levels past the depth cap are dropped."""
        node = {'slug': f'level-{MAX_REMOTE_DEPTH + 1}', 'title': 'Deep'}
        for level in range(MAX_REMOTE_DEPTH, 0, -1):
            node = {'slug': f'level-{level}', 'title': 'Deep', 'children': [node]}
        api = _api([{'slug': 'guides', 'title': 'Guides', 'type': 'guide'}], {'guides': [node]})

        state = RemoteStateFetcher(api, remote_config).fetch()

        assert f'level-{MAX_REMOTE_DEPTH}' in state.docs
        assert f'level-{MAX_REMOTE_DEPTH + 1}' not in state.docs
