"""Unit tests for remote_client.api_wrapper module."""

import json
from unittest.mock import MagicMock, patch

import pytest
from requests.exceptions import ChunkedEncodingError, ConnectionError, Timeout, TooManyRedirects

from src.remote_client.api_wrapper import PAGE_SIZE, APIWrapper
from src.remote_client.auth import RemoteConfig
from src.remote_client.errors import (
    APIAccessError,
    APIError,
    APIUnreachableError,
    InvalidCredentialsError,
    NotFoundError,
)

BASE_URL = 'https://docs.example.test/api/v1'


def _response(status_code=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if body is not None:
        response.text = json.dumps(body)
        response.content = response.text.encode()
        response.json.return_value = body
    else:
        response.text = text or ''
        response.content = response.text.encode()
    return response


@pytest.fixture
def remote_config():
    return RemoteConfig(base_url=BASE_URL, api_key='test-key', api_call_delay=0)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(remote_config, session):
    return APIWrapper(remote_config, session=session)


class TestReads:
    """Test cases for read endpoints."""

    def test_list_categories_sends_paging(self, api, session):
        session.request.return_value = _response(body=[{'slug': 'guides'}])

        result = api.list_categories(page=2)

        assert result == [{'slug': 'guides'}]
        session.request.assert_called_once_with(
            'get',
            f'{BASE_URL}/categories',
            params={'page': 2, 'perPage': PAGE_SIZE},
            json=None,
            timeout=30,
        )

    def test_list_category_docs(self, api, session):
        session.request.return_value = _response(body=[{'slug': 'intro', 'children': []}])

        result = api.list_category_docs('guides')

        assert result == [{'slug': 'intro', 'children': []}]
        assert session.request.call_args[0][1] == f'{BASE_URL}/categories/guides/docs'

    def test_empty_body_gives_empty_list(self, api, session):
        session.request.return_value = _response(status_code=200)

        assert api.list_categories() == []


class TestWrites:
    """Test cases for write endpoints."""

    def test_create_doc_sends_json(self, api, session):
        session.request.return_value = _response(status_code=201, body={'slug': 'intro'})
        payload = {'title': 'Intro', 'slug': 'intro', 'categorySlug': 'guides'}

        api.create_doc(payload)

        args, kwargs = session.request.call_args
        assert args == ('post', f'{BASE_URL}/docs')
        assert kwargs['json'] == payload

    def test_update_category(self, api, session):
        session.request.return_value = _response(body={'slug': 'guides'})

        api.update_category('guides', 'Guides', 'guide')

        args, kwargs = session.request.call_args
        assert args == ('put', f'{BASE_URL}/categories/guides')
        assert kwargs['json'] == {'title': 'Guides', 'type': 'guide'}

    def test_delete_returns_true(self, api, session):
        session.request.return_value = _response(status_code=204)

        assert api.delete_doc('intro') is True
        args, kwargs = session.request.call_args
        assert args == ('delete', f'{BASE_URL}/docs/intro')
        assert kwargs['json'] is None

    def test_delete_already_gone_returns_false(self, api, session):
        session.request.return_value = _response(status_code=404, text='not found')

        assert api.delete_category('gone') is False

    def test_dry_run_skips_writes(self, remote_config, session):
        api = APIWrapper(remote_config, dry_run=True, session=session)

        assert api.create_doc({'slug': 'intro'}) is None
        assert api.delete_doc('intro') is True
        session.request.assert_not_called()

    def test_dry_run_still_reads(self, remote_config, session):
        session.request.return_value = _response(body=[])
        api = APIWrapper(remote_config, dry_run=True, session=session)

        api.list_categories()

        session.request.assert_called_once()


class TestErrorTranslation:
    """Test cases for mapping HTTP failures to typed errors."""

    @pytest.mark.parametrize('status', [401, 403])
    def test_auth_statuses(self, api, session, status):
        session.request.return_value = _response(status_code=status)

        with pytest.raises(InvalidCredentialsError) as exc_info:
            api.list_categories()

        assert exc_info.value.reason == f"HTTP {status}"

    def test_not_found(self, api, session):
        session.request.return_value = _response(status_code=404, text='missing')

        with pytest.raises(NotFoundError) as exc_info:
            api.update_doc('ghost', {'title': 'Ghost'})

        assert exc_info.value.status_code == 404
        assert exc_info.value.method == 'PUT'

    def test_server_error(self, api, session):
        session.request.return_value = _response(status_code=500, text='boom')

        with pytest.raises(APIError) as exc_info:
            api.create_category('New', 'guide')

        assert exc_info.value.status_code == 500
        assert 'boom' in str(exc_info.value)

    @pytest.mark.parametrize('exception', [Timeout(), ConnectionError()])
    def test_network_failures(self, api, session, exception):
        session.request.side_effect = exception

        with pytest.raises(APIUnreachableError) as exc_info:
            api.list_categories()

        assert BASE_URL in str(exc_info.value)

    @pytest.mark.parametrize('exception', [ChunkedEncodingError('connection broken'), TooManyRedirects('redirect loop')])
    def test_other_request_failures(self, api, session, exception):
        """Any other requests failure surfaces as an APIError for the endpoint."""
        session.request.side_effect = exception

        with pytest.raises(APIError) as exc_info:
            api.update_doc('intro', {'title': 'Intro'})

        assert exc_info.value.endpoint == '/docs/intro'
        assert exc_info.value.method == 'PUT'
        assert exc_info.value.__cause__ is exception

    def test_non_json_body(self, api, session):
        """A 2xx answer that is not JSON is reported, not passed through."""
        response = _response(text='<html>maintenance</html>')
        response.json.side_effect = json.JSONDecodeError('Expecting value', response.text, 0)
        session.request.return_value = response

        with pytest.raises(APIError) as exc_info:
            api.list_category_docs('guides')

        assert exc_info.value.status_code == 200
        assert exc_info.value.endpoint == '/categories/guides/docs'
        assert 'Invalid JSON response' in str(exc_info.value)

    @patch('src.remote_client.retry_logic.time.sleep')
    def test_rate_limit_retried(self, mock_sleep, api, session):
        session.request.side_effect = [_response(status_code=429), _response(body=[{'slug': 'a'}])]

        assert api.list_categories() == [{'slug': 'a'}]
        assert session.request.call_count == 2
        mock_sleep.assert_called_once_with(1)

    @patch('src.remote_client.retry_logic.time.sleep')
    def test_rate_limit_exhausted(self, mock_sleep, api, session):
        session.request.return_value = _response(status_code=429)

        with pytest.raises(APIAccessError):
            api.list_categories()

        assert session.request.call_count == 4

    def test_error_body_sanitized(self, api, session):
        """Keys echoed back by the server never reach the exception text."""
        session.request.return_value = _response(
            status_code=400, text='Bad request for Bearer rdme_secretvalue123 api_key=hunter2'
        )

        with pytest.raises(APIError) as exc_info:
            api.create_doc({'slug': 'x'})

        message = str(exc_info.value)
        assert 'rdme_secretvalue123' not in message
        assert 'hunter2' not in message
        assert 'REDACTED' in message


class TestSession:
    """Test cases for lazy session creation."""

    def test_missing_key_raises_before_request(self):
        api = APIWrapper(RemoteConfig(base_url=BASE_URL, api_key=None, api_call_delay=0))

        with pytest.raises(InvalidCredentialsError):
            api.list_categories()

    @patch('src.remote_client.api_wrapper.requests.Session')
    def test_session_created_once_with_headers(self, mock_session_cls, remote_config):
        session = mock_session_cls.return_value
        session.headers = {}
        session.request.return_value = _response(body=[])
        api = APIWrapper(remote_config)

        api.list_categories()
        api.list_categories()

        mock_session_cls.assert_called_once()
        assert session.headers['Authorization'] == 'Bearer test-key'

    def test_url_joins_base_and_endpoint(self, remote_config):
        api = APIWrapper(remote_config, session=MagicMock())

        assert api._url('docs/intro') == f'{BASE_URL}/docs/intro'
        assert api._url('/docs/intro') == f'{BASE_URL}/docs/intro'
