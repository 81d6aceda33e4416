"""Unit tests for hierarchy.config_loader module."""

import pytest

from src.hierarchy.config_loader import ConfigLoader
from src.hierarchy.errors import ConfigError, FilesystemError
from src.hierarchy.models import MANIFEST_FILENAME, DestinationPolicy


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run from an empty directory with no remote or git variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ('README_API_KEY', 'README_BASE_URL', 'README_VERSION', 'TARGET_GIT_BRANCH'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr('src.hierarchy.config_loader.load_dotenv', lambda: None)
    monkeypatch.setattr('src.remote_client.auth.load_dotenv', lambda: None)


class TestDefaults:
    """Test cases for loading without a configuration file."""

    def test_defaults(self, tmp_path):
        """Defaults apply when nothing is configured."""
        config = ConfigLoader.load()

        assert config.docs_root == (tmp_path / 'docs').resolve()
        assert config.manifest_path == config.docs_root / MANIFEST_FILENAME
        assert config.max_depth == 3
        assert config.destination_policy == DestinationPolicy.CATEGORY_WINS
        assert config.target_branch == 'main'
        assert config.dry_run is False
        assert config.no_commit is False
        assert config.remote.category_type == 'guide'
        assert config.remote.api_key is None

    def test_flags_and_docs_root_override(self, tmp_path):
        """Command line values are carried into the config."""
        config = ConfigLoader.load(docs_root=tmp_path / 'content', dry_run=True, no_commit=True)

        assert config.docs_root == (tmp_path / 'content').resolve()
        assert config.dry_run is True
        assert config.no_commit is True

    def test_environment_values(self, monkeypatch):
        """Git branch and remote credential come from the environment."""
        monkeypatch.setenv('TARGET_GIT_BRANCH', 'develop')
        monkeypatch.setenv('README_API_KEY', 'secret')
        monkeypatch.setenv('README_VERSION', '2.0')

        config = ConfigLoader.load()

        assert config.target_branch == 'develop'
        assert config.remote.api_key == 'secret'
        assert config.remote.version == '2.0'

    def test_config_is_frozen(self):
        """AppConfig cannot be mutated after loading."""
        config = ConfigLoader.load()

        with pytest.raises(Exception):
            config.max_depth = 5


class TestConfigFile:
    """Test cases for the YAML configuration file."""

    def test_default_file_is_read(self, tmp_path):
        """.docs-hierarchy.yaml in the working directory is picked up."""
        (tmp_path / '.docs-hierarchy.yaml').write_text(
            "docs_root: content\n"
            "max_depth: 2\n"
            "destination_policy: document\n"
            "target_branch: release\n"
            "remote:\n"
            "  category_type: reference\n"
            "  max_concurrent_api_calls: 3\n",
            encoding='utf-8',
        )

        config = ConfigLoader.load()

        assert config.docs_root == (tmp_path / 'content').resolve()
        assert config.max_depth == 2
        assert config.destination_policy == DestinationPolicy.DOCUMENT_WINS
        assert config.target_branch == 'release'
        assert config.remote.category_type == 'reference'
        assert config.remote.max_concurrent_api_calls == 3

    def test_overrides_beat_file(self, tmp_path):
        """Keyword overrides take precedence over file values."""
        path = tmp_path / 'custom.yaml'
        path.write_text("max_depth: 2\ntarget_branch: release\n", encoding='utf-8')

        config = ConfigLoader.load(config_path=path, max_depth=4, target_branch='hotfix')

        assert config.max_depth == 4
        assert config.target_branch == 'hotfix'

    def test_missing_explicit_file(self, tmp_path):
        """An explicit path that does not exist is a filesystem error."""
        with pytest.raises(FilesystemError, match="not found"):
            ConfigLoader.load(config_path=tmp_path / 'missing.yaml')

    def test_empty_file_uses_defaults(self, tmp_path):
        """An empty file behaves like no file."""
        path = tmp_path / 'empty.yaml'
        path.write_text("", encoding='utf-8')

        assert ConfigLoader.load(config_path=path).max_depth == 3


class TestValidation:
    """Test cases for rejected configuration values."""

    @pytest.mark.parametrize("content, field", [
        ("max_depth: 0\n", "max_depth"),
        ("max_depth: deep\n", "max_depth"),
        ("destination_policy: random\n", "destination_policy"),
        ("remote: [1, 2]\n", "remote"),
        ("remote:\n  max_concurrent_api_calls: 0\n", "remote.max_concurrent_api_calls"),
        ("remote:\n  api_call_delay: -1\n", "remote.api_call_delay"),
    ])
    def test_invalid_values(self, tmp_path, content, field):
        """Each invalid value raises ConfigError naming the field."""
        path = tmp_path / 'bad.yaml'
        path.write_text(content, encoding='utf-8')

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(config_path=path)

        assert exc_info.value.config_field == field

    def test_unknown_top_level_field(self, tmp_path):
        """Unexpected keys are rejected."""
        path = tmp_path / 'bad.yaml'
        path.write_text("colour: blue\n", encoding='utf-8')

        with pytest.raises(ConfigError, match="Unknown fields: colour"):
            ConfigLoader.load(config_path=path)

    def test_api_key_not_accepted_from_file(self, tmp_path):
        """The credential must come from the environment."""
        path = tmp_path / 'bad.yaml'
        path.write_text("remote:\n  api_key: leaked\n", encoding='utf-8')

        with pytest.raises(ConfigError, match="api_key"):
            ConfigLoader.load(config_path=path)

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML raises ConfigError."""
        path = tmp_path / 'bad.yaml'
        path.write_text("max_depth: [\n", encoding='utf-8')

        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader.load(config_path=path)
