"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner. Command classes and the
config loader are patched so each test checks only argument wiring and
exit code propagation.
"""

import logging
from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from src.cli.main import _configure_logging, _split_slugs, app
from src.cli.models import ExitCode
from src.hierarchy.errors import ConfigError
from src.hierarchy.models import ChildMode
from tests.fixtures.docs_trees import make_config


runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_app_logger():
    """_configure_logging mutates the shared 'src' logger; put it back afterwards."""
    app_logger = logging.getLogger("src")
    level = app_logger.level
    handlers = list(app_logger.handlers)
    yield
    for handler in app_logger.handlers:
        if handler not in handlers:
            handler.close()
    app_logger.handlers[:] = handlers
    app_logger.setLevel(level)


@pytest.fixture
def mock_loader(config):
    with patch('src.cli.main.ConfigLoader') as loader:
        loader.load.return_value = config
        yield loader


def _command(exit_code=ExitCode.SUCCESS):
    instance = Mock()
    for name in ('validate', 'manifest', 'structural_check', 'move', 'create_category', 'rename_category', 'run'):
        getattr(instance, name).return_value = exit_code
    return instance


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    @pytest.mark.parametrize('verbosity,level', [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ])
    def test_verbosity_sets_level(self, verbosity, level):
        _configure_logging(verbosity)

        app_logger = logging.getLogger("src")
        assert app_logger.level == level
        assert len(app_logger.handlers) == 1

    def test_root_logger_untouched(self):
        root_level = logging.getLogger().level

        _configure_logging(2)

        assert logging.getLogger().level == root_level

    def test_logdir_creates_log_file(self, tmp_path):
        logdir = tmp_path / "logs"

        _configure_logging(1, str(logdir))

        files = list(logdir.glob("docs-hierarchy_*.log"))
        assert len(files) == 1
        assert len(logging.getLogger("src").handlers) == 2

    def test_repeated_calls_do_not_stack_handlers(self):
        _configure_logging(0)
        _configure_logging(0)

        assert len(logging.getLogger("src").handlers) == 1


class TestSplitSlugs:
    """Test cases for --from parsing."""

    def test_comma_and_repeat(self):
        assert _split_slugs(["a, b", "c", " ,d,"]) == ["a", "b", "c", "d"]


class TestHierarchyCommands:
    """Test cases for local hierarchy subcommands."""

    @pytest.mark.parametrize('argv,method', [
        (['validate'], 'validate'),
        (['manifest'], 'manifest'),
        (['structural-check'], 'structural_check'),
    ])
    @patch('src.cli.main.HierarchyCommand')
    def test_simple_commands(self, mock_cmd, mock_loader, argv, method):
        instance = _command()
        mock_cmd.return_value = instance

        result = runner.invoke(app, argv)

        assert result.exit_code == ExitCode.SUCCESS
        getattr(instance, method).assert_called_once_with()

    @patch('src.cli.main.HierarchyCommand')
    def test_validation_failure_exit_code(self, mock_cmd, mock_loader):
        mock_cmd.return_value = _command(ExitCode.GENERAL_ERROR)

        result = runner.invoke(app, ['validate'])

        assert result.exit_code == ExitCode.GENERAL_ERROR

    @patch('src.cli.main.HierarchyCommand')
    def test_move_arguments(self, mock_cmd, mock_loader):
        instance = _command()
        mock_cmd.return_value = instance

        result = runner.invoke(app, [
            'move', '--from', 'intro,faq', '--from', 'api', '--to', 'reference',
            '--children', 'promote', '--yes',
        ])

        assert result.exit_code == ExitCode.SUCCESS
        instance.move.assert_called_once_with(
            ['intro', 'faq', 'api'], 'reference', ChildMode.PROMOTE_ALL, assume_yes=True
        )

    @patch('src.cli.main.HierarchyCommand')
    def test_move_defaults(self, mock_cmd, mock_loader):
        instance = _command()
        mock_cmd.return_value = instance

        runner.invoke(app, ['move', '--from', 'faq', '--to', 'intro'])

        instance.move.assert_called_once_with(['faq'], 'intro', ChildMode.MOVE_ALL, assume_yes=False)

    @patch('src.cli.main.HierarchyCommand')
    def test_move_children_case_insensitive(self, mock_cmd, mock_loader):
        instance = _command()
        mock_cmd.return_value = instance

        result = runner.invoke(app, ['move', '--from', 'faq', '--to', 'intro', '--children', 'ASK'])

        assert result.exit_code == ExitCode.SUCCESS
        assert instance.move.call_args[0][2] == ChildMode.ASK

    def test_move_requires_destination(self, mock_loader):
        result = runner.invoke(app, ['move', '--from', 'faq'])

        assert result.exit_code != ExitCode.SUCCESS

    @patch('src.cli.main.HierarchyCommand')
    def test_create_category(self, mock_cmd, mock_loader):
        instance = _command(ExitCode.AUTH_ERROR)
        mock_cmd.return_value = instance

        result = runner.invoke(app, ['create-category', 'API Reference'])

        assert result.exit_code == ExitCode.AUTH_ERROR
        instance.create_category.assert_called_once_with('API Reference')

    @patch('src.cli.main.HierarchyCommand')
    def test_rename_category(self, mock_cmd, mock_loader):
        instance = _command()
        mock_cmd.return_value = instance

        result = runner.invoke(app, ['rename-category', 'guides', 'User Guides'])

        assert result.exit_code == ExitCode.SUCCESS
        instance.rename_category.assert_called_once_with('guides', 'User Guides')


class TestGlobalOptions:
    """Test cases for options on the app callback."""

    @patch('src.cli.main.HierarchyCommand')
    def test_options_reach_config_loader(self, mock_cmd, mock_loader, tmp_path):
        mock_cmd.return_value = _command()

        runner.invoke(app, [
            '--dry-run', '--no-commit', '--docs-root', str(tmp_path), '--config', 'custom.yaml', 'manifest',
        ])

        mock_loader.load.assert_called_once_with(
            config_path='custom.yaml',
            docs_root=str(tmp_path),
            dry_run=True,
            no_commit=True,
        )

    @patch('src.cli.main.HierarchyCommand')
    def test_dry_run_banner(self, mock_cmd, docs_root):
        mock_cmd.return_value = _command()
        with patch('src.cli.main.ConfigLoader') as loader:
            loader.load.return_value = make_config(docs_root, dry_run=True)
            result = runner.invoke(app, ['-n', 'manifest'])

        assert "Dry-run: ON" in result.output

    @patch('src.cli.main.HierarchyCommand')
    def test_config_error_exits_general_error(self, mock_cmd):
        with patch('src.cli.main.ConfigLoader') as loader:
            loader.load.side_effect = ConfigError("max_depth must be a positive integer", "max_depth")
            result = runner.invoke(app, ['validate'])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Configuration error" in result.output
        mock_cmd.assert_not_called()


class TestSync:
    """Test cases for the sync subcommand."""

    @patch('src.cli.main.SyncCommand')
    def test_sync_runs(self, mock_sync, mock_loader, config):
        instance = _command()
        mock_sync.return_value = instance

        result = runner.invoke(app, ['sync'])

        assert result.exit_code == ExitCode.SUCCESS
        assert mock_sync.call_args[0][0] is config
        instance.run.assert_called_once_with()

    @patch('src.cli.main.SyncCommand')
    def test_auth_error_exit_code(self, mock_sync, mock_loader):
        mock_sync.return_value = _command(ExitCode.AUTH_ERROR)

        result = runner.invoke(app, ['sync'])

        assert result.exit_code == ExitCode.AUTH_ERROR
