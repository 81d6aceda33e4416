"""Main CLI entry point for the docs-hierarchy command.

This module provides the Typer application that serves as the entry point
for the docs-hierarchy command-line tool. Global options live on the app
callback. Each subcommand builds the immutable AppConfig once and hands it
to a command class that returns an ExitCode.
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from src.hierarchy.config_loader import ConfigLoader
from src.hierarchy.errors import ConfigError, FilesystemError
from src.hierarchy.models import AppConfig, ChildMode
from src.cli.hierarchy_command import HierarchyCommand
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand

app = typer.Typer(
    name="docs-hierarchy",
    help="""Manage a versioned Markdown docs hierarchy and mirror it to the docs service.

QUICK START:
  docs-hierarchy validate                          # Check structure and manifest
  docs-hierarchy manifest                          # Rebuild the manifest
  docs-hierarchy move --from a,b --to guides       # Move docs under a category or doc
  docs-hierarchy create-category "API Reference"   # Create a category remotely and locally
  docs-hierarchy sync --dry-run                    # Preview remote changes""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class GlobalOptions:
    """Options shared by every subcommand."""
    dry_run: bool = False
    no_commit: bool = False
    docs_root: Optional[str] = None
    config_path: Optional[str] = None
    verbosity: int = 0
    logdir: Optional[str] = None
    no_color: bool = False


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    # Configure app-specific logger (not root) to avoid affecting libraries
    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Timestamped filename in local time
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"docs-hierarchy_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _load_config(options: GlobalOptions, output: OutputHandler) -> AppConfig:
    """Build the AppConfig, exiting with GENERAL_ERROR if it is invalid."""
    try:
        return ConfigLoader.load(
            config_path=options.config_path,
            docs_root=options.docs_root,
            dry_run=options.dry_run,
            no_commit=options.no_commit,
        )
    except (ConfigError, FilesystemError) as e:
        logger.error(f"Configuration error: {e}")
        output.error(f"Configuration error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _prepare(ctx: typer.Context):
    options: GlobalOptions = ctx.obj or GlobalOptions()
    output = OutputHandler(verbosity=options.verbosity, no_color=options.no_color)
    config = _load_config(options, output)
    if config.dry_run:
        output.warning("Dry-run: ON (no file writes, no commit, no remote writes)")
    return config, output


def _split_slugs(values: List[str]) -> List[str]:
    slugs: List[str] = []
    for value in values:
        slugs.extend(part.strip() for part in value.split(",") if part.strip())
    return slugs


@app.callback()
def main_callback(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Preview changes without writing files, committing or calling the API",
    ),
    no_commit: bool = typer.Option(
        False,
        "--no-commit",
        help="Leave local changes uncommitted",
    ),
    docs_root: Optional[str] = typer.Option(
        None,
        "--docs-root",
        help="Document root directory (default: docs)",
        metavar="DIR",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="YAML configuration file (default: .docs-hierarchy.yaml if present)",
        metavar="FILE",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Manage a versioned Markdown docs hierarchy and mirror it to the docs service."""
    _configure_logging(verbosity, logdir)
    ctx.obj = GlobalOptions(
        dry_run=dry_run,
        no_commit=no_commit,
        docs_root=docs_root,
        config_path=config_path,
        verbosity=verbosity,
        logdir=logdir,
        no_color=no_color,
    )


@app.command()
def validate(ctx: typer.Context) -> None:
    """Validate the hierarchy and the manifest. Exits 0 when valid, 1 otherwise."""
    config, output = _prepare(ctx)
    raise typer.Exit(HierarchyCommand(config, output).validate())


@app.command()
def manifest(ctx: typer.Context) -> None:
    """Rebuild the manifest from the documents on disk."""
    config, output = _prepare(ctx)
    raise typer.Exit(HierarchyCommand(config, output).manifest())


@app.command("structural-check")
def structural_check(ctx: typer.Context) -> None:
    """Pre-commit hook: rebuild and stage the manifest if staged docs moved."""
    config, output = _prepare(ctx)
    raise typer.Exit(HierarchyCommand(config, output).structural_check())


@app.command()
def move(
    ctx: typer.Context,
    sources: List[str] = typer.Option(
        ...,
        "--from",
        help="Source doc slug(s), comma-separated or repeated",
        metavar="SLUGS",
    ),
    destination: str = typer.Option(
        ...,
        "--to",
        help="Destination category slug or parent doc slug",
        metavar="SLUG",
    ),
    children: ChildMode = typer.Option(
        ChildMode.MOVE_ALL,
        "--children",
        case_sensitive=False,
        help="Descendants: move with their parent, promote to category roots, or ask per doc",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Apply without asking for confirmation",
    ),
) -> None:
    """Move docs (bulk: multi-source to one destination)."""
    config, output = _prepare(ctx)
    command = HierarchyCommand(config, output)
    raise typer.Exit(command.move(_split_slugs(sources), destination, children, assume_yes=yes))


@app.command("create-category")
def create_category(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Category title"),
) -> None:
    """Create a category on the docs service, then its local folder and marker."""
    config, output = _prepare(ctx)
    raise typer.Exit(HierarchyCommand(config, output).create_category(title))


@app.command("rename-category")
def rename_category(
    ctx: typer.Context,
    slug: str = typer.Argument(..., help="Category slug"),
    title: str = typer.Argument(..., help="New category title"),
) -> None:
    """Edit a category title (local marker file only)."""
    config, output = _prepare(ctx)
    raise typer.Exit(HierarchyCommand(config, output).rename_category(slug, title))


@app.command()
def sync(ctx: typer.Context) -> None:
    """Push the local hierarchy to the remote documentation service."""
    config, output = _prepare(ctx)
    raise typer.Exit(SyncCommand(config, output).run())


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
