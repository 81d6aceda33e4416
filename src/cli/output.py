"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for spinners, colored output and formatted listings of
validation errors, move plans and sync plans. Supports verbosity levels and
the --no-color flag.
"""

from collections import OrderedDict
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner

from src.hierarchy.models import ORDER_SENTINEL, MovePlan, MoveResult
from src.sync.models import SyncPlan, SyncSummary


class OutputHandler:
    """Handles all terminal output using Rich library.

    Provides methods for displaying messages, spinners, plans and summaries
    with color coding and verbosity level control.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Manifest written")
        >>> with handler.spinner("Fetching remote state..."):
        ...     # Do work
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Optional[Console] = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Optional pre-built console (mainly for tests)
        """
        self.verbosity = verbosity
        self.console = console or Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green.

        Args:
            message: Success message to display
        """
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red.

        Args:
            message: Error message to display
        """
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow.

        Args:
            message: Warning message to display
        """
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1).

        Args:
            message: Info message to display
        """
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2).

        Args:
            message: Debug message to display
        """
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting.

        Args:
            message: Message to display
        """
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Args:
            message: Message to display with spinner

        Yields:
            None

        Example:
            >>> with handler.spinner("Fetching remote state..."):
            ...     # Do work
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_validation_errors(self, errors: List[str]) -> None:
        """Display numbered structural validation errors.

        Args:
            errors: One message per broken rule
        """
        self.console.print(f"\n[bold red]Structure validation failed ({len(errors)} error(s)):[/bold red]")
        for index, message in enumerate(errors, start=1):
            self.console.print(f"  {index}. {message}", markup=False)

    def print_move_plan(self, plan: MovePlan, docs_root: Path) -> None:
        """Display file moves and promotions before they are applied.

        Args:
            plan: Validated move plan
            docs_root: Paths are shown relative to this directory
        """
        self.console.print("\n[bold]Move plan:[/bold]")
        for op in plan.file_operations:
            self.console.print(
                f"  • {op.slug}: {_relative(op.from_path, docs_root)}  →  {_relative(op.to_path, docs_root)}",
                markup=False,
            )

        if plan.promotions:
            grouped: Dict[str, List[str]] = OrderedDict()
            for promotion in plan.promotions:
                grouped.setdefault(promotion.from_parent or "", []).append(promotion.slug)

            self.console.print("\n[yellow]⚠ Promotions (children not moved):[/yellow]")
            for parent, children in grouped.items():
                self.console.print(
                    f"  • former children of \"{parent}\" promoted: {', '.join(children)}",
                    markup=False,
                )
            self.console.print(f"    Their order was reset to {ORDER_SENTINEL}. Please review ordering manually.")

    def print_move_summary(self, result: MoveResult, dry_run: bool = False) -> None:
        """Display move summary with color coding.

        Args:
            result: Outcome of the move
            dry_run: Whether files were left untouched
        """
        self.console.print("\n[bold]Move Summary:[/bold]")

        if result.moved:
            self.console.print(f"  [blue]↔[/blue] Moved: {len(result.moved)} doc(s)")

        if result.promoted:
            self.console.print(f"  [yellow]↑[/yellow] Promoted: {len(result.promoted)} doc(s)")

        if not result.moved and not result.promoted:
            self.console.print("\n[yellow]No docs moved[/yellow]")
        elif dry_run:
            self.console.print("\n[yellow]Dry run complete. No files were changed.[/yellow]")
        else:
            self.console.print("\n[green]Move completed successfully[/green]")

    def print_sync_plan(self, plan: SyncPlan) -> None:
        """Display the planned remote operations per bucket.

        Args:
            plan: Plan from the sync planner
        """
        self.console.print("\n[bold]Sync Plan:[/bold]")
        self.console.print(
            f"  Categories: {len(plan.category_creations)} to create, "
            f"{len(plan.category_updates)} to update, "
            f"{len(plan.category_deletions)} to delete"
        )
        self.console.print(
            f"  Docs: {len(plan.doc_creations)} to create, "
            f"{len(plan.doc_updates)} to update, "
            f"{len(plan.doc_deletions)} to delete"
        )

        if self.verbosity >= 1:
            buckets = [
                ("[green]+[/green]", "create category", plan.category_creations),
                ("[blue]~[/blue]", "update category", plan.category_updates),
                ("[red]-[/red]", "delete category", plan.category_deletions),
                ("[green]+[/green]", "create doc", plan.doc_creations),
                ("[blue]~[/blue]", "update doc", plan.doc_updates),
                ("[red]-[/red]", "delete doc", plan.doc_deletions),
            ]
            for marker, label, changes in buckets:
                for change in changes:
                    self.console.print(f"  {marker} {label}: {change.slug}")

        if plan.is_empty:
            self.console.print("\n[green]Already in sync. No changes to apply.[/green]")

    def print_sync_summary(self, summary: SyncSummary) -> None:
        """Display sync summary with color coding.

        Args:
            summary: Outcome of executing the plan
        """
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if summary.succeeded > 0:
            verb = "Planned" if summary.dry_run else "Applied"
            self.console.print(f"  [green]✓[/green] {verb}: {summary.succeeded} operation(s)")

        if summary.already_deleted > 0:
            self.console.print(f"  [dim]─[/dim] Already deleted: {summary.already_deleted} item(s)")

        if summary.failed > 0:
            self.console.print(f"  [red]✗[/red] Failed: {summary.failed} operation(s)")
            for operation, slug, message in summary.failures:
                self.console.print(f"      {operation} {slug}: {message}", markup=False)

        if summary.failed > 0:
            self.console.print("\n[red]Sync completed with errors[/red]")
        elif summary.dry_run:
            self.console.print("\n[yellow]Dry run complete. No changes were made.[/yellow]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")


def _relative(path: Path, root: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(Path(root).resolve()))
    except ValueError:
        return str(path)
