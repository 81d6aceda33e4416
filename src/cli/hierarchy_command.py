"""Hierarchy commands: validate, manifest, structural-check, move, create and rename category.

Every command that edits files ends with the same post-operation flow:
reload both indexes from disk, rebuild and write the manifest (the rebuild
re-validates the final structure), then stage the docs root and commit
unless --dry-run or --no-commit is set.
"""

import logging
from typing import Callable, List, Optional, Tuple

import typer

from src.git_integration.change_tracker import ChangeTracker
from src.git_integration.errors import GitRepositoryError
from src.git_integration.git_repository import GitRepository
from src.hierarchy.category_editor import CategoryEditor
from src.hierarchy.category_index import CategoryIndex
from src.hierarchy.document_index import DocumentIndex
from src.hierarchy.errors import ConfigError, HierarchyError, StructureValidationError
from src.hierarchy.manifest_builder import ManifestBuilder, ManifestStore
from src.hierarchy.models import AppConfig, ChildMode
from src.hierarchy.move_executor import BulkMoveExecutor
from src.hierarchy.move_planner import BulkMovePlanner
from src.hierarchy.validator import HierarchyValidator
from src.remote_client.api_wrapper import APIWrapper
from src.remote_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    RemoteError,
)

from .errors import CLIError, DocsRootNotFoundError
from .models import ExitCode
from .output import OutputHandler

logger = logging.getLogger(__name__)

# Number of descendant slugs shown in the per-source prompt
CHILD_PREVIEW_LIMIT = 5


class HierarchyCommand:
    """Orchestrates local hierarchy operations.

    Each public method returns an ExitCode and never raises: failures are
    logged, reported through the OutputHandler and mapped to a code.

    Example:
        >>> command = HierarchyCommand(config, OutputHandler())
        >>> command.validate()
        <ExitCode.SUCCESS: 0>
        >>> command.move(["intro", "setup"], "getting-started", ChildMode.PROMOTE_ALL, assume_yes=True)
        <ExitCode.SUCCESS: 0>
    """

    def __init__(
        self,
        config: AppConfig,
        output_handler: Optional[OutputHandler] = None,
        repo: Optional[GitRepository] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        api: Optional[APIWrapper] = None,
    ):
        """Initialize the command.

        Args:
            config: Immutable application config
            output_handler: Terminal output (defaults to a plain handler)
            repo: Git repository holding the docs root
            confirm: Yes/no prompt, defaults to typer.confirm
            api: API wrapper for create-category; built from config.remote when omitted
        """
        self.config = config
        self.output = output_handler or OutputHandler()
        self.repo = repo or GitRepository(config.docs_root if config.docs_root.is_dir() else ".")
        self.confirm = confirm or (lambda message: typer.confirm(message, default=True))
        self.api = api
        self.store = ManifestStore(config.manifest_path, config.dry_run)
        self.validator = HierarchyValidator(config, self.store)
        self.builder = ManifestBuilder(self.validator, config.max_depth)

    def validate(self) -> ExitCode:
        """Run every structural check, including the manifest cross-check."""
        def action() -> ExitCode:
            categories, documents = self._load()
            self.validator.validate(categories, documents)
            self.output.success("Structure valid.")
            return ExitCode.SUCCESS

        return self._guarded("validate", action)

    def manifest(self) -> ExitCode:
        """Rebuild the manifest from the files on disk and write it."""
        def action() -> ExitCode:
            categories, documents = self._load()
            self._write_manifest(categories, documents)
            return ExitCode.SUCCESS

        return self._guarded("manifest", action)

    def structural_check(self) -> ExitCode:
        """Pre-commit hook: keep the staged manifest in step with staged docs.

        If a staged document changes its place in the tree, the manifest is
        rebuilt and staged. Otherwise a manifest the user staged explicitly is
        preserved, and an unstaged one is reset so it does not ride along.
        """
        def action() -> ExitCode:
            tracker = ChangeTracker(self.repo, self.config.docs_root, self.config.manifest_path)

            if tracker.has_structural_changes():
                self.output.warning("Structural change detected in Markdown files. Rebuilding full manifest...")
                categories, documents = self._load()
                self._write_manifest(categories, documents)
                if self.config.dry_run:
                    self.output.info("Dry run: manifest not staged")
                else:
                    self.repo.add([self.config.manifest_path])
                    self.output.success("Manifest rebuilt and staged.")
                return ExitCode.SUCCESS

            self.output.success("No structural changes detected in Markdown files.")
            if self.repo.is_staged(tracker.manifest_relative()):
                self.output.info("Manifest file is already staged. Preserving it for the commit.")
            elif self.store.exists() and not self.config.dry_run:
                try:
                    self.repo.unstage(self.config.manifest_path)
                    self.output.info("Manifest was not staged and no structural changes were found. Left it unstaged.")
                except GitRepositoryError as e:
                    logger.debug(f"Manifest reset skipped: {e}")
            return ExitCode.SUCCESS

        return self._guarded("structural-check", action)

    def move(
        self,
        sources: List[str],
        destination: str,
        child_mode: ChildMode = ChildMode.MOVE_ALL,
        assume_yes: bool = False,
    ) -> ExitCode:
        """Move several documents (and optionally their subtrees) under one destination.

        Args:
            sources: Slugs of the documents to move
            destination: Category slug or parent document slug
            child_mode: Descendant handling; ASK prompts once per source
            assume_yes: Skip the confirmation prompt
        """
        def action() -> ExitCode:
            categories, documents = self._load()
            self.output.info("Running full validation before move...")
            self.validator.validate(categories, documents)

            planner = BulkMovePlanner(self.config, self.validator)
            plan = planner.plan(
                categories,
                documents,
                sources,
                destination,
                child_mode=child_mode,
                resolve_child_mode=self._ask_child_mode if child_mode == ChildMode.ASK else None,
            )

            self.output.print_move_plan(plan, self.config.docs_root)
            prompt = "Proceed with dry-run?" if self.config.dry_run else "Apply these changes?"
            if not assume_yes and not self.confirm(prompt):
                self.output.warning("Aborted.")
                return ExitCode.SUCCESS

            result = BulkMoveExecutor(self.config).execute(plan, documents)
            self.output.print_move_summary(result, self.config.dry_run)

            message = f"docs: move {len(result.moved)} doc(s)"
            if result.promoted:
                message += f"; promoted {len(result.promoted)}"
            self._finish(message)
            return ExitCode.SUCCESS

        return self._guarded("move", action)

    def create_category(self, title: str) -> ExitCode:
        """Create a category through the API, then its local folder and marker."""
        def action() -> ExitCode:
            categories, _ = self._load()
            if self.api is None:
                self.api = APIWrapper(self.config.remote, dry_run=self.config.dry_run)
            created = CategoryEditor(self.config).create(categories, title, self.api)

            self.output.success(f"Category \"{created.title}\" created with slug \"{created.slug}\"")
            self._finish(f"docs: create category {created.slug}")
            return ExitCode.SUCCESS

        return self._guarded("create-category", action)

    def rename_category(self, slug: str, new_title: str) -> ExitCode:
        """Change a category's title in its marker file."""
        def action() -> ExitCode:
            categories, _ = self._load()
            updated = CategoryEditor(self.config).rename(categories, slug, new_title)
            if updated is None:
                self.output.info("No change.")
                return ExitCode.SUCCESS

            self.output.success(f"Category \"{updated.slug}\" renamed to \"{updated.title}\"")
            self._finish("docs: edit category title")
            return ExitCode.SUCCESS

        return self._guarded("rename-category", action)

    def _ask_child_mode(self, slug: str, descendants: List[str]) -> ChildMode:
        preview = ', '.join(descendants[:CHILD_PREVIEW_LIMIT])
        if len(descendants) > CHILD_PREVIEW_LIMIT:
            preview += ', …'
        question = f"Doc \"{slug}\" has {len(descendants)} children ({preview}). Move them too?"
        return ChildMode.MOVE_ALL if self.confirm(question) else ChildMode.PROMOTE_ALL

    def _load(self) -> Tuple[CategoryIndex, DocumentIndex]:
        """Load both indexes from the docs root.

        Raises:
            DocsRootNotFoundError: If the docs root does not exist
            FrontmatterError: If any document has malformed front matter
        """
        root = self.config.docs_root
        if not root.is_dir():
            raise DocsRootNotFoundError(str(root))
        return CategoryIndex.load(root), DocumentIndex.load(root)

    def _write_manifest(self, categories: CategoryIndex, documents: DocumentIndex) -> None:
        manifest = self.builder.rebuild(documents, categories)
        if self.store.write(manifest):
            self.output.success(f"Manifest rebuilt: {self.config.manifest_path}")
        else:
            self.output.info("Dry run: manifest not written")

    def _finish(self, commit_message: str) -> None:
        """Post-operation flow after local files changed."""
        self.output.info("Post-operation sync: reloading and rebuilding manifest...")
        categories, documents = self._load()
        self._write_manifest(categories, documents)
        self.output.success("Final structure valid.")

        if self.config.dry_run or self.config.no_commit:
            self.output.info("Commit skipped.")
            return

        try:
            self.repo.add([self.config.docs_root])
            if self.repo.commit(commit_message):
                self.output.success("Changes committed to Git.")
            else:
                self.output.info("Nothing to commit.")
        except GitRepositoryError as e:
            logger.warning(f"Git commit failed: {e}")
            self.output.warning(f"Git commit failed: {e}")

    def _guarded(self, name: str, action: Callable[[], ExitCode]) -> ExitCode:
        """Run one command body and map exceptions to exit codes."""
        try:
            return action()

        except StructureValidationError as e:
            logger.error(f"{name}: structure validation failed with {len(e.errors)} error(s)")
            self.output.print_validation_errors(e.errors)
            return ExitCode.GENERAL_ERROR

        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            self.output.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except HierarchyError as e:
            logger.error(f"{name} failed: {e}")
            self.output.error(f"Operation failed: {e}")
            return ExitCode.GENERAL_ERROR

        except GitRepositoryError as e:
            logger.error(f"Git error: {e}")
            self.output.error(f"Git error: {e}")
            return ExitCode.GENERAL_ERROR

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output.error(f"Authentication failed: {e}")
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output.error(f"API error: {e}")
            return ExitCode.NETWORK_ERROR

        except RemoteError as e:
            logger.error(f"Remote error: {e}")
            self.output.error(f"Remote error: {e}")
            return ExitCode.GENERAL_ERROR

        except CLIError as e:
            logger.error(f"CLI error: {e}")
            self.output.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except typer.Abort:
            self.output.warning("Aborted.")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception(f"Unexpected error during {name}")
            self.output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
