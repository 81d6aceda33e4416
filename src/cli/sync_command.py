"""Sync command orchestration for CLI.

This module provides the SyncCommand class that orchestrates the one-way
sync workflow: load the local hierarchy, fetch the remote mirror, ask git
which files changed on this branch, plan the six buckets of remote
operations and execute them.
"""

import logging
from typing import Optional

from src.git_integration.change_tracker import ChangeTracker
from src.git_integration.git_repository import GitRepository
from src.hierarchy.errors import ConfigError, HierarchyError
from src.hierarchy.models import AppConfig
from src.remote_client.api_wrapper import APIWrapper
from src.remote_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    RemoteError,
)
from src.sync.remote_state import RemoteStateFetcher
from src.sync.state_loader import LocalStateLoader
from src.sync.sync_executor import SyncExecutor
from src.sync.sync_planner import SyncPlanner

from .errors import CLIError, DocsRootNotFoundError
from .models import ExitCode
from .output import OutputHandler

logger = logging.getLogger(__name__)


class SyncCommand:
    """Pushes the local hierarchy to the remote documentation service.

    Example:
        >>> command = SyncCommand(config, OutputHandler(verbosity=1))
        >>> exit_code = command.run()
    """

    def __init__(
        self,
        config: AppConfig,
        output_handler: Optional[OutputHandler] = None,
        api: Optional[APIWrapper] = None,
        repo: Optional[GitRepository] = None,
    ):
        """Initialize the sync command.

        Args:
            config: Immutable application config (remote settings included)
            output_handler: Terminal output (defaults to a plain handler)
            api: API wrapper; built from config.remote when omitted
            repo: Git repository used to compute the changed-file set
        """
        self.config = config
        self.output_handler = output_handler or OutputHandler()
        self.api = api or APIWrapper(config.remote, dry_run=config.dry_run)
        self.repo = repo or GitRepository(config.docs_root if config.docs_root.is_dir() else ".")

    def run(self) -> ExitCode:
        """Execute the sync.

        Returns:
            ExitCode.SUCCESS when every operation succeeded, GENERAL_ERROR
            when some operations failed, AUTH_ERROR or NETWORK_ERROR when
            the remote could not be used at all
        """
        logger.info(f"Starting sync{' (dry run)' if self.config.dry_run else ''}")

        try:
            if not self.config.docs_root.is_dir():
                raise DocsRootNotFoundError(str(self.config.docs_root))

            local = LocalStateLoader(self.config.docs_root).load()
            self.output_handler.info(
                f"Local: {len(local.categories)} categories, {len(local.docs)} docs"
            )

            with self.output_handler.spinner("Fetching remote state..."):
                remote = RemoteStateFetcher(self.api, self.config.remote).fetch()
            self.output_handler.info(
                f"Remote: {len(remote.categories)} categories, {len(remote.docs)} docs"
            )

            tracker = ChangeTracker(self.repo, self.config.docs_root, self.config.manifest_path)
            changed_paths = tracker.changed_paths(self.config.target_branch)
            if changed_paths is None:
                self.output_handler.warning("Git diff unavailable. Treating every file as changed.")

            plan = SyncPlanner(self.config.manifest_path).plan(local, remote, changed_paths)
            self.output_handler.print_sync_plan(plan)
            if plan.is_empty:
                return ExitCode.SUCCESS

            summary = SyncExecutor(self.api, self.config.remote).execute(plan, local)
            self.output_handler.print_sync_summary(summary)

            if summary.failed:
                logger.error(f"Sync finished with {summary.failed} failed operation(s)")
                return ExitCode.GENERAL_ERROR
            return ExitCode.SUCCESS

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info("Check the README_API_KEY environment variable")
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except RemoteError as e:
            logger.error(f"Remote error: {e}")
            self.output_handler.error(f"Remote error: {e}")
            return ExitCode.GENERAL_ERROR

        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except HierarchyError as e:
            logger.error(f"Local state error: {e}")
            self.output_handler.error(f"Local state error: {e}")
            return ExitCode.GENERAL_ERROR

        except CLIError as e:
            logger.error(f"CLI error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during sync")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
