"""Sync plan execution against the remote service.

Buckets run in a fixed order so categories exist before documents reference
them and documents are gone before their category is deleted:

1. Category creations
2. Category updates
3. Document deletions
4. Category deletions
5. Document creations
6. Document updates

Within a bucket operations are independent and fan out with the configured
concurrency cap. A failed operation is logged and counted; the rest of the
bucket still runs.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional

from src.remote_client.api_wrapper import APIWrapper
from src.remote_client.auth import RemoteConfig
from src.remote_client.errors import InvalidCredentialsError, RemoteError

from .models import CategoryChange, DocChange, LocalDoc, LocalState, SyncPlan, SyncSummary

logger = logging.getLogger(__name__)

BodyRenderer = Callable[[LocalDoc], str]


def default_body_renderer(doc: LocalDoc) -> str:
    return doc.content


class SyncExecutor:
    """Executes a SyncPlan bucket by bucket.

    Example:
        >>> executor = SyncExecutor(APIWrapper(remote_config), remote_config)
        >>> summary = executor.execute(plan, local)
        >>> print(f"{summary.succeeded} ok, {summary.failed} failed")
    """

    def __init__(
        self,
        api: APIWrapper,
        remote_config: RemoteConfig,
        body_renderer: Optional[BodyRenderer] = None,
    ):
        """Initialize the executor.

        Args:
            api: API wrapper (its dry_run flag suppresses writes)
            remote_config: Concurrency cap and category type
            body_renderer: Produces the body sent for a document; defaults
                to the Markdown content as read from disk
        """
        self.api = api
        self.max_workers = max(1, remote_config.max_concurrent_api_calls)
        self.body_renderer = body_renderer or default_body_renderer
        self._lock = threading.Lock()

    def execute(self, plan: SyncPlan, local: Optional[LocalState] = None) -> SyncSummary:
        """Run every bucket of the plan in order.

        Args:
            plan: Plan from SyncPlanner
            local: Local state the plan was computed from (for logging)

        Returns:
            SyncSummary with success, already-deleted and failure counts

        Raises:
            InvalidCredentialsError: If the API key is missing or rejected
        """
        summary = SyncSummary(dry_run=self.api.dry_run)
        if local is not None:
            logger.debug(f"Executing plan for {len(local.docs)} local docs")

        self._run_bucket("CREATE Category", plan.category_creations, self._create_category, summary)
        self._run_bucket("UPDATE Category", plan.category_updates, self._update_category, summary)
        self._run_bucket("DELETE Doc", plan.doc_deletions, self._delete_doc, summary)
        self._run_bucket("DELETE Category", plan.category_deletions, self._delete_category, summary)
        self._run_bucket("CREATE Doc", plan.doc_creations, self._create_doc, summary)
        self._run_bucket("UPDATE Doc", plan.doc_updates, self._update_doc, summary)

        prefix = "[DRY-RUN] " if summary.dry_run else ""
        logger.info(
            f"{prefix}Sync complete: {summary.succeeded} succeeded, "
            f"{summary.already_deleted} already deleted, {summary.failed} failed"
        )
        return summary

    def _run_bucket(
        self,
        label: str,
        items: List[Any],
        action: Callable[[Any], bool],
        summary: SyncSummary,
    ) -> None:
        if not items:
            return

        logger.info(f"{label}: {len(items)} operation(s)")
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(action, item): item for item in items}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    completed = future.result()
                except InvalidCredentialsError:
                    raise
                except RemoteError as e:
                    logger.error(f"  {label} failed for {item.slug}: {e}")
                    with self._lock:
                        summary.failures.append((label, item.slug, str(e)))
                    continue

                with self._lock:
                    if completed:
                        summary.succeeded += 1
                    else:
                        summary.already_deleted += 1

    def _create_category(self, change: CategoryChange) -> bool:
        logger.info(f"  CREATE Category: {change.slug}")
        self.api.create_category(change.title, change.type)
        return True

    def _update_category(self, change: CategoryChange) -> bool:
        logger.info(f"  UPDATE Category: {change.slug}")
        self.api.update_category(change.slug, change.title, change.type)
        return True

    def _delete_category(self, change: CategoryChange) -> bool:
        logger.info(f"  DELETE Category: {change.slug}")
        return self.api.delete_category(change.slug)

    def _delete_doc(self, change: DocChange) -> bool:
        logger.info(f"  DELETE Doc: {change.slug}")
        return self.api.delete_doc(change.slug)

    def _create_doc(self, change: DocChange) -> bool:
        logger.info(f"  CREATE Doc: {change.slug}")
        self.api.create_doc(self.build_payload(change.doc))
        return True

    def _update_doc(self, change: DocChange) -> bool:
        logger.info(f"  UPDATE Doc: {change.slug}")
        self.api.update_doc(change.slug, self.build_payload(change.doc))
        return True

    def build_payload(self, doc: LocalDoc) -> Dict[str, Any]:
        """Request body for a document create or update. None values are omitted."""
        payload = {
            'title': doc.title,
            'slug': doc.slug,
            'excerpt': doc.excerpt,
            'body': self.body_renderer(doc),
            'categorySlug': doc.category_slug,
            'parentDocSlug': doc.parent_slug,
            'hidden': doc.hidden,
            'order': doc.order,
        }
        return {key: value for key, value in payload.items() if value is not None}
