"""Sync planning: diff local state against remote state.

The planner is pure. Given the same local state, remote state and changed
path set it always produces the same plan and performs no I/O.

Gating rules:
- Deletions depend only on presence (remote has it, local does not).
- Category creations and updates are emitted only when the manifest changed.
- Document creations are always emitted.
- Document updates need a changed backing file or a differing structural
  attribute (title, category, parent, order, hidden).

A changed path set of None means the diff could not be computed and every
gate is treated as open.
"""

import logging
from pathlib import Path
from typing import Union

from .models import (
    CategoryChange,
    ChangedPaths,
    DocChange,
    LocalDoc,
    LocalState,
    RemoteDoc,
    RemoteState,
    SyncPlan,
)

logger = logging.getLogger(__name__)


class SyncPlanner:
    """Builds a SyncPlan from local and remote state.

    Example:
        >>> planner = SyncPlanner(config.manifest_path)
        >>> plan = planner.plan(local, remote, changed_paths={Path("/repo/docs/a.md")})
        >>> plan.total
        1
    """

    def __init__(self, manifest_path: Union[str, Path]):
        self.manifest_path = Path(manifest_path).resolve()

    def plan(self, local: LocalState, remote: RemoteState, changed_paths: ChangedPaths) -> SyncPlan:
        """Compute the remote operations that make remote match local.

        Args:
            local: State loaded from disk
            remote: State fetched from the remote service
            changed_paths: Absolute paths changed since the target branch,
                or None when unknown

        Returns:
            SyncPlan with six buckets
        """
        plan = SyncPlan()
        structure_changed = changed_paths is None or self.manifest_path in changed_paths

        for slug, category in remote.categories.items():
            if slug not in local.categories:
                plan.category_deletions.append(CategoryChange(slug=slug, remote_id=category.id))

        for slug, category in local.categories.items():
            remote_category = remote.categories.get(slug)
            if remote_category is None:
                if structure_changed:
                    plan.category_creations.append(
                        CategoryChange(slug=slug, title=category.title, type=category.type)
                    )
            elif structure_changed and (
                category.title != remote_category.title or category.type != remote_category.type
            ):
                plan.category_updates.append(
                    CategoryChange(slug=slug, title=category.title, type=category.type)
                )

        for slug in remote.docs:
            if slug not in local.docs:
                plan.doc_deletions.append(DocChange(slug=slug))

        for slug, doc in local.docs.items():
            remote_doc = remote.docs.get(slug)
            if remote_doc is None:
                plan.doc_creations.append(DocChange(slug=slug, doc=doc))
                continue

            file_changed = changed_paths is None or (doc.path is not None and doc.path in changed_paths)
            if file_changed or self.attributes_differ(doc, remote_doc):
                plan.doc_updates.append(DocChange(slug=slug, doc=doc))

        logger.info(
            f"Plan: {len(plan.category_creations)} Cat Create, "
            f"{len(plan.category_deletions)} Cat Delete, {len(plan.category_updates)} Cat Update"
        )
        logger.info(
            f"Plan: {len(plan.doc_creations)} Doc Create, "
            f"{len(plan.doc_deletions)} Doc Delete, {len(plan.doc_updates)} Doc Update"
        )
        return plan

    @staticmethod
    def attributes_differ(local: LocalDoc, remote: RemoteDoc) -> bool:
        """Whether any structural attribute differs. Excerpt and body are not compared."""
        return (
            local.title != remote.title
            or local.category_slug != remote.category_slug
            or local.parent_slug != remote.parent_slug
            or local.order != remote.order
            or local.hidden != remote.hidden
        )
