"""Execution of a validated MovePlan against the filesystem.

Promotions are applied first (front matter rewritten in place), then file
moves in plan order. The document index is updated after every operation so
it always mirrors what is on disk.
"""

import logging
from pathlib import Path

from .document_index import DocumentIndex
from .errors import FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .models import ORDER_SENTINEL, AppConfig, FileOperation, MovePlan, MoveResult, Promotion

logger = logging.getLogger(__name__)


class BulkMoveExecutor:
    """Applies a MovePlan produced by BulkMovePlanner.

    In dry-run mode every step is logged and nothing is written; the
    in-memory index is still updated so a follow-up manifest preview shows
    the post-move tree.

    Example:
        >>> executor = BulkMoveExecutor(config)
        >>> result = executor.execute(plan, documents)
        >>> print(f"Moved {len(result.moved)}, promoted {len(result.promoted)}")
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.dry_run = config.dry_run
        self.docs_root = Path(config.docs_root).resolve()

    def execute(self, plan: MovePlan, documents: DocumentIndex) -> MoveResult:
        """Apply promotions, then moves.

        Args:
            plan: Validated move plan
            documents: Live document index, updated op-by-op

        Returns:
            MoveResult listing moved and promoted slugs and every touched file

        Raises:
            FilesystemError: If a file cannot be read, written or removed
            FrontmatterError: If a source file's front matter is malformed
        """
        result = MoveResult()

        for promotion in plan.promotions:
            self._apply_promotion(promotion, documents)
            result.promoted.append(promotion.slug)
            result.changed_files.append(promotion.path)

        for op in plan.file_operations:
            self._apply_move(op, documents)
            result.moved.append(op.slug)
            result.changed_files.append(op.to_path)
            if op.relocates:
                result.changed_files.append(op.from_path)

        prefix = "[DRY-RUN] " if self.dry_run else ""
        logger.info(f"{prefix}Move complete: {len(result.moved)} moved, {len(result.promoted)} promoted")
        return result

    def _apply_promotion(self, promotion: Promotion, documents: DocumentIndex) -> None:
        rel = documents.relative(promotion.path)
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would promote {promotion.slug} (former parent: {promotion.from_parent}) in {rel}")
        else:
            frontmatter, content = FrontmatterHandler.read(promotion.path)
            frontmatter['parent'] = None
            frontmatter['order'] = ORDER_SENTINEL
            FrontmatterHandler.write(promotion.path, frontmatter, content)
            logger.info(f"Promoted {promotion.slug} to category root ({rel})")

        documents.relocate(promotion.slug, parent=None, order=ORDER_SENTINEL)

    def _apply_move(self, op: FileOperation, documents: DocumentIndex) -> None:
        rel_from = documents.relative(op.from_path)
        rel_to = documents.relative(op.to_path)

        if self.dry_run:
            logger.info(f"[DRY-RUN] Would move {op.slug}: {rel_from} -> {rel_to}")
        else:
            frontmatter, content = FrontmatterHandler.read(op.from_path)
            frontmatter['category'] = op.new_category
            frontmatter['parent'] = op.new_parent
            FrontmatterHandler.write(op.to_path, frontmatter, content)

            if op.relocates:
                try:
                    op.from_path.unlink()
                except OSError as e:
                    raise FilesystemError(str(op.from_path), 'delete', str(e))
                self._cleanup_empty_dirs(op.from_path.parent)
                logger.info(f"Moved {op.slug}: {rel_from} -> {rel_to}")
            else:
                logger.info(f"Updated {op.slug} in place: {rel_to}")

        documents.relocate(
            op.slug,
            path=op.to_path,
            category=op.new_category,
            parent=op.new_parent,
        )

    def _cleanup_empty_dirs(self, directory: Path) -> None:
        """Remove empty directories upwards, stopping at the document root."""
        dir_path = directory.resolve()
        try:
            while dir_path != self.docs_root and self.docs_root in dir_path.parents:
                if not dir_path.is_dir() or any(dir_path.iterdir()):
                    return
                logger.debug(f"Removing empty directory: {dir_path}")
                dir_path.rmdir()
                dir_path = dir_path.parent
        except OSError as e:
            logger.debug(f"Stopped directory cleanup at {dir_path}: {e}")
