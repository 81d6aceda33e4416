"""Remote state fetching for sync.

Categories are paginated; each category's nested document tree is fetched in
parallel (bounded by the configured concurrency cap) and flattened into the
same shape as the local state.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from src.remote_client.api_wrapper import PAGE_SIZE, APIWrapper
from src.remote_client.auth import RemoteConfig
from src.remote_client.errors import InvalidCredentialsError, RemoteError

from .models import RemoteCategory, RemoteDoc, RemoteState

logger = logging.getLogger(__name__)

# Remote trees deeper than this are truncated with a warning
MAX_REMOTE_DEPTH = 10


class RemoteStateFetcher:
    """Fetches and flattens the remote category and document trees.

    Example:
        >>> fetcher = RemoteStateFetcher(APIWrapper(remote_config), remote_config)
        >>> remote = fetcher.fetch()
        >>> remote.docs["install"].parent_slug
        'getting-started'
    """

    def __init__(self, api: APIWrapper, remote_config: RemoteConfig):
        self.api = api
        self.category_type = remote_config.category_type
        self.max_workers = max(1, remote_config.max_concurrent_api_calls)

    def fetch(self) -> RemoteState:
        """Fetch every category of the configured type and its documents.

        A category whose documents cannot be read is kept, logged as a
        warning, and contributes no documents.

        Raises:
            InvalidCredentialsError: If the API key is missing or rejected
            RemoteError: If the category listing itself fails
        """
        logger.info("Fetching remote state...")
        state = RemoteState()

        categories = [c for c in self._fetch_all_categories() if c.get('type') == self.category_type]
        logger.info(f"Found {len(categories)} remote {self.category_type} categories")

        for raw in categories:
            slug = str(raw['slug']).lower()
            state.categories[slug] = RemoteCategory(
                slug=slug,
                title=raw.get('title', ''),
                type=raw.get('type', self.category_type),
                id=raw.get('_id') or raw.get('id'),
            )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                (raw['slug'], executor.submit(self._fetch_category_docs, raw['slug']))
                for raw in categories
            ]
            for category_slug, future in futures:
                try:
                    tree = future.result()
                except InvalidCredentialsError:
                    raise
                except RemoteError as e:
                    logger.warning(f"Failed to fetch docs for category {category_slug}: {e}")
                    continue
                self._flatten(tree, str(category_slug).lower(), None, state.docs, 1)

        logger.info(f"Found {len(state.docs)} remote docs")
        return state

    def _fetch_all_categories(self) -> List[Dict[str, Any]]:
        categories: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self.api.list_categories(page=page, per_page=PAGE_SIZE)
            if not batch:
                break
            categories.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        return categories

    def _fetch_category_docs(self, category_slug: str) -> List[Dict[str, Any]]:
        return self.api.list_category_docs(category_slug)

    def _flatten(
        self,
        nodes: List[Dict[str, Any]],
        category_slug: str,
        parent_slug: Optional[str],
        docs: Dict[str, RemoteDoc],
        depth: int,
    ) -> None:
        if depth > MAX_REMOTE_DEPTH:
            logger.warning(f"Remote tree under \"{parent_slug}\" is deeper than {MAX_REMOTE_DEPTH}; truncating")
            return
        for node in nodes or []:
            slug = str(node['slug']).lower()
            docs[slug] = RemoteDoc(
                slug=slug,
                title=node.get('title', ''),
                category_slug=category_slug,
                parent_slug=parent_slug,
                order=node.get('order'),
                hidden=bool(node.get('hidden')),
                excerpt=node.get('excerpt') or '',
                id=node.get('_id') or node.get('id'),
            )
            self._flatten(node.get('children') or [], category_slug, slug, docs, depth + 1)
