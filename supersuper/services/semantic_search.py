"""Optional semantic ("related products") search composed with the text search.

The embedding model behind a provider is not part of this package; anything
implementing SemanticSearchProvider can be plugged in.
"""

import logging
from typing import Protocol

from fastapi.concurrency import run_in_threadpool

from supersuper.schemas.pantry import PantryItem, PantrySearchResults
from supersuper.services.pantry_storage import PantryStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
DEFAULT_SIMILARITY_THRESHOLD = 0.3


class SemanticSearchProvider(Protocol):
    """Nearest-neighbour search over pantry item names."""

    async def initialize(self) -> bool: ...

    async def search_knn(
        self,
        query: str,
        items: list[PantryItem],
        k: int = DEFAULT_MAX_RESULTS,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> list[PantryItem]: ...


async def search_with_related(
    store: PantryStore,
    query: str,
    provider: SemanticSearchProvider | None = None,
    k: int = DEFAULT_MAX_RESULTS,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> PantrySearchResults:
    """Text matches from the store plus semantically related items not already matched.

    Store calls are blocking and run in the threadpool.
    """
    matches = await run_in_threadpool(store.search, query)

    if provider is None or not query or not query.strip():
        return PantrySearchResults(matches=matches)

    try:
        if not await provider.initialize():
            logger.warning("Semantic search provider failed to initialize")
            return PantrySearchResults(matches=matches)

        items = await run_in_threadpool(store.get_all_items)
        related = await provider.search_knn(query, items, k, threshold)
    except Exception as e:
        logger.error(f"Semantic search failed for '{query}': {e}")
        return PantrySearchResults(matches=matches)

    matched_ids = {item.product_id for item in matches}
    return PantrySearchResults(
        matches=matches,
        related=[item for item in related if item.product_id not in matched_ids],
    )
