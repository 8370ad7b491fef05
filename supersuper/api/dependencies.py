"""API dependencies for wiring the pantry store."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from supersuper.config import Settings, get_settings
from supersuper.database import get_db
from supersuper.services.kv_store import SqlKeyValueStore
from supersuper.services.pantry_storage import PantryStore
from supersuper.services.semantic_search import SemanticSearchProvider

logger = logging.getLogger(__name__)


def schedule_classification(product_ids: list[str]) -> None:
    """Queue background categorization for inserted or renamed items."""
    from supersuper.tasks.categorization import classify_pantry_items

    classify_pantry_items.delay(product_ids)
    logger.info(f"Queued categorization for {len(product_ids)} pantry items")


def get_pantry_store(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PantryStore:
    """Pantry store bound to the request's database session."""
    return PantryStore(
        SqlKeyValueStore(db),
        storage_key=settings.pantry_storage_key,
        similarity_threshold=settings.search_similarity_threshold,
        on_items_changed=(
            schedule_classification if settings.category_classification_enabled else None
        ),
    )


def get_semantic_search(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SemanticSearchProvider | None:
    """Semantic search provider registered on the app, if the feature is enabled."""
    if not settings.semantic_search_enabled:
        return None
    return getattr(request.app.state, "semantic_search", None)
