"""Celery tasks for pantry item categorization."""

import logging

from sqlalchemy.orm import Session

from supersuper.celery_app import app as celery_app
from supersuper.config import get_settings
from supersuper.database import SessionLocal
from supersuper.services.categorization import classify_pantry_items as classify_items
from supersuper.services.kv_store import SqlKeyValueStore
from supersuper.services.pantry_storage import PantryStore

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=2)
def classify_pantry_items(self, product_ids: list[str]) -> dict:
    """Classify newly added or renamed pantry items in the background.

    Args:
        product_ids: IDs of the pantry items to classify

    Returns:
        dict with categorization results
    """
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        store = PantryStore(
            SqlKeyValueStore(db),
            storage_key=settings.pantry_storage_key,
            similarity_threshold=settings.search_similarity_threshold,
        )
        result = classify_items(store, product_ids)

        logger.info(
            f"Categorization complete: {result['categorized']} categorized, "
            f"{result['skipped']} skipped"
        )
        return {"success": True, **result}

    except Exception as e:
        logger.error(f"Error in classify_pantry_items: {e}", exc_info=True)

        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=30)

        return {"error": str(e)}

    finally:
        db.close()
