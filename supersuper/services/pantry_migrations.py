"""Versioned loading of the persisted pantry aggregate."""

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from supersuper.schemas.pantry import CURRENT_SCHEMA_VERSION, PantryAggregate, PantryItem
from supersuper.services.text_index import normalize_name, rebuild_indexes

logger = logging.getLogger(__name__)

LEGACY_SCHEMA_VERSION = 1


class UnsupportedSchemaVersion(ValueError):
    """Stored aggregate was written by a newer schema than this code understands."""


class LegacyPantryItem(BaseModel):
    """Item entry of the camelCase layout. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    product_name: str | None = Field(None, alias="productName")
    quantity: int = Field(1, ge=0)
    image: str | None = None
    category: str | None = None
    last_bought_on: datetime | None = Field(None, alias="lastBoughtOn")


def _migrate_v1_item(product_id: str, raw_item: Any) -> PantryItem:
    # The table key is authoritative; a stray productId in the entry is ignored
    legacy = LegacyPantryItem.model_validate(raw_item)
    display_name = legacy.product_name or product_id
    return PantryItem(
        product_id=product_id,
        display_name=display_name,
        normalized_name=normalize_name(display_name),
        quantity=legacy.quantity,
        image=legacy.image,
        category=legacy.category,
        last_bought_on=legacy.last_bought_on,
    )


def _migrate_v1(raw: dict[str, Any]) -> PantryAggregate:
    """Convert the camelCase layout (nameIndex, optional wordIndex) to the current one.

    Both indexes are rebuilt from the item table rather than trusted.
    """
    raw_items = raw.get("items") or {}
    if not isinstance(raw_items, dict):
        raise ValueError("Legacy pantry 'items' must be an object")

    aggregate = PantryAggregate(
        items={pid: _migrate_v1_item(pid, item) for pid, item in raw_items.items()}
    )
    rebuild_indexes(aggregate)
    logger.info(f"Migrated legacy pantry with {len(aggregate.items)} items")
    return aggregate


def migrate_aggregate(raw: Any) -> PantryAggregate:
    """Validate a stored payload, upgrading older schema versions.

    Raises:
        ValueError (including pydantic.ValidationError) if the payload is unusable.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Pantry payload must be an object, got {type(raw).__name__}")

    version = raw.get("schema_version", LEGACY_SCHEMA_VERSION)
    if version == LEGACY_SCHEMA_VERSION:
        return _migrate_v1(raw)
    if version == CURRENT_SCHEMA_VERSION:
        aggregate = PantryAggregate.model_validate(raw)
        for key, item in aggregate.items.items():
            if item.product_id != key:
                raise ValueError(f"Pantry item stored under '{key}' has id '{item.product_id}'")
        return aggregate

    raise UnsupportedSchemaVersion(f"Unsupported pantry schema version: {version}")
