"""Pydantic schemas for the pantry store and API."""

from supersuper.schemas.pantry import (
    CURRENT_SCHEMA_VERSION,
    PantryAggregate,
    PantryClearResponse,
    PantryItem,
    PantryItemUpdate,
    PantryMutationResponse,
    PantryQuantityUpdate,
    PantrySearchResults,
    PantryTripRequest,
    TripItem,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "PantryAggregate",
    "PantryItem",
    "PantryItemUpdate",
    "PantryQuantityUpdate",
    "TripItem",
    "PantryTripRequest",
    "PantryMutationResponse",
    "PantrySearchResults",
    "PantryClearResponse",
]
