"""Pantry API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from supersuper.api.dependencies import get_pantry_store, get_semantic_search
from supersuper.schemas.pantry import (
    PantryClearResponse,
    PantryItem,
    PantryItemUpdate,
    PantryMutationResponse,
    PantryQuantityUpdate,
    PantrySearchResults,
    PantryTripRequest,
)
from supersuper.services.pantry_storage import PantryStore
from supersuper.services.semantic_search import SemanticSearchProvider, search_with_related

router = APIRouter(prefix="/api/v1/pantry", tags=["pantry"])


def require_pantry_item(store: PantryStore, product_id: str) -> PantryItem:
    """Get a pantry item or raise 404."""
    item = store.get_item_by_id(product_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pantry item not found")
    return item


def mutation_response(store: PantryStore, items: list[PantryItem]) -> PantryMutationResponse:
    return PantryMutationResponse(items=items, persisted=store.last_write_ok)


@router.get("", response_model=list[PantryItem])
def list_pantry_items(store: Annotated[PantryStore, Depends(get_pantry_store)]):
    """List all pantry items."""
    return store.get_all_items()


@router.get("/search", response_model=PantrySearchResults)
async def search_pantry(
    store: Annotated[PantryStore, Depends(get_pantry_store)],
    provider: Annotated[SemanticSearchProvider | None, Depends(get_semantic_search)],
    q: str = "",
):
    """Search pantry items by partial or misspelled name.

    When semantic search is enabled, related products are returned alongside
    the text matches.
    """
    return await search_with_related(store, q, provider)


@router.get("/by-name", response_model=list[PantryItem])
def get_pantry_items_by_name(
    store: Annotated[PantryStore, Depends(get_pantry_store)],
    name: Annotated[str, Query(min_length=1)],
):
    """Get pantry items with exactly this name (case-insensitive)."""
    return store.get_items_by_name(name)


@router.get("/{product_id}", response_model=PantryItem)
def get_pantry_item(
    product_id: str,
    store: Annotated[PantryStore, Depends(get_pantry_store)],
):
    """Get a specific pantry item."""
    return require_pantry_item(store, product_id)


@router.post("/trip", response_model=PantryMutationResponse)
def add_trip_to_pantry(
    request: PantryTripRequest,
    store: Annotated[PantryStore, Depends(get_pantry_store)],
):
    """Add the items of a completed shopping trip to the pantry."""
    items = store.add_items_from_trip(request.items)
    return mutation_response(store, items)


@router.patch("/{product_id}", response_model=PantryMutationResponse)
def update_pantry_item(
    product_id: str,
    item_data: PantryItemUpdate,
    store: Annotated[PantryStore, Depends(get_pantry_store)],
):
    """Update a pantry item."""
    require_pantry_item(store, product_id)
    items = store.update_item(product_id, item_data)
    return mutation_response(store, items)


@router.put("/{product_id}/quantity", response_model=PantryMutationResponse)
def set_pantry_item_quantity(
    product_id: str,
    quantity_data: PantryQuantityUpdate,
    store: Annotated[PantryStore, Depends(get_pantry_store)],
):
    """Set an item's quantity. Zero or less removes the item."""
    require_pantry_item(store, product_id)
    items = store.update_item_quantity(product_id, quantity_data.quantity)
    return mutation_response(store, items)


@router.delete("/{product_id}", response_model=PantryMutationResponse)
def delete_pantry_item(
    product_id: str,
    store: Annotated[PantryStore, Depends(get_pantry_store)],
):
    """Remove an item from the pantry."""
    items = store.remove_item(product_id)
    return mutation_response(store, items)


@router.delete("", response_model=PantryClearResponse)
def clear_pantry(store: Annotated[PantryStore, Depends(get_pantry_store)]):
    """Delete the whole pantry."""
    return PantryClearResponse(cleared=store.clear_pantry())
