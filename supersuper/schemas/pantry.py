"""Pantry schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

CURRENT_SCHEMA_VERSION = 2


class PantryItem(BaseModel):
    """One distinct product held in the pantry."""

    product_id: str = Field(..., min_length=1)
    display_name: str
    normalized_name: str  # Always display_name.lower()
    quantity: int = Field(1, ge=0)
    image: str | None = None
    category: str | None = None
    last_bought_on: datetime | None = None


class TripItem(BaseModel):
    """A product bought on a shopping trip, as handed to the pantry."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str | None = Field(
        None, validation_alias=AliasChoices("product_id", "barcode", "productId")
    )
    display_name: str | None = Field(
        None, validation_alias=AliasChoices("display_name", "productName", "displayName")
    )
    quantity: int | None = Field(None, ge=0)  # 0 or missing counts as one
    image: str | None = None
    thumbnail: str | None = None


class PantryItemUpdate(BaseModel):
    """Partial update of a pantry item. Normalized name is always derived."""

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(None, min_length=1, max_length=255)
    quantity: int | None = None
    image: str | None = None
    category: str | None = None


class PantryQuantityUpdate(BaseModel):
    """Set the quantity of a pantry item."""

    quantity: int


class PantryAggregate(BaseModel):
    """The persisted unit: item table plus both indexes, loaded and saved as one."""

    schema_version: int = CURRENT_SCHEMA_VERSION
    items: dict[str, PantryItem] = Field(default_factory=dict)
    # Key -> ordered, duplicate-free list of product ids
    name_index: dict[str, list[str]] = Field(default_factory=dict)
    word_index: dict[str, list[str]] = Field(default_factory=dict)


class PantryTripRequest(BaseModel):
    """Items from a completed shopping trip."""

    items: list[TripItem]


class PantryMutationResponse(BaseModel):
    """Result of a pantry mutation."""

    items: list[PantryItem]
    persisted: bool


class PantrySearchResults(BaseModel):
    """Text matches plus semantically related products."""

    matches: list[PantryItem]
    related: list[PantryItem] = Field(default_factory=list)


class PantryClearResponse(BaseModel):
    """Result of clearing the pantry."""

    cleared: bool
