"""Catalog data models.

These models represent restaurants and menu items as exposed over the API.
Field names are camelCase on the wire and snake_case in Python. Prices are
``Decimal`` throughout and serialize to JSON as strings.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SizeOption(str, Enum):
    """Size variants for items that are sold in two sizes."""

    REGULAR = "regular"
    BIG = "big"


class ApiModel(BaseModel):
    """Base model with camelCase aliases and ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Restaurant(ApiModel):
    """Restaurant model."""

    id: int = Field(..., description="Unique identifier for the restaurant")
    name: str = Field(..., description="Restaurant name")
    cuisine: str = Field(..., description="Cuisine description")
    rating: Decimal = Field(..., description="Average rating", ge=0)
    delivery_time: str = Field(..., description="Advertised delivery time window")
    delivery_fee: Decimal = Field(..., description="Base delivery fee", ge=0)
    image: str = Field(..., description="URL to restaurant image")
    category: str = Field(..., description="Restaurant category tag")
    is_open: bool = Field(default=True, description="Whether the restaurant is accepting orders")


class MenuItem(ApiModel):
    """Menu item model.

    Items with ``has_size_options`` are purchased at ``regular_price`` or
    ``big_price``; their flat ``price`` is only a display fallback.
    """

    id: int = Field(..., description="Unique identifier for the menu item")
    restaurant_id: int = Field(..., description="Restaurant this item belongs to")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    category: str = Field(..., description="Free-form category tag used for grouping")
    price: Decimal = Field(..., description="Flat item price", ge=0)
    regular_price: Decimal | None = Field(None, description="Regular size price", ge=0)
    big_price: Decimal | None = Field(None, description="Big size price", ge=0)
    has_size_options: bool = Field(default=False, description="Whether the item has sizes")
    image: str = Field(default="", description="URL to item image")
    is_available: bool = Field(default=True, description="Whether item can be ordered")

    def unit_price(self, selected_size: SizeOption | None = None) -> Decimal:
        """Resolve the purchase price for a size selection.

        Args:
            selected_size: Selected size, only meaningful for sized items

        Returns:
            The unit price as Decimal
        """
        if self.has_size_options:
            if selected_size == SizeOption.BIG and self.big_price is not None:
                return self.big_price
            if self.regular_price is not None:
                return self.regular_price
        return self.price


def check_size_prices(
    has_size_options: bool | None,
    regular_price: Decimal | None,
    big_price: Decimal | None,
) -> None:
    """Raise ValueError when a sized item lacks either size price."""
    if has_size_options and (regular_price is None or big_price is None):
        raise ValueError("regularPrice and bigPrice are required when hasSizeOptions is true")


class MenuItemCreate(ApiModel):
    """Payload for creating a menu item from the admin dashboard."""

    restaurant_id: int
    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=6, decimal_places=2)
    regular_price: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    big_price: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    has_size_options: bool = False
    image: str = ""
    is_available: bool = True

    @model_validator(mode="after")
    def validate_size_prices(self) -> "MenuItemCreate":
        """Sized items must carry both size prices."""
        check_size_prices(self.has_size_options, self.regular_price, self.big_price)
        return self


class MenuItemUpdate(ApiModel):
    """Partial update payload for a menu item.

    Only fields present in the request are applied. The size invariant is
    checked again against the merged record by the catalog service.
    """

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    category: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    regular_price: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    big_price: Decimal | None = Field(None, ge=0, max_digits=6, decimal_places=2)
    has_size_options: bool | None = None
    image: str | None = None
    is_available: bool | None = None
