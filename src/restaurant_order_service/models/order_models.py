"""Order data models.

These models represent order requests, persisted orders and the composed
order views returned by the API.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import Field, computed_field

from restaurant_order_service.models.catalog_models import (
    ApiModel,
    MenuItem,
    Restaurant,
    SizeOption,
)


# Largest quantity accepted for a single order or cart line
MAX_ITEM_QUANTITY = 999


class OrderStatus(str, Enum):
    """Enumeration of order fulfillment states, in progression order."""

    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        """Position of this status in the fulfillment progression."""
        return list(OrderStatus).index(self)


class CreateOrderItem(ApiModel):
    """A single line of an order request."""

    menu_item_id: int = Field(..., description="Menu item to order")
    quantity: int = Field(..., description="Number of units", ge=1, le=MAX_ITEM_QUANTITY)
    selected_size: SizeOption | None = Field(
        None, description="Size variant, required for items with size options"
    )


class CreateOrderRequest(ApiModel):
    """Order submission payload sent by the checkout flow."""

    restaurant_id: int = Field(..., description="Restaurant the order is placed with")
    delivery_address: str = Field(
        ..., description="Free-form delivery address, empty for pickup"
    )
    items: list[CreateOrderItem] = Field(..., min_length=1, description="Ordered lines")


class UpdateStatusRequest(ApiModel):
    """Payload for an order status update."""

    status: OrderStatus


class Order(ApiModel):
    """Persisted order without its items."""

    id: int
    restaurant_id: int
    status: OrderStatus
    total: Decimal = Field(..., description="Order total fixed at creation time")
    delivery_address: str
    estimated_delivery_time: str
    created_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def trackable(self) -> bool:
        """Whether the customer can still follow the order in the tracker."""
        return self.status != OrderStatus.DELIVERED


class OrderItem(ApiModel):
    """Persisted order line with its price snapshot."""

    id: int
    order_id: int
    menu_item_id: int
    quantity: int
    price: Decimal = Field(..., description="Unit price at order time")
    selected_size: SizeOption | None = None


class OrderItemWithMenuItem(OrderItem):
    """Order line joined with the menu item it references."""

    menu_item: MenuItem


class OrderWithItems(Order):
    """Order composed with its restaurant and items for display."""

    restaurant: Restaurant
    items: list[OrderItemWithMenuItem]


class TrackingStep(ApiModel):
    """One step of the customer-facing order tracker."""

    id: OrderStatus
    label: str
    completed: bool
    active: bool
