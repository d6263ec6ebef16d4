"""Cart quote and WhatsApp checkout models."""

from decimal import Decimal

from pydantic import Field

from restaurant_order_service.models.catalog_models import ApiModel, SizeOption
from restaurant_order_service.models.order_models import MAX_ITEM_QUANTITY


class CartLineRequest(ApiModel):
    """A cart line as sent by the client: an item reference and a quantity."""

    menu_item_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_ITEM_QUANTITY)
    selected_size: SizeOption | None = None


class CartQuoteRequest(ApiModel):
    """Cart contents to price against the current catalog."""

    restaurant_id: int
    items: list[CartLineRequest] = Field(..., min_length=1)
    delivery_location: str | None = Field(
        None, description="Delivery location key, defaults to the configured default"
    )


class CartQuoteLine(ApiModel):
    """Priced cart line."""

    menu_item_id: int
    name: str
    quantity: int
    selected_size: SizeOption | None = None
    unit_price: Decimal
    line_total: Decimal


class CartQuote(ApiModel):
    """Cart totals for a delivery location."""

    restaurant_id: int
    delivery_location: str
    lines: list[CartQuoteLine]
    total_items: int
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    total: Decimal


class WhatsAppCheckoutRequest(CartQuoteRequest):
    """Cart plus customer details for a WhatsApp order message."""

    customer_name: str | None = None
    customer_phone: str | None = None
    delivery_address: str | None = None
    special_instructions: str | None = None


class WhatsAppCheckout(ApiModel):
    """Pre-filled WhatsApp message and click-to-chat link."""

    message: str
    url: str
    quote: CartQuote
