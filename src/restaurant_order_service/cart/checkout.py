"""Checkout helpers turning a cart into an order request or a WhatsApp message."""

import re
from decimal import Decimal
from urllib.parse import quote

from restaurant_order_service.cart.engine import Cart, CartLine
from restaurant_order_service.cart.pricing import ZERO, location_label, round_money
from restaurant_order_service.errors import ValidationError
from restaurant_order_service.models.order_models import CreateOrderItem, CreateOrderRequest

WHATSAPP_BASE_URL = "https://wa.me"


def to_order_request(cart: Cart, restaurant_id: int, delivery_address: str = "") -> CreateOrderRequest:
    """Build the ``POST /api/orders`` payload for a cart.

    Prices are not sent; the server resolves them from the catalog.

    Args:
        cart: Cart to submit
        restaurant_id: Restaurant the order is placed with
        delivery_address: Delivery address, empty for pickup

    Returns:
        CreateOrderRequest with one item per cart line

    Raises:
        ValidationError: If the cart is empty
    """
    if cart.is_empty():
        raise ValidationError("Cart is empty")

    return CreateOrderRequest(
        restaurant_id=restaurant_id,
        delivery_address=delivery_address,
        items=[
            CreateOrderItem(
                menu_item_id=line.menu_item.id,
                quantity=line.quantity,
                selected_size=line.selected_size,
            )
            for line in cart.lines
        ],
    )


def _format_amount(amount: Decimal, currency: str) -> str:
    return f"{currency}{round_money(amount):.2f}"


def _format_line(line: CartLine, currency: str) -> str:
    name = line.menu_item.name
    if line.selected_size is not None:
        name = f"{name} ({line.selected_size.value.capitalize()})"
    return f"{line.quantity}x {name} - {_format_amount(line.line_total, currency)}"


def build_whatsapp_message(
    cart: Cart,
    restaurant_name: str,
    customer_name: str | None = None,
    customer_phone: str | None = None,
    delivery_address: str | None = None,
    special_instructions: str | None = None,
    currency: str = "$",
) -> str:
    """Render the pre-filled WhatsApp order text for a cart.

    Args:
        cart: Cart to summarize
        restaurant_name: Restaurant name shown in the header
        customer_name: Optional customer name
        customer_phone: Optional customer phone number
        delivery_address: Delivery address; when empty the order is marked as pickup
        special_instructions: Optional free-text notes
        currency: Currency prefix for amounts

    Returns:
        Message text

    Raises:
        ValidationError: If the cart is empty
    """
    if cart.is_empty():
        raise ValidationError("Cart is empty")

    sections = [f"*{restaurant_name} - New Order*"]

    if customer_name or customer_phone:
        details = ["*Customer Details:*"]
        if customer_name:
            details.append(f"Name: {customer_name.strip()}")
        if customer_phone:
            details.append(f"Phone: {customer_phone.strip()}")
        sections.append("\n".join(details))

    if delivery_address and delivery_address.strip():
        sections.append(f"*Delivery Address:* {delivery_address.strip()}")
    else:
        sections.append("*Pickup Order*")

    sections.append(
        "\n".join(["*Order Summary:*"] + [_format_line(line, currency) for line in cart.lines])
    )

    delivery_fee = cart.get_delivery_fee()
    fee_text = "FREE" if delivery_fee == ZERO else _format_amount(delivery_fee, currency)
    sections.append(
        "\n".join(
            [
                "*Total Breakdown:*",
                f"Delivery Location: {location_label(cart.delivery_location)}",
                f"Subtotal: {_format_amount(cart.get_subtotal(), currency)}",
                f"Tax: {_format_amount(cart.get_tax(), currency)}",
                f"Delivery Fee: {fee_text}",
                f"*Total: {_format_amount(cart.get_total(), currency)}*",
            ]
        )
    )

    if special_instructions and special_instructions.strip():
        sections.append(f"*Special Instructions:*\n{special_instructions.strip()}")

    sections.append(f"Thank you for choosing {restaurant_name}!")
    return "\n\n".join(sections)


def build_whatsapp_url(phone_number: str, message: str) -> str:
    """Build a ``wa.me`` link that opens a chat with the message pre-filled.

    Args:
        phone_number: Destination number in any format; non-digits are dropped
        message: Message text

    Returns:
        WhatsApp click-to-chat URL

    Raises:
        ValidationError: If the phone number contains no digits
    """
    digits = re.sub(r"\D", "", phone_number)
    if not digits:
        raise ValidationError("WhatsApp number must contain digits")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"
