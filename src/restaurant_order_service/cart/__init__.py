"""Client-side shopping cart and checkout helpers."""

from restaurant_order_service.cart.checkout import (
    build_whatsapp_message,
    build_whatsapp_url,
    to_order_request,
)
from restaurant_order_service.cart.engine import Cart, CartLine, CartPolicy

__all__ = [
    "Cart",
    "CartLine",
    "CartPolicy",
    "build_whatsapp_message",
    "build_whatsapp_url",
    "to_order_request",
]
