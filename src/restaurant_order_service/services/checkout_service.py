"""Checkout service pricing carts and building WhatsApp order messages."""

import logging

from restaurant_order_service.cart import (
    Cart,
    CartPolicy,
    build_whatsapp_message,
    build_whatsapp_url,
)
from restaurant_order_service.errors import NotFoundError, ValidationError
from restaurant_order_service.models.cart_models import (
    CartQuote,
    CartQuoteLine,
    CartQuoteRequest,
    WhatsAppCheckout,
    WhatsAppCheckoutRequest,
)
from restaurant_order_service.observability import traced
from restaurant_order_service.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

DEFAULT_WHATSAPP_NUMBER = "18091234567"


class CheckoutService:
    """Service that rebuilds a client cart against the live catalog.

    The client sends only item IDs, quantities and sizes. Items are resolved
    through the catalog so quotes and WhatsApp messages use current prices.
    """

    def __init__(
        self,
        catalog_service: CatalogService,
        policy: CartPolicy | None = None,
        whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER,
    ) -> None:
        """Initialize the CheckoutService.

        Args:
            catalog_service: Catalog used to resolve menu items
            policy: Cart pricing policy (tax rate and delivery fees)
            whatsapp_number: Restaurant WhatsApp number receiving orders
        """
        self.catalog_service = catalog_service
        self.policy = policy or CartPolicy()
        self.whatsapp_number = whatsapp_number

    async def _build_cart(self, request: CartQuoteRequest) -> Cart:
        """Resolve request lines into a Cart.

        Raises:
            NotFoundError: If a menu item is unknown or belongs to another restaurant
            ValidationError: If a menu item is unavailable
        """
        menu_items = await self.catalog_service.get_menu_items(
            [line.menu_item_id for line in request.items]
        )
        missing = sorted(
            {
                line.menu_item_id
                for line in request.items
                if line.menu_item_id not in menu_items
                or menu_items[line.menu_item_id].restaurant_id != request.restaurant_id
            }
        )
        if missing:
            raise NotFoundError(
                f"Menu item {', '.join(str(i) for i in missing)} not found",
                details={"menuItemIds": missing},
            )

        cart = Cart(self.policy)
        if request.delivery_location:
            cart.set_delivery_location(request.delivery_location)

        for line in request.items:
            menu_item = menu_items[line.menu_item_id]
            if not menu_item.is_available:
                raise ValidationError(
                    f"Menu item {menu_item.id} is not available",
                    details={"menuItemId": menu_item.id},
                )
            # add_item adds one unit and merges repeated (item, size) lines
            cart_line = cart.add_item(menu_item, line.selected_size)
            cart_line.quantity += line.quantity - 1

        return cart

    @staticmethod
    def _quote(cart: Cart, restaurant_id: int) -> CartQuote:
        return CartQuote(
            restaurant_id=restaurant_id,
            delivery_location=cart.delivery_location,
            lines=[
                CartQuoteLine(
                    menu_item_id=line.menu_item.id,
                    name=line.menu_item.name,
                    quantity=line.quantity,
                    selected_size=line.selected_size,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in cart.lines
            ],
            total_items=cart.get_total_items(),
            subtotal=cart.get_subtotal(),
            tax=cart.get_tax(),
            delivery_fee=cart.get_delivery_fee(),
            total=cart.get_total(),
        )

    @traced("quote_cart")
    async def quote(self, request: CartQuoteRequest) -> CartQuote:
        """Price a cart with current catalog prices.

        Args:
            request: Cart lines and delivery location

        Returns:
            Line prices and cart totals
        """
        await self.catalog_service.get_restaurant(request.restaurant_id)
        cart = await self._build_cart(request)
        return self._quote(cart, request.restaurant_id)

    @traced("whatsapp_checkout")
    async def whatsapp_checkout(self, request: WhatsAppCheckoutRequest) -> WhatsAppCheckout:
        """Build the WhatsApp order message and link for a cart.

        Args:
            request: Cart lines and customer details

        Returns:
            Message text, wa.me URL and the cart quote
        """
        restaurant = await self.catalog_service.get_restaurant(request.restaurant_id)
        cart = await self._build_cart(request)

        message = build_whatsapp_message(
            cart,
            restaurant_name=restaurant.name,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            delivery_address=request.delivery_address,
            special_instructions=request.special_instructions,
        )
        url = build_whatsapp_url(self.whatsapp_number, message)

        logger.info(
            f"Built WhatsApp checkout for restaurant {restaurant.id} "
            f"with {cart.get_total_items()} items"
        )
        return WhatsAppCheckout(message=message, url=url, quote=self._quote(cart, restaurant.id))
