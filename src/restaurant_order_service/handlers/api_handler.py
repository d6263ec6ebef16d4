"""FastAPI application for the customer and admin REST endpoints."""

import logging

from fastapi import FastAPI, File, Header, Request, Response, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_order_service.errors import OrderServiceError, UploadError
from restaurant_order_service.models.cart_models import (
    CartQuote,
    CartQuoteRequest,
    WhatsAppCheckout,
    WhatsAppCheckoutRequest,
)
from restaurant_order_service.models.catalog_models import (
    ApiModel,
    MenuItem,
    MenuItemCreate,
    MenuItemUpdate,
    Restaurant,
)
from restaurant_order_service.models.order_models import (
    CreateOrderRequest,
    Order,
    OrderWithItems,
    TrackingStep,
    UpdateStatusRequest,
)
from restaurant_order_service.services.catalog_service import CatalogService
from restaurant_order_service.services.checkout_service import CheckoutService
from restaurant_order_service.services.order_service import OrderService
from restaurant_order_service.services.upload_service import UploadService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class ImageUploadResponse(ApiModel):
    """Response model for image uploads."""

    image_url: str


def _error_response(status_code: int, message: str, details: object | None = None) -> JSONResponse:
    content: dict = {"message": message}
    if details is not None:
        content["errors"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    catalog_service: CatalogService,
    order_service: OrderService,
    checkout_service: CheckoutService,
    upload_service: UploadService,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        catalog_service: Service for restaurants and menu items
        order_service: Service for order creation and status
        checkout_service: Service for cart quotes and WhatsApp checkout
        upload_service: Service for menu image uploads

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Restaurant Order Service API",
        description="Menu browsing, ordering and order tracking for restaurants",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.catalog_service = catalog_service
    app.state.order_service = order_service
    app.state.checkout_service = checkout_service
    app.state.upload_service = upload_service

    @app.exception_handler(OrderServiceError)
    async def handle_service_error(_request: Request, exc: OrderServiceError) -> JSONResponse:
        """Map service errors to their HTTP status and a JSON body."""
        return _error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Reject malformed request bodies, paths and queries with 400."""
        logger.info(f"Invalid request to {request.url.path}: {len(exc.errors())} errors")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request data", exc.errors())

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    # Catalog

    @app.get("/api/restaurants", response_model=list[Restaurant], tags=["Restaurants"])
    async def list_restaurants(
        category: str | None = None, search: str | None = None
    ) -> list[Restaurant]:
        """List restaurants, filtered by search term or category.

        A search term takes precedence over the category.
        """
        restaurants: list[Restaurant] = await app.state.catalog_service.list_restaurants(
            category=category, search=search
        )
        return restaurants

    @app.get("/api/restaurants/{restaurant_id}", response_model=Restaurant, tags=["Restaurants"])
    async def get_restaurant(restaurant_id: int) -> Restaurant:
        """Get a single restaurant."""
        restaurant: Restaurant = await app.state.catalog_service.get_restaurant(restaurant_id)
        return restaurant

    @app.get(
        "/api/restaurants/{restaurant_id}/menu",
        response_model=list[MenuItem],
        tags=["Restaurants"],
    )
    async def get_menu(restaurant_id: int, category: str | None = None) -> list[MenuItem]:
        """List a restaurant's menu items, optionally for one category."""
        menu: list[MenuItem] = await app.state.catalog_service.get_menu(
            restaurant_id, category=category
        )
        return menu

    @app.get("/api/menu-items/{menu_item_id}", response_model=MenuItem, tags=["Menu"])
    async def get_menu_item(menu_item_id: int) -> MenuItem:
        """Get a single menu item."""
        menu_item: MenuItem = await app.state.catalog_service.get_menu_item(menu_item_id)
        return menu_item

    # Cart and checkout

    @app.post("/api/cart/quote", response_model=CartQuote, tags=["Cart"])
    async def quote_cart(request: CartQuoteRequest) -> CartQuote:
        """Price cart contents with current catalog prices."""
        quote: CartQuote = await app.state.checkout_service.quote(request)
        return quote

    @app.post("/api/checkout/whatsapp", response_model=WhatsAppCheckout, tags=["Cart"])
    async def whatsapp_checkout(request: WhatsAppCheckoutRequest) -> WhatsAppCheckout:
        """Build the WhatsApp order message and click-to-chat link for a cart."""
        checkout: WhatsAppCheckout = await app.state.checkout_service.whatsapp_checkout(request)
        return checkout

    # Orders

    @app.post(
        "/api/orders",
        response_model=OrderWithItems,
        status_code=status.HTTP_201_CREATED,
        tags=["Orders"],
    )
    async def create_order(
        request: CreateOrderRequest,
        idempotency_key: str | None = Header(None),
    ) -> OrderWithItems:
        """Create an order from cart lines.

        Prices are resolved from the catalog. Repeating a request with the
        same Idempotency-Key header returns the original order.
        """
        order: OrderWithItems = await app.state.order_service.create_order(
            request, idempotency_key=idempotency_key
        )
        return order

    @app.get("/api/orders", response_model=list[OrderWithItems], tags=["Orders"])
    async def list_orders() -> list[OrderWithItems]:
        """List all orders, newest first."""
        orders: list[OrderWithItems] = await app.state.order_service.list_orders()
        return orders

    @app.get("/api/orders/{order_id}", response_model=OrderWithItems, tags=["Orders"])
    async def get_order(order_id: int) -> OrderWithItems:
        """Get an order with its restaurant and items."""
        order: OrderWithItems = await app.state.order_service.get_order(order_id)
        return order

    @app.patch("/api/orders/{order_id}/status", response_model=Order, tags=["Orders"])
    async def update_order_status(order_id: int, request: UpdateStatusRequest) -> Order:
        """Move an order forward to a new status."""
        order: Order = await app.state.order_service.update_status(order_id, request.status)
        return order

    @app.get(
        "/api/orders/{order_id}/tracking",
        response_model=list[TrackingStep],
        tags=["Orders"],
    )
    async def get_order_tracking(order_id: int) -> list[TrackingStep]:
        """Get the tracker steps for an order."""
        steps: list[TrackingStep] = await app.state.order_service.get_tracking(order_id)
        return steps

    # Admin

    @app.post(
        "/api/admin/menu-items",
        response_model=MenuItem,
        status_code=status.HTTP_201_CREATED,
        tags=["Admin"],
    )
    async def create_menu_item(request: MenuItemCreate) -> MenuItem:
        """Create a menu item."""
        logger.info(f"Admin creating menu item '{request.name}' for restaurant {request.restaurant_id}")
        menu_item: MenuItem = await app.state.catalog_service.create_menu_item(request)
        return menu_item

    @app.put("/api/admin/menu-items/{menu_item_id}", response_model=MenuItem, tags=["Admin"])
    async def update_menu_item(menu_item_id: int, request: MenuItemUpdate) -> MenuItem:
        """Apply a partial update to a menu item."""
        menu_item: MenuItem = await app.state.catalog_service.update_menu_item(
            menu_item_id, request
        )
        return menu_item

    @app.delete(
        "/api/admin/menu-items/{menu_item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["Admin"],
    )
    async def delete_menu_item(menu_item_id: int) -> Response:
        """Delete a menu item that no order references."""
        await app.state.catalog_service.delete_menu_item(menu_item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/api/admin/upload-image", response_model=ImageUploadResponse, tags=["Admin"])
    async def upload_image(image: UploadFile | None = File(None)) -> ImageUploadResponse:
        """Upload a menu item image and return its URL."""
        if image is None:
            raise UploadError("No image file provided")

        content = await image.read()
        image_url: str = await app.state.upload_service.upload_image(
            image.filename, image.content_type, content
        )
        return ImageUploadResponse(image_url=image_url)

    return app
