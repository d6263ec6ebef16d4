"""Order service for validated, atomic, price-snapshotting order creation."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from restaurant_order_service.cart.pricing import ZERO, round_money
from restaurant_order_service.db.tables import MenuItemRow, OrderItemRow, OrderRow
from restaurant_order_service.errors import (
    NotFoundError,
    OrderServiceError,
    PersistenceError,
    ValidationError,
    storage_errors,
)
from restaurant_order_service.models.catalog_models import MenuItem
from restaurant_order_service.models.order_models import (
    CreateOrderItem,
    CreateOrderRequest,
    Order,
    OrderStatus,
    OrderWithItems,
    TrackingStep,
)
from restaurant_order_service.observability import traced
from restaurant_order_service.observability.metrics import (
    record_order_created,
    record_order_failure,
    record_status_transition,
)
from restaurant_order_service.repositories.catalog_repository import CatalogRepository
from restaurant_order_service.repositories.order_repository import OrderRepository
from restaurant_order_service.services.order_status import (
    check_transition,
    parse_status,
    tracking_steps,
)

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_DELIVERY_TIME = "25-35 min"


class OrderService:
    """Service turning submitted carts into durable orders.

    Every order is resolved against the catalog at submission time: the
    restaurant and each menu item must exist, unit prices come from the
    catalog (never from the client), and the Order row plus all of its
    OrderItem rows are written in a single transaction. The stored total and
    line prices are snapshots; later catalog edits do not change them.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        estimated_delivery_time: str = DEFAULT_ESTIMATED_DELIVERY_TIME,
    ) -> None:
        """Initialize the OrderService.

        Args:
            session_factory: Factory for database sessions
            estimated_delivery_time: Delivery estimate stamped on new orders
        """
        self.session_factory = session_factory
        self.estimated_delivery_time = estimated_delivery_time

    @traced("create_order")
    async def create_order(
        self, request: CreateOrderRequest, idempotency_key: str | None = None
    ) -> OrderWithItems:
        """Validate, price and persist an order.

        Args:
            request: Validated order request
            idempotency_key: Optional client key; a repeated key returns the
                order created by the first request

        Returns:
            The persisted order with restaurant and items

        Raises:
            NotFoundError: If the restaurant or any menu item does not exist
            ValidationError: If an item is unavailable or its size selection is invalid
            PersistenceError: If the order could not be written
        """
        try:
            with storage_errors("create order"), self.session_factory.begin() as session:
                orders = OrderRepository(session)

                if idempotency_key:
                    existing = orders.get_order_by_idempotency_key(idempotency_key)
                    if existing is not None:
                        logger.info(
                            f"Returning existing order {existing.id} for idempotency key"
                        )
                        return OrderWithItems.model_validate(existing)

                order_row = self._build_order(CatalogRepository(session), request)
                order_row.idempotency_key = idempotency_key
                orders.add_order(order_row)
                result = OrderWithItems.model_validate(order_row)

        except PersistenceError as e:
            # A concurrent request with the same key won the unique constraint
            if idempotency_key and isinstance(e.__cause__, IntegrityError):
                existing_order = self._find_by_idempotency_key(idempotency_key)
                if existing_order is not None:
                    return existing_order
            record_order_failure(type(e).__name__)
            raise
        except OrderServiceError as e:
            logger.warning(f"Order rejected for restaurant {request.restaurant_id}: {e.message}")
            record_order_failure(type(e).__name__)
            raise

        logger.info(
            f"Created order {result.id} for restaurant {result.restaurant_id} "
            f"with {len(result.items)} items, total {result.total}"
        )
        record_order_created(result.restaurant_id, result.total, len(result.items))
        return result

    def _find_by_idempotency_key(self, idempotency_key: str) -> OrderWithItems | None:
        with storage_errors("load order"), self.session_factory() as session:
            row = OrderRepository(session).get_order_by_idempotency_key(idempotency_key)
            return OrderWithItems.model_validate(row) if row is not None else None

    def _build_order(self, catalog: CatalogRepository, request: CreateOrderRequest) -> OrderRow:
        """Resolve a request against the catalog and build unsaved rows.

        Nothing is written here; all checks run before the first insert.
        """
        restaurant = catalog.get_restaurant(request.restaurant_id)
        if restaurant is None:
            raise NotFoundError(f"Restaurant {request.restaurant_id} not found")

        menu_rows = catalog.get_menu_items(item.menu_item_id for item in request.items)
        missing = sorted(
            {
                item.menu_item_id
                for item in request.items
                if item.menu_item_id not in menu_rows
                or menu_rows[item.menu_item_id].restaurant_id != restaurant.id
            }
        )
        if missing:
            raise NotFoundError(
                f"Menu item {', '.join(str(i) for i in missing)} not found",
                details={"menuItemIds": missing},
            )

        total = ZERO
        order_items: list[OrderItemRow] = []
        for item in request.items:
            menu_row = menu_rows[item.menu_item_id]
            unit_price = self._resolve_unit_price(menu_row, item)
            total += unit_price * item.quantity
            order_items.append(
                OrderItemRow(
                    menu_item=menu_row,
                    quantity=item.quantity,
                    price=unit_price,
                    selected_size=item.selected_size.value if item.selected_size else None,
                )
            )

        return OrderRow(
            restaurant=restaurant,
            status=OrderStatus.CONFIRMED.value,
            total=round_money(total),
            delivery_address=request.delivery_address,
            estimated_delivery_time=self.estimated_delivery_time,
            created_at=datetime.now(UTC),
            items=order_items,
        )

    @staticmethod
    def _resolve_unit_price(menu_row: MenuItemRow, item: CreateOrderItem) -> Decimal:
        """Current catalog price for an order line.

        Raises:
            ValidationError: If the item is unavailable or the size does not fit the item
        """
        menu_item = MenuItem.model_validate(menu_row)

        if not menu_item.is_available:
            raise ValidationError(
                f"Menu item {menu_item.id} is not available",
                details={"menuItemId": menu_item.id},
            )

        if menu_item.has_size_options and item.selected_size is None:
            raise ValidationError(
                f"Menu item {menu_item.id} requires a size selection",
                details={"menuItemId": menu_item.id},
            )

        if not menu_item.has_size_options and item.selected_size is not None:
            raise ValidationError(
                f"Menu item {menu_item.id} has no size options",
                details={"menuItemId": menu_item.id},
            )

        return menu_item.unit_price(item.selected_size)

    @traced("get_order")
    async def get_order(self, order_id: int) -> OrderWithItems:
        """Get an order with restaurant and items.

        Args:
            order_id: Order identifier

        Returns:
            The composed order

        Raises:
            NotFoundError: If the order does not exist
        """
        with storage_errors("load order"), self.session_factory() as session:
            row = OrderRepository(session).get_order(order_id)
            if row is None:
                raise NotFoundError(f"Order {order_id} not found")
            return OrderWithItems.model_validate(row)

    @traced("list_orders")
    async def list_orders(self) -> list[OrderWithItems]:
        """List all orders, newest first."""
        with storage_errors("load orders"), self.session_factory() as session:
            rows = OrderRepository(session).list_orders()
            return [OrderWithItems.model_validate(row) for row in rows]

    @traced("update_order_status")
    async def update_status(self, order_id: int, status: str | OrderStatus) -> Order:
        """Move an order to a new status.

        Only the status column changes; total and items stay as created.

        Args:
            order_id: Order identifier
            status: Target status

        Returns:
            The updated order without items

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the order does not exist
            InvalidStatusTransition: If the status would move backwards
        """
        target = parse_status(status)

        with storage_errors("update order status"), self.session_factory.begin() as session:
            orders = OrderRepository(session)
            row = orders.get_order(order_id)
            if row is None:
                raise NotFoundError(f"Order {order_id} not found")

            current = OrderStatus(row.status)
            check_transition(current, target)
            orders.update_status(row, target.value)
            result = Order.model_validate(row)

        logger.info(f"Order {order_id} status changed from {current.value} to {target.value}")
        record_status_transition(target.value)
        return result

    @traced("get_order_tracking")
    async def get_tracking(self, order_id: int) -> list[TrackingStep]:
        """Tracker steps for an order's current status.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self.get_order(order_id)
        return tracking_steps(order.status)

