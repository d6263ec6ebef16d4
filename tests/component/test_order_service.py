"""Component tests for the order service against an in-memory database."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from restaurant_order_service.db.tables import OrderItemRow, OrderRow
from restaurant_order_service.errors import (
    InvalidStatusTransition,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from restaurant_order_service.models.catalog_models import MenuItemUpdate, SizeOption
from restaurant_order_service.models.order_models import (
    CreateOrderItem,
    CreateOrderRequest,
    OrderStatus,
)
from restaurant_order_service.services.catalog_service import CatalogService
from restaurant_order_service.services.order_service import OrderService


def count_rows(session_factory: sessionmaker, table: type) -> int:
    """Count the rows of a table."""
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(table))


@pytest.mark.component
class TestCreateOrder:
    """Test suite for order creation."""

    @pytest.fixture
    def service(self, session_factory: sessionmaker) -> OrderService:
        """Create an order service on the test database."""
        return OrderService(session_factory=session_factory)

    @pytest.mark.asyncio
    async def test_creates_order_with_price_snapshots(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that totals and line prices come from the catalog."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="Calle Principal 12",
            items=[
                CreateOrderItem(menu_item_id=catalog["carbonara"], quantity=2),
                CreateOrderItem(
                    menu_item_id=catalog["margherita"], quantity=1, selected_size=SizeOption.BIG
                ),
            ],
        )

        order = await service.create_order(request)

        assert order.id is not None
        assert order.status == OrderStatus.CONFIRMED
        assert order.total == Decimal("58.97")
        assert order.estimated_delivery_time == "25-35 min"
        assert order.restaurant.name == "Ceiba Cafe Pizzeria"
        assert [(i.menu_item_id, i.quantity, i.price) for i in order.items] == [
            (catalog["carbonara"], 2, Decimal("16.99")),
            (catalog["margherita"], 1, Decimal("24.99")),
        ]
        assert order.items[1].selected_size == SizeOption.BIG
        assert order.items[0].menu_item.name == "Spaghetti Carbonara"

    @pytest.mark.asyncio
    async def test_unknown_menu_item_writes_nothing(
        self, service: OrderService, session_factory: sessionmaker, catalog: dict[str, int]
    ) -> None:
        """Test that one unresolvable item rejects the whole order."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="Calle Principal 12",
            items=[
                CreateOrderItem(menu_item_id=catalog["carbonara"], quantity=1),
                CreateOrderItem(menu_item_id=9999, quantity=1),
            ],
        )

        with pytest.raises(NotFoundError) as exc_info:
            await service.create_order(request)

        assert exc_info.value.details == {"menuItemIds": [9999]}
        assert count_rows(session_factory, OrderRow) == 0
        assert count_rows(session_factory, OrderItemRow) == 0

    @pytest.mark.asyncio
    async def test_unknown_restaurant(self, service: OrderService, catalog: dict[str, int]) -> None:
        """Test that an unknown restaurant is NotFound."""
        request = CreateOrderRequest(
            restaurant_id=9999,
            delivery_address="",
            items=[CreateOrderItem(menu_item_id=catalog["carbonara"], quantity=1)],
        )

        with pytest.raises(NotFoundError, match="Restaurant 9999"):
            await service.create_order(request)

    @pytest.mark.asyncio
    async def test_item_from_other_restaurant(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that items must belong to the ordered restaurant."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="",
            items=[CreateOrderItem(menu_item_id=catalog["taco"], quantity=1)],
        )

        with pytest.raises(NotFoundError):
            await service.create_order(request)

    @pytest.mark.asyncio
    async def test_unavailable_item_rejected(
        self, service: OrderService, session_factory: sessionmaker, catalog: dict[str, int]
    ) -> None:
        """Test that unavailable items cannot be ordered."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="",
            items=[CreateOrderItem(menu_item_id=catalog["mamajuana"], quantity=1)],
        )

        with pytest.raises(ValidationError, match="not available"):
            await service.create_order(request)

        assert count_rows(session_factory, OrderRow) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("item_key", "size", "message"),
        [
            ("margherita", None, "requires a size"),
            ("carbonara", SizeOption.BIG, "no size options"),
        ],
    )
    async def test_size_selection_must_fit_item(
        self,
        service: OrderService,
        catalog: dict[str, int],
        item_key: str,
        size: SizeOption | None,
        message: str,
    ) -> None:
        """Test size validation for sized and unsized items."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="",
            items=[CreateOrderItem(menu_item_id=catalog[item_key], quantity=1, selected_size=size)],
        )

        with pytest.raises(ValidationError, match=message):
            await service.create_order(request)

    @pytest.mark.asyncio
    async def test_catalog_edit_does_not_change_existing_order(
        self, service: OrderService, session_factory: sessionmaker, catalog: dict[str, int]
    ) -> None:
        """Test that later price changes leave stored prices and totals alone."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="Calle 3",
            items=[CreateOrderItem(menu_item_id=catalog["carbonara"], quantity=3)],
        )
        created = await service.create_order(request)

        await CatalogService(session_factory).update_menu_item(
            catalog["carbonara"], MenuItemUpdate(price=Decimal("21.50"))
        )
        reloaded = await service.get_order(created.id)

        assert reloaded.total == Decimal("50.97")
        assert reloaded.items[0].price == Decimal("16.99")
        assert reloaded.items[0].menu_item.price == Decimal("21.50")

    @pytest.mark.asyncio
    async def test_idempotency_key_returns_first_order(
        self, service: OrderService, session_factory: sessionmaker, catalog: dict[str, int]
    ) -> None:
        """Test that a repeated key does not create a duplicate order."""
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="Calle 4",
            items=[CreateOrderItem(menu_item_id=catalog["espresso"], quantity=2)],
        )

        first = await service.create_order(request, idempotency_key="checkout-abc")
        second = await service.create_order(request, idempotency_key="checkout-abc")

        assert second.id == first.id
        assert count_rows(session_factory, OrderRow) == 1

    @pytest.mark.asyncio
    async def test_storage_failure_becomes_persistence_error(self, catalog: dict[str, int]) -> None:
        """Test that database errors surface as PersistenceError."""
        failing_factory = MagicMock()
        failing_factory.begin.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        service = OrderService(session_factory=failing_factory)
        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="",
            items=[CreateOrderItem(menu_item_id=catalog["espresso"], quantity=1)],
        )

        with pytest.raises(PersistenceError, match="Failed to create order"):
            await service.create_order(request)

    @pytest.mark.asyncio
    async def test_failure_after_order_insert_rolls_back_everything(
        self, service: OrderService, session_factory: sessionmaker, catalog: dict[str, int]
    ) -> None:
        """Test that an error while writing items leaves no partial order behind."""
        orders_seen_at_failure: list[int] = []

        def fail_item_insert(mapper, connection, target) -> None:
            orders_seen_at_failure.append(
                connection.scalar(select(func.count()).select_from(OrderRow.__table__))
            )
            raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))

        request = CreateOrderRequest(
            restaurant_id=catalog["pizzeria"],
            delivery_address="Calle 9",
            items=[
                CreateOrderItem(menu_item_id=catalog["carbonara"], quantity=1),
                CreateOrderItem(menu_item_id=catalog["espresso"], quantity=2),
            ],
        )

        event.listen(OrderItemRow, "before_insert", fail_item_insert)
        try:
            with pytest.raises(PersistenceError, match="Failed to create order"):
                await service.create_order(request)
        finally:
            event.remove(OrderItemRow, "before_insert", fail_item_insert)

        assert orders_seen_at_failure == [1]
        assert count_rows(session_factory, OrderRow) == 0
        assert count_rows(session_factory, OrderItemRow) == 0

    def test_quantity_above_limit_rejected(self, catalog: dict[str, int]) -> None:
        """Test that oversized quantities never reach the database."""
        with pytest.raises(PydanticValidationError, match="less than or equal to 999"):
            CreateOrderRequest(
                restaurant_id=catalog["pizzeria"],
                delivery_address="",
                items=[CreateOrderItem(menu_item_id=catalog["espresso"], quantity=10**20)],
            )


@pytest.mark.component
class TestOrderQueriesAndStatus:
    """Test suite for order reads and status updates."""

    @pytest.fixture
    def service(self, session_factory: sessionmaker) -> OrderService:
        """Create an order service on the test database."""
        return OrderService(session_factory=session_factory, estimated_delivery_time="40-50 min")

    async def _place(self, service: OrderService, catalog: dict[str, int], quantity: int = 1):
        return await service.create_order(
            CreateOrderRequest(
                restaurant_id=catalog["pizzeria"],
                delivery_address="Calle 5",
                items=[CreateOrderItem(menu_item_id=catalog["espresso"], quantity=quantity)],
            )
        )

    @pytest.mark.asyncio
    async def test_list_orders_newest_first(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that orders are listed by creation time descending."""
        first = await self._place(service, catalog)
        second = await self._place(service, catalog, quantity=2)
        third = await self._place(service, catalog, quantity=3)

        orders = await service.list_orders()

        assert [o.id for o in orders] == [third.id, second.id, first.id]
        assert orders[0].estimated_delivery_time == "40-50 min"

    @pytest.mark.asyncio
    async def test_created_at_stable_across_reads(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that the creation timestamp reads back unchanged and in UTC."""
        created = await self._place(service, catalog)

        reloaded = await service.get_order(created.id)
        listed = await service.list_orders()

        assert reloaded.created_at == created.created_at
        assert reloaded.created_at.utcoffset() == timedelta(0)
        assert listed[0].created_at == created.created_at
        assert reloaded.model_dump(mode="json", by_alias=True)["createdAt"] == created.model_dump(
            mode="json", by_alias=True
        )["createdAt"]

    @pytest.mark.asyncio
    async def test_trackable_until_delivered(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that orders stop being trackable once delivered."""
        created = await self._place(service, catalog)
        out = await service.update_status(created.id, OrderStatus.OUT_FOR_DELIVERY)
        delivered = await service.update_status(created.id, OrderStatus.DELIVERED)

        assert created.trackable is True
        assert out.trackable is True
        assert delivered.trackable is False
        assert (await service.get_order(created.id)).model_dump(by_alias=True)["trackable"] is False

    @pytest.mark.asyncio
    async def test_get_missing_order(self, service: OrderService, catalog: dict[str, int]) -> None:
        """Test that a missing order is NotFound."""
        with pytest.raises(NotFoundError):
            await service.get_order(4242)

    @pytest.mark.asyncio
    async def test_update_status_changes_only_status(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that a status update leaves total and items untouched."""
        created = await self._place(service, catalog, quantity=2)

        updated = await service.update_status(created.id, "delivered")
        reloaded = await service.get_order(created.id)

        assert updated.status == OrderStatus.DELIVERED
        assert reloaded.status == OrderStatus.DELIVERED
        assert reloaded.total == created.total
        assert reloaded.items == created.items
        assert reloaded.delivery_address == created.delivery_address

    @pytest.mark.asyncio
    async def test_backwards_status_rejected(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test that status cannot move backwards."""
        created = await self._place(service, catalog)
        await service.update_status(created.id, OrderStatus.OUT_FOR_DELIVERY)

        with pytest.raises(InvalidStatusTransition):
            await service.update_status(created.id, OrderStatus.PREPARING)

        reloaded = await service.get_order(created.id)
        assert reloaded.status == OrderStatus.OUT_FOR_DELIVERY

    @pytest.mark.asyncio
    async def test_invalid_status_value(self, service: OrderService, catalog: dict[str, int]) -> None:
        """Test that unknown status strings are rejected."""
        created = await self._place(service, catalog)

        with pytest.raises(ValidationError):
            await service.update_status(created.id, "lost")

    @pytest.mark.asyncio
    async def test_update_status_missing_order(self, service: OrderService) -> None:
        """Test that updating a missing order is NotFound."""
        with pytest.raises(NotFoundError):
            await service.update_status(4242, "preparing")

    @pytest.mark.asyncio
    async def test_tracking_follows_status(
        self, service: OrderService, catalog: dict[str, int]
    ) -> None:
        """Test the tracker for a freshly updated order."""
        created = await self._place(service, catalog)
        await service.update_status(created.id, "preparing")

        steps = await service.get_tracking(created.id)

        assert [s.active for s in steps] == [False, True, False, False]
