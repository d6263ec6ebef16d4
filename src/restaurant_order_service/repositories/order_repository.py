"""SQLAlchemy repository for orders and their items."""

import logging

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, selectinload

from restaurant_order_service.db.tables import OrderItemRow, OrderRow

logger = logging.getLogger(__name__)


def _with_composition(stmt: Select) -> Select:
    """Eager-load restaurant and items joined with menu items."""
    return stmt.options(
        selectinload(OrderRow.restaurant),
        selectinload(OrderRow.items).selectinload(OrderItemRow.menu_item),
    )


class OrderRepository:
    """Repository for order rows.

    Orders are written together with their items and never deleted; only the
    status column is updated after creation.
    """

    def __init__(self, session: Session) -> None:
        """Initialize repository.

        Args:
            session: Active SQLAlchemy session
        """
        self.session = session

    def add_order(self, order: OrderRow) -> OrderRow:
        """Stage an order with its items and assign IDs.

        Args:
            order: Order row with ``items`` populated

        Returns:
            The flushed order row
        """
        self.session.add(order)
        self.session.flush()
        return order

    def get_order(self, order_id: int) -> OrderRow | None:
        """Retrieve an order with restaurant and items loaded.

        Args:
            order_id: Order identifier

        Returns:
            OrderRow if found, None otherwise
        """
        stmt = _with_composition(select(OrderRow).where(OrderRow.id == order_id))
        return self.session.scalars(stmt).first()

    def get_order_by_idempotency_key(self, idempotency_key: str) -> OrderRow | None:
        """Retrieve the order created with an idempotency key.

        Args:
            idempotency_key: Client supplied key

        Returns:
            OrderRow if found, None otherwise
        """
        stmt = _with_composition(
            select(OrderRow).where(OrderRow.idempotency_key == idempotency_key)
        )
        return self.session.scalars(stmt).first()

    def list_orders(self) -> list[OrderRow]:
        """List all orders, newest first.

        Returns:
            list: Orders sorted by creation time descending, ties by ID descending
        """
        stmt = _with_composition(
            select(OrderRow).order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        )
        return list(self.session.scalars(stmt))

    def update_status(self, order: OrderRow, status: str) -> OrderRow:
        """Set the status column of an order.

        Args:
            order: Order row to update
            status: New status value

        Returns:
            The updated row
        """
        order.status = status
        self.session.flush()
        return order
