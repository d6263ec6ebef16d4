"""Relational schema for restaurants, menu items, orders and order items."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import relationship

from restaurant_order_service.db.database import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class UtcDateTime(TypeDecorator):
    """Timezone-aware UTC timestamps on every backend.

    SQLite stores datetimes without an offset, so values are converted to UTC
    on the way in and naive values read back are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    @staticmethod
    def _as_utc(value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        return self._as_utc(value)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        return self._as_utc(value)


class RestaurantRow(Base):
    """Restaurants offering menus."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    cuisine = Column(Text, nullable=False)
    rating = Column(Numeric(2, 1), nullable=False)
    delivery_time = Column(Text, nullable=False)
    delivery_fee = Column(Numeric(4, 2), nullable=False)
    image = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    is_open = Column(Boolean, nullable=False, default=True)

    menu_items = relationship("MenuItemRow", back_populates="restaurant")

    def __repr__(self) -> str:
        return f"<RestaurantRow(id={self.id}, name='{self.name}')>"


class MenuItemRow(Base):
    """Individual menu items."""

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(6, 2), nullable=False)
    regular_price = Column(Numeric(6, 2), nullable=True)
    big_price = Column(Numeric(6, 2), nullable=True)
    has_size_options = Column(Boolean, nullable=False, default=False)
    image = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False, index=True)
    is_available = Column(Boolean, nullable=False, default=True)

    restaurant = relationship("RestaurantRow", back_populates="menu_items")

    def __repr__(self) -> str:
        return f"<MenuItemRow(id={self.id}, name='{self.name}', price={self.price})>"


class OrderRow(Base):
    """Customer orders. ``total`` is written once at creation."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="confirmed", index=True)
    total = Column(Numeric(12, 2), nullable=False)
    delivery_address = Column(Text, nullable=False)
    estimated_delivery_time = Column(Text, nullable=False)
    created_at = Column(UtcDateTime, nullable=False, default=utc_now, index=True)
    idempotency_key = Column(String(128), nullable=True, unique=True)

    restaurant = relationship("RestaurantRow")
    items = relationship(
        "OrderItemRow",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.id",
    )

    def __repr__(self) -> str:
        return f"<OrderRow(id={self.id}, status='{self.status}', total={self.total})>"


class OrderItemRow(Base):
    """Order lines holding the unit price at order time."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(6, 2), nullable=False)
    selected_size = Column(String(16), nullable=True)

    order = relationship("OrderRow", back_populates="items")
    menu_item = relationship("MenuItemRow")

    def __repr__(self) -> str:
        return f"<OrderItemRow(id={self.id}, order_id={self.order_id}, qty={self.quantity})>"
