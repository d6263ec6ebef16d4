"""SQLAlchemy repository for restaurants and menu items.

Repositories work inside a session owned by the calling service, so that
several repository calls can share one transaction. Lookups return None for
missing rows; database errors propagate to the service.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from restaurant_order_service.db.tables import MenuItemRow, OrderItemRow, RestaurantRow

logger = logging.getLogger(__name__)


class CatalogRepository:
    """Repository for restaurant and menu item rows."""

    def __init__(self, session: Session) -> None:
        """Initialize repository.

        Args:
            session: Active SQLAlchemy session
        """
        self.session = session

    def get_restaurant(self, restaurant_id: int) -> RestaurantRow | None:
        """Retrieve a restaurant by ID.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            RestaurantRow if found, None otherwise
        """
        return self.session.get(RestaurantRow, restaurant_id)

    def list_restaurants(
        self, category: str | None = None, search: str | None = None
    ) -> list[RestaurantRow]:
        """List restaurants, optionally filtered.

        A search term matches name or cuisine case-insensitively and takes
        precedence over the category filter.

        Args:
            category: Optional category tag to filter by
            search: Optional search term

        Returns:
            list: Matching restaurants ordered by ID
        """
        stmt = select(RestaurantRow).order_by(RestaurantRow.id)

        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(RestaurantRow.name).like(pattern),
                    func.lower(RestaurantRow.cuisine).like(pattern),
                )
            )
        elif category:
            stmt = stmt.where(RestaurantRow.category == category)

        return list(self.session.scalars(stmt))

    def list_menu_items(self, restaurant_id: int, category: str | None = None) -> list[MenuItemRow]:
        """List menu items of a restaurant.

        Args:
            restaurant_id: Restaurant identifier
            category: Optional category tag to filter by

        Returns:
            list: Menu items ordered by ID (empty list if none found)
        """
        stmt = (
            select(MenuItemRow)
            .where(MenuItemRow.restaurant_id == restaurant_id)
            .order_by(MenuItemRow.id)
        )
        if category:
            stmt = stmt.where(MenuItemRow.category == category)

        return list(self.session.scalars(stmt))

    def get_menu_item(self, menu_item_id: int) -> MenuItemRow | None:
        """Retrieve a menu item by ID.

        Args:
            menu_item_id: Menu item identifier

        Returns:
            MenuItemRow if found, None otherwise
        """
        return self.session.get(MenuItemRow, menu_item_id)

    def get_menu_items(self, menu_item_ids: Iterable[int]) -> dict[int, MenuItemRow]:
        """Retrieve several menu items in one query.

        Args:
            menu_item_ids: Menu item identifiers

        Returns:
            dict: Found rows keyed by ID; missing IDs are absent
        """
        ids = set(menu_item_ids)
        if not ids:
            return {}

        rows = self.session.scalars(select(MenuItemRow).where(MenuItemRow.id.in_(ids)))
        return {row.id: row for row in rows}

    def add_restaurant(self, restaurant: RestaurantRow) -> RestaurantRow:
        """Stage a new restaurant and assign its ID.

        Args:
            restaurant: Row to insert

        Returns:
            The flushed row
        """
        self.session.add(restaurant)
        self.session.flush()
        return restaurant

    def add_menu_item(self, menu_item: MenuItemRow) -> MenuItemRow:
        """Stage a new menu item and assign its ID.

        Args:
            menu_item: Row to insert

        Returns:
            The flushed row
        """
        self.session.add(menu_item)
        self.session.flush()
        return menu_item

    def delete_menu_item(self, menu_item: MenuItemRow) -> None:
        """Delete a menu item row.

        Args:
            menu_item: Row to delete
        """
        self.session.delete(menu_item)
        self.session.flush()

    def is_menu_item_ordered(self, menu_item_id: int) -> bool:
        """Check whether any order line references a menu item.

        Args:
            menu_item_id: Menu item identifier

        Returns:
            bool: True if at least one order item references it
        """
        stmt = select(OrderItemRow.id).where(OrderItemRow.menu_item_id == menu_item_id).limit(1)
        return self.session.scalars(stmt).first() is not None
