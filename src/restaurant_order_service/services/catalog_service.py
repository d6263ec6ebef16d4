"""Catalog service for restaurant and menu item reads and admin edits."""

import logging

from sqlalchemy.orm import sessionmaker

from restaurant_order_service.db.tables import MenuItemRow
from restaurant_order_service.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    storage_errors,
)
from restaurant_order_service.models.catalog_models import (
    MenuItem,
    MenuItemCreate,
    MenuItemUpdate,
    Restaurant,
    check_size_prices,
)
from restaurant_order_service.observability import traced
from restaurant_order_service.repositories.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

# Category value the UI sends for "no filter"
ALL_CATEGORIES = "all"


class CatalogService:
    """Service for the restaurant/menu catalog.

    Reads back the customer menu pages and the order service's lookups;
    writes back the admin dashboard's menu management.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the CatalogService.

        Args:
            session_factory: Factory for database sessions
        """
        self.session_factory = session_factory

    async def list_restaurants(
        self, category: str | None = None, search: str | None = None
    ) -> list[Restaurant]:
        """List restaurants filtered by search term or category.

        Args:
            category: Optional category tag; "all" means no filter
            search: Optional search term matched against name and cuisine

        Returns:
            List of restaurants
        """
        if category == ALL_CATEGORIES:
            category = None

        with storage_errors("load restaurants"), self.session_factory() as session:
            rows = CatalogRepository(session).list_restaurants(category=category, search=search)
            return [Restaurant.model_validate(row) for row in rows]

    async def get_restaurant(self, restaurant_id: int) -> Restaurant:
        """Get a restaurant by ID.

        Raises:
            NotFoundError: If the restaurant does not exist
        """
        with storage_errors("load restaurant"), self.session_factory() as session:
            row = CatalogRepository(session).get_restaurant(restaurant_id)
            if row is None:
                raise NotFoundError(f"Restaurant {restaurant_id} not found")
            return Restaurant.model_validate(row)

    async def get_menu(self, restaurant_id: int, category: str | None = None) -> list[MenuItem]:
        """List the menu items of a restaurant, optionally for one category.

        Args:
            restaurant_id: Restaurant identifier
            category: Optional category tag

        Returns:
            List of menu items (empty for unknown restaurants)
        """
        if category == ALL_CATEGORIES:
            category = None

        with storage_errors("load menu"), self.session_factory() as session:
            rows = CatalogRepository(session).list_menu_items(restaurant_id, category=category)
            return [MenuItem.model_validate(row) for row in rows]

    async def get_menu_item(self, menu_item_id: int) -> MenuItem:
        """Get a menu item by ID.

        Raises:
            NotFoundError: If the menu item does not exist
        """
        with storage_errors("load menu item"), self.session_factory() as session:
            row = CatalogRepository(session).get_menu_item(menu_item_id)
            if row is None:
                raise NotFoundError(f"Menu item {menu_item_id} not found")
            return MenuItem.model_validate(row)

    async def get_menu_items(self, menu_item_ids: list[int]) -> dict[int, MenuItem]:
        """Resolve several menu items at once.

        Args:
            menu_item_ids: Menu item identifiers

        Returns:
            Found items keyed by ID; unknown IDs are absent
        """
        with storage_errors("load menu items"), self.session_factory() as session:
            rows = CatalogRepository(session).get_menu_items(menu_item_ids)
            return {item_id: MenuItem.model_validate(row) for item_id, row in rows.items()}

    @traced("create_menu_item")
    async def create_menu_item(self, payload: MenuItemCreate) -> MenuItem:
        """Create a menu item.

        Raises:
            NotFoundError: If the owning restaurant does not exist
        """
        with storage_errors("create menu item"), self.session_factory.begin() as session:
            catalog = CatalogRepository(session)
            if catalog.get_restaurant(payload.restaurant_id) is None:
                raise NotFoundError(f"Restaurant {payload.restaurant_id} not found")

            row = catalog.add_menu_item(MenuItemRow(**payload.model_dump()))
            result = MenuItem.model_validate(row)

        logger.info(f"Created menu item {result.id} '{result.name}'")
        return result

    @traced("update_menu_item")
    async def update_menu_item(self, menu_item_id: int, payload: MenuItemUpdate) -> MenuItem:
        """Apply a partial update to a menu item.

        Existing orders keep their price snapshots; only future orders and
        carts see the new values.

        Raises:
            NotFoundError: If the menu item does not exist
            ValidationError: If the merged item violates the size price rule
        """
        changes = payload.model_dump(exclude_unset=True)

        with storage_errors("update menu item"), self.session_factory.begin() as session:
            row = CatalogRepository(session).get_menu_item(menu_item_id)
            if row is None:
                raise NotFoundError(f"Menu item {menu_item_id} not found")

            for field_name, value in changes.items():
                # Required columns ignore explicit nulls
                if value is None and field_name not in ("regular_price", "big_price"):
                    continue
                setattr(row, field_name, value)

            try:
                check_size_prices(row.has_size_options, row.regular_price, row.big_price)
            except ValueError as e:
                raise ValidationError(str(e)) from e

            session.flush()
            result = MenuItem.model_validate(row)

        logger.info(f"Updated menu item {menu_item_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return result

    @traced("delete_menu_item")
    async def delete_menu_item(self, menu_item_id: int) -> None:
        """Delete a menu item that no order references.

        Raises:
            NotFoundError: If the menu item does not exist
            ConflictError: If order history references the item
        """
        with storage_errors("delete menu item"), self.session_factory.begin() as session:
            catalog = CatalogRepository(session)
            row = catalog.get_menu_item(menu_item_id)
            if row is None:
                raise NotFoundError(f"Menu item {menu_item_id} not found")

            if catalog.is_menu_item_ordered(menu_item_id):
                raise ConflictError(
                    f"Menu item {menu_item_id} is referenced by existing orders; "
                    "mark it unavailable instead"
                )

            catalog.delete_menu_item(row)

        logger.info(f"Deleted menu item {menu_item_id}")
