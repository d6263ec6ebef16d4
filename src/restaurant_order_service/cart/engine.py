"""Shopping cart state and pricing derivations.

A Cart is a plain object owned by one customer session. It holds line
snapshots of menu items and derives subtotal, tax, delivery fee and total
with Decimal arithmetic. Cart operations never raise: non-positive
quantities become removals and unknown IDs are ignored.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from restaurant_order_service.cart.pricing import (
    DEFAULT_DELIVERY_FEES,
    DEFAULT_DELIVERY_LOCATION,
    ZERO,
    round_money,
)
from restaurant_order_service.models.catalog_models import MenuItem, SizeOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartPolicy:
    """Pricing configuration applied by a cart.

    Attributes:
        tax_rate: Fraction of the subtotal charged as tax (0 folds tax into prices)
        delivery_fees: Delivery fee by location key
        default_location: Location selected for a new cart
    """

    tax_rate: Decimal = ZERO
    delivery_fees: dict[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_DELIVERY_FEES))
    default_location: str = DEFAULT_DELIVERY_LOCATION


@dataclass
class CartLine:
    """One (menu item, size) grouping in the cart.

    Attributes:
        menu_item: Snapshot of the menu item taken when it was added
        quantity: Number of units, always at least 1
        selected_size: Size variant, set only for items with size options
    """

    menu_item: MenuItem
    quantity: int = 1
    selected_size: SizeOption | None = None

    @property
    def unit_price(self) -> Decimal:
        return self.menu_item.unit_price(self.selected_size)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def _normalize_size(menu_item: MenuItem, selected_size: SizeOption | str | None) -> SizeOption | None:
    if not menu_item.has_size_options:
        return None
    if selected_size is None:
        return SizeOption.REGULAR
    try:
        return SizeOption(selected_size)
    except ValueError:
        logger.warning(f"Unknown size {selected_size!r} for menu item {menu_item.id}, using regular")
        return SizeOption.REGULAR


class Cart:
    """Mutable shopping cart for a single session."""

    def __init__(self, policy: CartPolicy | None = None) -> None:
        """Create an empty, closed cart.

        Args:
            policy: Pricing configuration (defaults to no tax and the standard fee schedule)
        """
        self.policy = policy or CartPolicy()
        self.lines: list[CartLine] = []
        self.is_open = False
        self.delivery_location = self.policy.default_location

    def _matches(self, line: CartLine, menu_item_id: int, selected_size: SizeOption | str | None) -> bool:
        if line.menu_item.id != menu_item_id:
            return False
        return selected_size is None or line.selected_size == selected_size

    def add_item(self, menu_item: MenuItem, selected_size: SizeOption | str | None = None) -> CartLine:
        """Add one unit of a menu item.

        Lines merge on (menu item ID, size): adding an existing pair increments
        its quantity instead of creating a new line.

        Args:
            menu_item: Menu item snapshot
            selected_size: Size for items with size options (defaults to regular)

        Returns:
            The created or incremented line
        """
        size = _normalize_size(menu_item, selected_size)
        for line in self.lines:
            if line.menu_item.id == menu_item.id and line.selected_size == size:
                line.quantity += 1
                return line

        line = CartLine(menu_item=menu_item, quantity=1, selected_size=size)
        self.lines.append(line)
        return line

    def remove_item(self, menu_item_id: int, selected_size: SizeOption | str | None = None) -> None:
        """Remove lines for a menu item.

        Without a size every variant of the item is removed; with a size only
        that variant is.

        Args:
            menu_item_id: Menu item ID
            selected_size: Optional size variant to scope the removal
        """
        self.lines = [
            line for line in self.lines if not self._matches(line, menu_item_id, selected_size)
        ]

    def update_quantity(
        self,
        menu_item_id: int,
        quantity: int,
        selected_size: SizeOption | str | None = None,
    ) -> None:
        """Set the quantity of the matching line(s).

        A quantity of zero or less removes the line(s). Scoping by size works
        as in ``remove_item``.

        Args:
            menu_item_id: Menu item ID
            quantity: New quantity
            selected_size: Optional size variant to scope the update
        """
        if quantity <= 0:
            self.remove_item(menu_item_id, selected_size)
            return

        for line in self.lines:
            if self._matches(line, menu_item_id, selected_size):
                line.quantity = quantity

    def clear_cart(self) -> None:
        self.lines = []

    def open_cart(self) -> None:
        self.is_open = True

    def close_cart(self) -> None:
        self.is_open = False

    def toggle_cart(self) -> None:
        self.is_open = not self.is_open

    def set_delivery_location(self, location: str) -> None:
        self.delivery_location = location.strip().lower()

    def is_empty(self) -> bool:
        return not self.lines

    def get_subtotal(self) -> Decimal:
        """Exact sum of unit price times quantity over all lines."""
        return sum((line.line_total for line in self.lines), ZERO)

    def get_tax(self) -> Decimal:
        """Tax on the subtotal at the policy rate, rounded to cents."""
        if not self.policy.tax_rate:
            return ZERO
        return round_money(self.get_subtotal() * self.policy.tax_rate)

    def get_delivery_fee(self, location: str | None = None) -> Decimal:
        """Delivery fee for a location; unknown locations are free.

        Args:
            location: Location key (defaults to the cart's delivery location)

        Returns:
            Fee as Decimal
        """
        key = (location or self.delivery_location).strip().lower()
        return self.policy.delivery_fees.get(key, ZERO)

    def get_total(self, location: str | None = None) -> Decimal:
        """Subtotal plus tax plus the delivery fee for the location."""
        return self.get_subtotal() + self.get_tax() + self.get_delivery_fee(location)

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self.lines)
