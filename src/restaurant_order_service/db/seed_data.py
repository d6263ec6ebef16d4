"""Demo catalog loaded into an empty database."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from restaurant_order_service.db.tables import MenuItemRow, RestaurantRow

logger = logging.getLogger(__name__)

_IMAGE_BASE = "https://images.unsplash.com"
_IMAGE_PARAMS = "ixlib=rb-4.0.3&auto=format&fit=crop&w=400&h=400"

DEMO_RESTAURANT = {
    "name": "Ceiba Cafe Pizzeria",
    "cuisine": "Italian • Caribbean • Pizza • Pasta",
    "rating": Decimal("4.9"),
    "delivery_time": "30-45 min",
    "delivery_fee": Decimal("0.00"),
    "image": f"{_IMAGE_BASE}/photo-1513104890138-7c749659a591?ixlib=rb-4.0.3&auto=format&fit=crop&w=1200&h=600",
    "category": "pizza",
    "is_open": True,
}

# (name, description, category, price, regular_price, big_price, image id)
DEMO_MENU = [
    ("Margherita Classica", "Fresh mozzarella, San Marzano tomatoes, basil, extra virgin olive oil",
     "pizzas", "18.99", "18.99", "24.99", "photo-1604382354936-07c5d9983bd3"),
    ("Pepperoni Supreme", "Premium pepperoni, mozzarella, tomato sauce",
     "pizzas", "21.99", "21.99", "27.99", "photo-1565299624946-b28f40a0ca4b"),
    ("Caribbean Jerk Chicken", "Jerk chicken, pineapple, red onions, mozzarella, BBQ sauce",
     "pizzas", "24.99", "24.99", "30.99", "photo-1571407970349-bc81e7e96d47"),
    ("Quattro Stagioni", "Mushrooms, artichokes, ham, olives, mozzarella",
     "pizzas", "22.99", "22.99", "28.99", "photo-1590947132387-155cc02f3212"),
    ("Tropical Seafood", "Shrimp, calamari, mussels, garlic, white sauce",
     "pizzas", "26.99", "26.99", "32.99", "photo-1513104890138-7c749659a591"),
    ("Spaghetti Carbonara", "Traditional Roman pasta with pancetta, eggs, pecorino",
     "pastas", "16.99", None, None, "photo-1621996346565-e3dbc353d2e5"),
    ("Penne Arrabbiata", "Spicy tomato sauce with garlic and red peppers",
     "pastas", "14.99", None, None, "photo-1572441713132-51c75654db73"),
    ("Fettuccine Alfredo", "Creamy parmesan sauce with fresh herbs",
     "pastas", "15.99", None, None, "photo-1555949258-eb67b1ef0ceb"),
    ("Linguine alle Vongole", "Fresh clams in white wine and garlic sauce",
     "pastas", "19.99", None, None, "photo-1563379091339-03246963d96c"),
    ("Caesar Salad", "Romaine lettuce, parmesan, croutons, Caesar dressing",
     "salads", "12.99", None, None, "photo-1546793665-c74683f339c1"),
    ("Tropical Mango Salad", "Mixed greens, mango, avocado, passion fruit vinaigrette",
     "salads", "13.99", None, None, "photo-1540420773420-3366772f4999"),
    ("Caprese Salad", "Fresh mozzarella, tomatoes, basil, balsamic glaze",
     "salads", "14.99", None, None, "photo-1608897013039-887f21d8c804"),
    ("Fresh Coconut Water", "Straight from the coconut, naturally refreshing",
     "drinks", "4.99", None, None, "photo-1600271886742-f049cd451bba"),
    ("Passion Fruit Juice", "Fresh squeezed tropical passion fruit",
     "drinks", "5.99", None, None, "photo-1622597467836-f3285f2131b8"),
    ("Italian Espresso", "Authentic Italian espresso, rich and bold",
     "drinks", "3.99", None, None, "photo-1510707577719-ae7c14805e3a"),
    ("Mamajuana Cocktail", "Traditional Dominican cocktail with honey and spices",
     "drinks", "8.99", None, None, "photo-1551538827-9c037cb4f32a"),
]


def _menu_item_row(entry: tuple) -> MenuItemRow:
    name, description, category, price, regular_price, big_price, image_id = entry
    return MenuItemRow(
        name=name,
        description=description,
        category=category,
        price=Decimal(price),
        regular_price=Decimal(regular_price) if regular_price else None,
        big_price=Decimal(big_price) if big_price else None,
        has_size_options=regular_price is not None,
        image=f"{_IMAGE_BASE}/{image_id}?{_IMAGE_PARAMS}",
        is_available=True,
    )


def seed_demo_data(session_factory: sessionmaker) -> bool:
    """Load the demo restaurant and menu when no restaurant exists yet.

    Args:
        session_factory: Factory for database sessions

    Returns:
        True if data was inserted, False if the catalog was already populated
    """
    with session_factory.begin() as session:
        if session.scalars(select(RestaurantRow.id).limit(1)).first() is not None:
            logger.info("Catalog already populated, skipping demo seed")
            return False

        restaurant = RestaurantRow(**DEMO_RESTAURANT)
        restaurant.menu_items = [_menu_item_row(entry) for entry in DEMO_MENU]
        session.add(restaurant)

    logger.info(f"Seeded demo restaurant '{DEMO_RESTAURANT['name']}' with {len(DEMO_MENU)} menu items")
    return True
