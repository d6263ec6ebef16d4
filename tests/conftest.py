"""Shared pytest fixtures and configuration for all tests."""

import os

# Entry point modules skip building the real application in test mode
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import Iterator  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import Engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from restaurant_order_service.db.database import (  # noqa: E402
    create_db_engine,
    create_session_factory,
    init_db,
)
from restaurant_order_service.db.tables import MenuItemRow, RestaurantRow  # noqa: E402
from restaurant_order_service.models.catalog_models import MenuItem  # noqa: E402


@pytest.fixture
def engine() -> Iterator[Engine]:
    """Fixture providing an in-memory SQLite engine with the schema created."""
    db_engine = create_db_engine("sqlite://")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    """Fixture providing a session factory bound to the test engine."""
    return create_session_factory(engine)


@pytest.fixture
def catalog(session_factory: sessionmaker) -> dict[str, int]:
    """Fixture seeding two restaurants and a small menu.

    Returns:
        IDs keyed by a short name
    """
    with session_factory.begin() as session:
        pizzeria = RestaurantRow(
            name="Ceiba Cafe Pizzeria",
            cuisine="Italian • Caribbean • Pizza • Pasta",
            rating=Decimal("4.9"),
            delivery_time="30-45 min",
            delivery_fee=Decimal("0.00"),
            image="https://example.com/pizzeria.jpg",
            category="pizza",
            is_open=True,
        )
        taqueria = RestaurantRow(
            name="Taqueria Sosua",
            cuisine="Mexican • Tacos",
            rating=Decimal("4.5"),
            delivery_time="20-30 min",
            delivery_fee=Decimal("1.50"),
            image="https://example.com/taqueria.jpg",
            category="mexican",
            is_open=True,
        )
        margherita = MenuItemRow(
            name="Margherita Classica",
            description="Fresh mozzarella, tomatoes, basil",
            category="pizzas",
            price=Decimal("18.99"),
            regular_price=Decimal("18.99"),
            big_price=Decimal("24.99"),
            has_size_options=True,
            image="https://example.com/margherita.jpg",
        )
        carbonara = MenuItemRow(
            name="Spaghetti Carbonara",
            description="Pancetta, eggs, pecorino",
            category="pastas",
            price=Decimal("16.99"),
        )
        espresso = MenuItemRow(
            name="Italian Espresso",
            description="Rich and bold",
            category="drinks",
            price=Decimal("3.99"),
        )
        mamajuana = MenuItemRow(
            name="Mamajuana Cocktail",
            description="Honey and spices",
            category="drinks",
            price=Decimal("8.99"),
            is_available=False,
        )
        taco = MenuItemRow(
            name="Taco al Pastor",
            description="Pork, pineapple, cilantro",
            category="tacos",
            price=Decimal("3.50"),
        )
        pizzeria.menu_items = [margherita, carbonara, espresso, mamajuana]
        taqueria.menu_items = [taco]
        session.add_all([pizzeria, taqueria])
        session.flush()

        return {
            "pizzeria": pizzeria.id,
            "taqueria": taqueria.id,
            "margherita": margherita.id,
            "carbonara": carbonara.id,
            "espresso": espresso.id,
            "mamajuana": mamajuana.id,
            "taco": taco.id,
        }


@pytest.fixture
def margherita_item() -> MenuItem:
    """Fixture providing a sized menu item snapshot."""
    return MenuItem(
        id=1,
        restaurant_id=1,
        name="Margherita Classica",
        category="pizzas",
        price=Decimal("18.99"),
        regular_price=Decimal("18.99"),
        big_price=Decimal("24.99"),
        has_size_options=True,
    )


@pytest.fixture
def carbonara_item() -> MenuItem:
    """Fixture providing an unsized menu item snapshot."""
    return MenuItem(
        id=2,
        restaurant_id=1,
        name="Spaghetti Carbonara",
        category="pastas",
        price=Decimal("16.99"),
    )


@pytest.fixture
def espresso_item() -> MenuItem:
    """Fixture providing a cheap unsized menu item snapshot."""
    return MenuItem(
        id=3,
        restaurant_id=1,
        name="Italian Espresso",
        category="drinks",
        price=Decimal("3.99"),
    )
