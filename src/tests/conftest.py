"""Pytest configuration and fixtures for Recipe Costing tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker

from recipe_costing.models.base import Base
from recipe_costing.utils.config import reset_config


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    import recipe_costing.models  # noqa: F401  (registers tables)
    import recipe_costing.services.database as db_module

    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from default configuration."""
    monkeypatch.delenv("RECIPE_COSTING_TARGET_FOOD_COST", raising=False)
    monkeypatch.delenv("RECIPE_COSTING_DB", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(scope="function")
def flour(test_db):
    """1 kg of flour for 1.20 (0.0012 per g)."""
    from recipe_costing.services import ingredient_service

    return ingredient_service.create_ingredient(
        {"name": "Flour", "unit": "g", "pack_size": 1000, "pack_cost": 1.20, "supplier": "Mill Co"}
    )


@pytest.fixture(scope="function")
def milk(test_db):
    """1 l of milk for 1.00 (0.001 per ml)."""
    from recipe_costing.services import ingredient_service

    return ingredient_service.create_ingredient(
        {"name": "Milk", "unit": "ml", "pack_size": 1000, "pack_cost": 1.00}
    )


@pytest.fixture(scope="function")
def eggs(test_db):
    """A dozen eggs for 3.00 (0.25 per pc)."""
    from recipe_costing.services import ingredient_service

    return ingredient_service.create_ingredient(
        {"name": "Eggs", "unit": "pc", "pack_size": 12, "pack_cost": 3.00}
    )


@pytest.fixture(scope="function")
def batter(test_db, flour, milk, eggs):
    """Batter sub-recipe: 500 g flour, 500 ml milk, 2 eggs -> 1000 g."""
    from recipe_costing.services import recipe_service

    return recipe_service.create_recipe(
        {"name": "Batter", "category": "SubRecipe", "yield_qty": 1000, "yield_unit": "g"},
        [
            {"ingredient_id": flour.id, "qty": 500, "unit": "g"},
            {"ingredient_id": milk.id, "qty": 500, "unit": "ml"},
            {"ingredient_id": eggs.id, "qty": 2, "unit": "pc"},
        ],
    )


@pytest.fixture(scope="function")
def pancakes(test_db, batter):
    """Pancake menu item: 300 g batter over 2 servings, sold at 4.00."""
    from recipe_costing.services import menu_item_service

    return menu_item_service.create_menu_item(
        {"name": "Pancakes", "servings": 2, "price": 4.00},
        [{"recipe_id": batter.id, "qty": 300, "unit": "g"}],
    )
