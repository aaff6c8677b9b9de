"""Tests for whole-catalog snapshots and bulk writes."""

import pytest

from recipe_costing.models.enums import RecipeCategory, RefKind, Unit
from recipe_costing.services import catalog_service, costing, recipe_service


def _snapshot():
    butter = costing.Ingredient("ing_b", "Butter", Unit.GRAM, 250, 2.5, supplier="Dairy")
    sauce = costing.Recipe(
        "rec_s",
        "Sauce",
        500,
        Unit.GRAM,
        [costing.RecipeLine(costing.IngredientRef("ing_b"), 50, Unit.GRAM, id="line_1")],
        category=RecipeCategory.SUB_RECIPE,
        updated_at="2025-01-31T09:15:00.000Z",
    )
    plate = costing.MenuItem(
        "menu_p",
        "Plate",
        2,
        price=7.5,
        lines=[costing.RecipeLine(costing.RecipeRef("rec_s"), 100, Unit.GRAM, id="line_2")],
    )
    return costing.Catalog(ingredients=[butter], recipes=[sauce], menu_items=[plate])


class TestLoadCatalog:
    def test_empty(self, test_db):
        catalog = catalog_service.load_catalog()
        assert catalog.is_empty

    def test_records_mirror_rows(self, test_db, pancakes, batter, flour):
        catalog = catalog_service.load_catalog()

        assert {i.name for i in catalog.ingredients} == {"Flour", "Milk", "Eggs"}
        recipe = catalog.find_recipe(batter.id)
        assert recipe.category is RecipeCategory.SUB_RECIPE
        assert recipe.lines[0].ref == costing.IngredientRef(flour.id)
        assert recipe.updated_at.endswith("Z")

        item = catalog.find_menu_item(pancakes.id)
        assert item.lines[0].ref.kind is RefKind.RECIPE
        assert item.price == pytest.approx(4.0)

    def test_counts(self, test_db, pancakes):
        assert catalog_service.get_catalog_counts() == {
            "ingredients": 3,
            "recipes": 1,
            "menu_items": 1,
        }


class TestReplaceCatalog:
    def test_replace_keeps_ids(self, test_db, pancakes):
        counts = catalog_service.replace_catalog(_snapshot())

        assert counts == {"ingredients": 1, "recipes": 1, "menu_items": 1}
        catalog = catalog_service.load_catalog()
        assert [i.id for i in catalog.ingredients] == ["ing_b"]
        assert catalog.recipes[0].lines[0].id == "line_1"
        assert catalog.recipes[0].updated_at == "2025-01-31T09:15:00.000Z"
        assert catalog.find_menu_item(pancakes.id) is None

    def test_replaced_catalog_costs(self, test_db):
        from recipe_costing.services import menu_item_service

        catalog_service.replace_catalog(_snapshot())

        # 50 g butter at 0.01/g over 500 g -> 0.001/g; 100 g over 2 servings
        result = menu_item_service.calculate_menu_item_cost("menu_p")
        assert result.cost_per_serving == pytest.approx(0.05)

    def test_duplicate_ids_in_snapshot_stored_once(self, test_db):
        salt = costing.Ingredient("ing_x", "Salt", Unit.GRAM, 1000, 0.5)
        counts = catalog_service.replace_catalog(costing.Catalog(ingredients=[salt, salt]))
        assert counts["ingredients"] == 1


class TestMergeCatalog:
    def test_merge_adds_new_and_skips_existing(self, test_db):
        catalog_service.replace_catalog(_snapshot())
        extra = costing.Ingredient("ing_new", "Pepper", Unit.GRAM, 100, 4.0)
        renamed = costing.Ingredient("ing_b", "Other butter", Unit.GRAM, 1, 1)

        summary = catalog_service.merge_catalog(costing.Catalog(ingredients=[renamed, extra]))

        assert summary["ingredients"]["added"] == 1
        assert summary["ingredients"]["skipped_names"] == ["Other butter"]
        assert summary["recipes"] == {"added": 0, "skipped": 0, "skipped_names": []}
        names = {i.name for i in catalog_service.load_catalog().ingredients}
        assert names == {"Butter", "Pepper"}


class TestClearCatalog:
    def test_clear_everything(self, test_db, pancakes):
        deleted = catalog_service.clear_catalog()

        assert deleted == {"ingredients": 3, "recipes": 1, "menu_items": 1}
        assert catalog_service.load_catalog().is_empty

    def test_clear_only_menu_items(self, test_db, pancakes, batter):
        catalog_service.clear_catalog(ingredients=False, recipes=False)

        counts = catalog_service.get_catalog_counts()
        assert counts["menu_items"] == 0
        assert counts["recipes"] == 1
        assert len(recipe_service.get_recipe(batter.id).lines) == 3
