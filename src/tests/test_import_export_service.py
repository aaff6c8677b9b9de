"""Tests for the JSON catalog document import/export."""

import json

import pytest

from recipe_costing.models.enums import RecipeCategory, RefKind, Unit
from recipe_costing.services import catalog_service, costing
from recipe_costing.services.exceptions import ImportFormatError
from recipe_costing.services.import_export_service import (
    ImportResult,
    catalog_to_document,
    default_export_filename,
    document_to_catalog,
    export_catalog_to_file,
    export_json,
    import_catalog_from_file,
    import_json,
    load_document_or_default,
)

EXPORTED_AT = "2025-02-01T10:00:00.000Z"


def _document(**overrides):
    document = {
        "schemaVersion": 1,
        "exportedAt": EXPORTED_AT,
        "ingredients": [
            {
                "id": "ing_f",
                "name": "Flour",
                "unit": "g",
                "packSize": 1000,
                "packCost": 1.2,
                "supplier": "Mill Co",
                "updatedAt": EXPORTED_AT,
            }
        ],
        "recipes": [
            {
                "id": "rec_d",
                "name": "Dough",
                "category": "SubRecipe",
                "yieldQty": 500,
                "yieldUnit": "g",
                "updatedAt": EXPORTED_AT,
                "lines": [
                    {
                        "id": "line_a",
                        "ref": {"kind": "ingredient", "ingredientId": "ing_f"},
                        "qty": 400,
                        "unit": "g",
                    }
                ],
            }
        ],
        "menuItems": [
            {
                "id": "menu_b",
                "name": "Bread",
                "servings": 4,
                "price": 3.5,
                "updatedAt": EXPORTED_AT,
                "lines": [
                    {
                        "id": "line_b",
                        "ref": {"kind": "recipe", "recipeId": "rec_d"},
                        "qty": 500,
                        "unit": "g",
                    }
                ],
            }
        ],
    }
    document.update(overrides)
    return document


class TestDocumentToCatalog:
    def test_reads_all_entries(self):
        catalog = document_to_catalog(_document())

        flour = catalog.ingredients[0]
        assert flour.unit is Unit.GRAM
        assert flour.supplier == "Mill Co"
        assert flour.notes is None

        dough = catalog.recipes[0]
        assert dough.category is RecipeCategory.SUB_RECIPE
        assert dough.lines[0].ref == costing.IngredientRef("ing_f")
        assert dough.lines[0].id == "line_a"

        bread = catalog.menu_items[0]
        assert bread.lines[0].ref.kind is RefKind.RECIPE
        assert bread.servings == 4.0

    def test_missing_lists_default_to_empty(self):
        catalog = document_to_catalog({"schemaVersion": 1})
        assert catalog.is_empty

    @pytest.mark.parametrize("version", [None, 2, "1", True])
    def test_unknown_schema_version(self, version):
        with pytest.raises(ImportFormatError) as exc_info:
            document_to_catalog(_document(schemaVersion=version))
        assert str(exc_info.value) == "Unsupported file format"

    def test_not_an_object(self):
        with pytest.raises(ImportFormatError):
            document_to_catalog([1, 2, 3])

    def test_malformed_entries_are_skipped(self):
        document = _document()
        document["ingredients"].append({"id": "ing_bad", "name": "Bad", "unit": "kg"})
        document["ingredients"].append("not an object")
        result = ImportResult()

        catalog = document_to_catalog(document, result)

        assert [i.id for i in catalog.ingredients] == ["ing_f"]
        assert result.failed == 2
        assert result.errors[0]["record_name"] == "Bad"

    def test_negative_amounts_are_skipped(self):
        document = _document()
        document["ingredients"].append(
            {"id": "ing_neg", "name": "Refund", "unit": "g", "packSize": 100, "packCost": -5}
        )
        document["recipes"][0]["lines"][0]["qty"] = -400
        document["menuItems"][0]["price"] = -1
        result = ImportResult()

        catalog = document_to_catalog(document, result)

        assert [i.id for i in catalog.ingredients] == ["ing_f"]
        assert catalog.recipes == []
        assert catalog.menu_items == []
        assert result.failed == 3
        assert [e["record_name"] for e in result.errors] == ["Refund", "Dough", "Bread"]
        assert "cannot be negative" in result.errors[0]["message"]

    def test_unknown_category_falls_back_to_base(self):
        document = _document()
        document["recipes"][0]["category"] = "Dessert"
        assert document_to_catalog(document).recipes[0].category is RecipeCategory.BASE

    def test_menu_item_servings_default(self):
        document = _document()
        del document["menuItems"][0]["servings"]
        assert document_to_catalog(document).menu_items[0].servings == 1.0


class TestImportJson:
    def test_invalid_json(self):
        with pytest.raises(ImportFormatError) as exc_info:
            import_json("{not json")
        assert str(exc_info.value) == "Unsupported file format"

    def test_lenient_loader(self):
        assert load_document_or_default(None).is_empty
        assert load_document_or_default("[]").is_empty
        assert load_document_or_default('{"schemaVersion": 9}').is_empty
        assert len(load_document_or_default(json.dumps(_document())).recipes) == 1


class TestCatalogToDocument:
    def test_round_trip(self):
        catalog = document_to_catalog(_document())

        document = catalog_to_document(catalog, exported_at=EXPORTED_AT)

        assert document == _document()

    def test_optional_fields_omitted_and_timestamps_filled(self):
        salt = costing.Ingredient("ing_s", "Salt", Unit.GRAM, 1000.0, 0.5)

        document = catalog_to_document(costing.Catalog(ingredients=[salt]), exported_at=EXPORTED_AT)

        entry = document["ingredients"][0]
        assert "supplier" not in entry
        assert "notes" not in entry
        assert entry["packSize"] == 1000
        assert isinstance(entry["packSize"], int)
        assert entry["updatedAt"] == EXPORTED_AT
        assert document["recipes"] == []
        assert document["menuItems"] == []

    def test_export_json_is_parseable(self):
        text = export_json(document_to_catalog(_document()))
        data = json.loads(text)
        assert data["schemaVersion"] == 1
        assert data["exportedAt"].endswith("Z")

    def test_costs_survive_round_trip(self):
        catalog = import_json(export_json(document_to_catalog(_document())))
        bread = catalog.menu_items[0]

        result = costing.menu_item_cost_per_serving(bread, catalog.ingredients, catalog.recipes)

        # 400 g flour = 0.48 for 500 g dough; the whole batch over 4 servings
        assert result.cost_per_serving == pytest.approx(0.12)


class TestFileOperations:
    def test_export_stored_catalog(self, test_db, pancakes, tmp_path):
        path = tmp_path / "export.json"

        result = export_catalog_to_file(str(path))

        assert result.success
        assert result.record_count == 5
        assert result.entity_counts == {"ingredients": 3, "recipes": 1, "menu_items": 1}
        data = json.loads(path.read_text(encoding="utf-8"))
        assert {i["name"] for i in data["ingredients"]} == {"Flour", "Milk", "Eggs"}
        assert data["menuItems"][0]["lines"][0]["ref"]["kind"] == "recipe"

    def test_export_to_unwritable_path(self, test_db, tmp_path):
        result = export_catalog_to_file(str(tmp_path / "missing" / "export.json"))

        assert not result.success
        assert "Export failed" in result.get_summary()

    def test_import_replace(self, test_db, pancakes, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(_document()), encoding="utf-8")

        result = import_catalog_from_file(str(path), mode="replace")

        assert result.successful == 3
        assert result.failed == 0
        assert catalog_service.get_catalog_counts() == {
            "ingredients": 1,
            "recipes": 1,
            "menu_items": 1,
        }

    def test_import_merge_skips_existing(self, test_db, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(_document()), encoding="utf-8")
        import_catalog_from_file(str(path))

        result = import_catalog_from_file(str(path), mode="merge")

        assert result.successful == 0
        assert result.skipped == 3
        assert result.entity_counts["recipes"]["skipped"] == 1
        assert "skipped" in result.get_summary()

    def test_export_then_import_round_trip(self, test_db, pancakes, tmp_path):
        from recipe_costing.services import menu_item_service

        path = tmp_path / "backup.json"
        export_catalog_to_file(str(path))
        before = menu_item_service.get_menu_item_pricing(pancakes.id)

        import_catalog_from_file(str(path), mode="replace")

        after = menu_item_service.get_menu_item_pricing(pancakes.id)
        assert after["cost_per_serving"] == pytest.approx(before["cost_per_serving"])
        assert after["name"] == "Pancakes"

    @pytest.mark.parametrize("mode", ["merge", "replace"])
    def test_import_with_negative_amounts_stores_valid_entries(self, test_db, tmp_path, mode):
        document = _document(recipes=[])
        document["ingredients"].append(
            {"id": "ing_neg", "name": "Refund", "unit": "g", "packSize": 100, "packCost": -5}
        )
        document["menuItems"][0]["price"] = -1
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(document), encoding="utf-8")

        result = import_catalog_from_file(str(path), mode=mode)

        assert result.successful == 1
        assert result.failed == 2
        assert catalog_service.get_catalog_counts() == {
            "ingredients": 1,
            "recipes": 0,
            "menu_items": 0,
        }

    def test_import_invalid_mode(self, test_db, tmp_path):
        with pytest.raises(ValueError):
            import_catalog_from_file(str(tmp_path / "doc.json"), mode="overwrite")

    def test_import_missing_file(self, test_db, tmp_path):
        with pytest.raises(ImportFormatError):
            import_catalog_from_file(str(tmp_path / "nope.json"))

    def test_import_foreign_document_leaves_catalog(self, test_db, pancakes, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps({"schemaVersion": 2}), encoding="utf-8")

        with pytest.raises(ImportFormatError):
            import_catalog_from_file(str(path), mode="replace")

        assert catalog_service.get_catalog_counts()["menu_items"] == 1


def test_default_export_filename():
    name = default_export_filename()
    assert name.startswith("recipe-costing-export_")
    assert name.endswith(".json")
    assert ":" not in name
