from __future__ import annotations

from stockpile.categories import CategoryCatalog
from stockpile.constants import STANDARD_CATEGORIES
from stockpile.kits.validation import load_kit_file
from stockpile.models.category import CustomCategory


def _boat(**overrides) -> CustomCategory:
    fields = {"id": "boat-gear", "names": {"en": "Boat gear", "fi": "Venetarvikkeet"}, "icon": "⛵"}
    fields.update(overrides)
    return CustomCategory(**fields)


def test_all_standard_categories_active_by_default(catalog):
    assert catalog.active_category_ids() == list(STANDARD_CATEGORIES)


def test_disable_and_enable_standard(catalog):
    assert catalog.disable_standard("pets")
    assert "pets" not in catalog.active_category_ids()
    assert catalog.disable_standard("boat-gear") is False

    assert catalog.enable_standard("pets")
    assert catalog.active_category_ids() == list(STANDARD_CATEGORIES)


def test_custom_categories_follow_sort_order(catalog):
    assert catalog.add_custom_category(_boat())
    assert catalog.add_custom_category(_boat(id="garden", sort_order=1, icon="\U0001F33B"))

    assert catalog.active_category_ids()[-2:] == ["garden", "boat-gear"]
    assert catalog.get_custom("boat-gear").display_name("fi") == "Venetarvikkeet"


def test_invalid_or_clashing_custom_categories_are_rejected(catalog):
    assert catalog.add_custom_category(_boat(icon="boat")) is False
    assert catalog.add_custom_category(_boat(id="food")) is False
    assert catalog.add_custom_category(_boat())
    assert catalog.add_custom_category(_boat()) is False
    assert len(catalog.custom_categories) == 1


def test_remove_custom_category(catalog):
    catalog.add_custom_category(_boat())

    assert catalog.remove_custom_category("boat-gear")
    assert catalog.remove_custom_category("boat-gear") is False


def test_user_categories_created_from_kit_source_are_reset(catalog):
    catalog.add_custom_category(_boat(source_kit_id="custom:abc"))

    assert catalog.get_custom("boat-gear").source_kit_id is None


def test_apply_kit_replaces_kit_categories(kit_payload):
    catalog = CategoryCatalog(
        disabled_standard=["food", "not-a-category"],
        custom_categories=[_boat(), _boat(id="old-kit-cat", source_kit_id="custom:old")],
    )
    payload = kit_payload()
    payload["categories"] = [
        {"id": "camping-gear", "names": {"en": "Camping"}, "icon": "⛺", "sortOrder": 2},
        {"id": "boat-gear", "names": {"en": "Kit boat"}, "icon": "⛵"},
    ]
    payload["disabledCategories"] = ["pets"]

    catalog.apply_kit("custom:new", load_kit_file(payload))

    assert [c.id for c in catalog.custom_categories] == ["boat-gear", "camping-gear"]
    assert catalog.get_custom("boat-gear").names["en"] == "Boat gear"
    assert catalog.disabled_standard == ["pets"]
    assert "food" in catalog.active_category_ids()
