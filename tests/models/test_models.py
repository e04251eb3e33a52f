from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from stockpile.models.document import PersistedDocument, UserSettings
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem, LocalizedRef


def _water() -> KitItem:
    return KitItem(
        id="bottled-water",
        label=LocalizedRef(key="bottled-water"),
        category="water-beverages",
        unit="liters",
        base_quantity=3,
        scale_with_people=True,
        scale_with_days=True,
        default_expiration_months=12,
    )


def test_household_accepts_wire_names():
    household = HouseholdProfile.model_validate(
        {"adults": 1, "children": 2, "supplyDurationDays": 14, "useFreezer": True}
    )

    assert household.supply_duration_days == 14
    assert household.uses_freezer is True
    assert household.people == 3


def test_household_duration_is_clamped():
    assert HouseholdProfile(supply_duration_days=1000).supply_duration_days == 365

    with pytest.raises(ValidationError):
        HouseholdProfile(supply_duration_days=0)
    with pytest.raises(ValidationError):
        HouseholdProfile(adults=-1)


def test_household_presets():
    family = HouseholdProfile.from_preset("family")

    assert (family.adults, family.children) == (2, 2)
    with pytest.raises(ValueError):
        HouseholdProfile.from_preset("commune")  # type: ignore[arg-type]


def test_inventory_item_cannot_expire_and_never_expire():
    with pytest.raises(ValidationError):
        InventoryItem(
            id="x",
            name="x",
            category_id="food",
            quantity=1,
            unit="cans",
            never_expires=True,
            expiration_date=date(2025, 1, 1),
        )


def test_inventory_item_from_kit_item():
    household = HouseholdProfile(adults=2, supply_duration_days=3)

    item = InventoryItem.from_kit_item(
        _water(),
        household,
        quantity=4,
        today=date(2025, 1, 31),
        translate=lambda key, **params: f"{params['ns']}:{key}",
        item_id="inv-1",
    )

    assert item.id == "inv-1"
    assert item.name == "products:bottled-water"
    assert item.template_id == "bottled-water"
    assert item.recommended_quantity == 6
    assert item.expiration_date == date(2026, 1, 31)
    assert item.never_expires is False


def test_inventory_item_without_shelf_life_never_expires():
    kit_item = _water().model_copy(update={"default_expiration_months": None})

    item = InventoryItem.from_kit_item(kit_item, HouseholdProfile())

    assert item.never_expires is True
    assert item.expiration_date is None
    assert item.days_until_expiration(date.today()) is None
    assert len(item.id) == 32


def test_document_round_trips_through_json_dict():
    document = PersistedDocument(
        settings=UserSettings(language="fi", children_requirement_percentage=50),
        dismissed_alert_ids=["expired-a"],
    )

    payload = document.to_json_dict()
    restored = PersistedDocument.model_validate(payload)

    assert payload["settings"]["childrenRequirementPercentage"] == 50
    assert payload["dismissedAlertIds"] == ["expired-a"]
    assert restored.settings.children_multiplier == 0.5
    assert restored == document
