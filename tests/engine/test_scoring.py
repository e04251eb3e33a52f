from __future__ import annotations

import pytest

from stockpile.engine.scoring import (
    category_breakdown,
    category_score,
    overall_score,
    round_half_up,
)
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import InlineName, KitItem


def _kit_item(item_id: str, category: str, base: float, **extra) -> KitItem:
    return KitItem(
        id=item_id,
        label=InlineName(names={"en": item_id.replace("-", " ").title()}),
        category=category,
        unit="pieces",
        base_quantity=base,
        scale_with_people=False,
        scale_with_days=False,
        **extra,
    )


def _stock(item_id: str, category: str, quantity: float, **extra) -> InventoryItem:
    fields = {"template_id": item_id}
    fields.update(extra)
    return InventoryItem(
        id=f"inv-{item_id}-{quantity}",
        name=item_id,
        category_id=category,
        quantity=quantity,
        unit="pieces",
        never_expires=True,
        **fields,
    )


KIT = [
    _kit_item("flashlight", "light-power", 2),
    _kit_item("candles", "light-power", 10),
    _kit_item("radio", "communication-info", 1),
    _kit_item("frozen-peas", "food", 4, requires_freezer=True),
]


@pytest.fixture()
def no_freezer() -> HouseholdProfile:
    return HouseholdProfile(adults=1, supply_duration_days=3, uses_freezer=False)


def test_category_score_is_mean_of_item_percentages(no_freezer):
    inventory = [_stock("flashlight", "light-power", 1), _stock("candles", "light-power", 10)]

    # flashlight 50 %, candles 100 %
    assert category_score("light-power", inventory, no_freezer, KIT) == 75


def test_surplus_is_capped(no_freezer):
    inventory = [_stock("flashlight", "light-power", 50), _stock("candles", "light-power", 99)]

    assert category_score("light-power", inventory, no_freezer, KIT) == 100


def test_many_entries_sum_towards_one_item(no_freezer):
    inventory = [_stock("candles", "light-power", 3), _stock("candles", "light-power", 2)]

    # candles 50 %, flashlight 0 %
    assert category_score("light-power", inventory, no_freezer, KIT) == 25


def test_unlinked_items_match_by_normalised_name(no_freezer):
    by_name = InventoryItem(
        id="manual",
        name="  Flashlight ",
        category_id="light-power",
        quantity=2,
        unit="pieces",
    )
    other_link = by_name.model_copy(update={"template_id": "candles", "quantity": 0})

    assert category_score("light-power", [by_name], no_freezer, KIT) == 50
    assert category_score("light-power", [other_link], no_freezer, KIT) == 0


def test_empty_category_scores(no_freezer):
    assert category_score("pets", [], no_freezer, KIT) == 0
    assert category_score("pets", [_stock("cat-food", "pets", 1)], no_freezer, KIT) == 100


def test_disabled_items_are_ignored(no_freezer):
    inventory = [_stock("candles", "light-power", 10)]

    assert category_score("light-power", inventory, no_freezer, KIT, ["flashlight"]) == 100
    both = ["flashlight", "candles"]
    assert category_score("light-power", inventory, no_freezer, KIT, both) == 100
    assert category_score("light-power", [], no_freezer, KIT, both) == 0


def test_marked_as_enough_counts_as_full(no_freezer):
    inventory = [
        _stock("flashlight", "light-power", 0, marked_as_enough=True),
        _stock("candles", "light-power", 5),
    ]

    assert category_score("light-power", inventory, no_freezer, KIT) == 75


def test_overall_excludes_freezer_items_without_freezer(no_freezer):
    inventory = [
        _stock("flashlight", "light-power", 2),
        _stock("candles", "light-power", 10),
        _stock("radio", "communication-info", 1),
    ]

    assert overall_score(inventory, no_freezer, KIT) == 100
    with_freezer = no_freezer.model_copy(update={"uses_freezer": True})
    assert overall_score(inventory, with_freezer, KIT) == 75


def test_overall_without_anything_to_score_is_zero(no_freezer):
    assert overall_score([], no_freezer, []) == 0
    assert overall_score([], no_freezer, KIT, [item.id for item in KIT]) == 0


def test_scores_round_half_up(no_freezer):
    kit = [_kit_item("a-item", "tools-supplies", 8), _kit_item("b-item", "tools-supplies", 1)]

    inventory = [_stock("a-item", "tools-supplies", 0.5), _stock("b-item", "tools-supplies", 1)]

    # 6.25 % and 100 % average to 53.125
    assert category_score("tools-supplies", inventory, no_freezer, kit) == 53
    assert round_half_up(52.5) == 53
    assert round_half_up(0.49) == 0


def test_items_scaling_to_zero_are_skipped():
    nobody = HouseholdProfile(adults=0, children=0, supply_duration_days=3)
    per_person = KitItem(
        id="toilet-paper",
        label=InlineName(names={"en": "Toilet paper"}),
        category="hygiene-sanitation",
        unit="rolls",
        base_quantity=1,
        scale_with_people=True,
        scale_with_days=False,
    )

    assert overall_score([], nobody, [per_person]) == 0
    assert category_score("hygiene-sanitation", [], nobody, [per_person]) == 0


def test_breakdown_lists_item_coverage(no_freezer):
    inventory = [_stock("flashlight", "light-power", 1)]

    breakdown = category_breakdown(
        inventory, no_freezer, KIT, category_ids=["light-power", "pets"]
    )

    assert [c.category_id for c in breakdown] == ["light-power", "pets"]
    light = breakdown[0]
    assert light.score == 25
    assert [(c.item_id, c.recommended, c.actual) for c in light.items] == [
        ("flashlight", 2, 1),
        ("candles", 10, 0),
    ]
    assert breakdown[1].items == ()


def test_breakdown_defaults_to_standard_and_kit_categories(no_freezer):
    kit = KIT + [_kit_item("tent", "camping-gear", 1)]

    ids = [c.category_id for c in category_breakdown([], no_freezer, kit)]

    assert ids[0] == "water-beverages"
    assert ids[-1] == "camping-gear"
