from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from stockpile.engine.alerts import count_alerts, generate_alerts
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem, LocalizedRef

TODAY = date(2025, 6, 15)


def _item(item_id: str, category: str = "food", **fields) -> InventoryItem:
    values = {"quantity": 1, "recommended_quantity": 1, "never_expires": True, "unit": "pieces"}
    values.update(fields)
    if "expiration_date" in fields:
        values["never_expires"] = False
    return InventoryItem(id=item_id, name=item_id, category_id=category, **values)


def test_expiration_alerts():
    inventory = [
        _item("old-soup", expiration_date=TODAY - timedelta(days=1)),
        _item("soon-soup", expiration_date=TODAY + timedelta(days=30)),
        _item("later-soup", expiration_date=TODAY + timedelta(days=31)),
        _item("today-soup", expiration_date=TODAY),
        _item("salt"),
        _item("undated", never_expires=False),
    ]

    alerts = generate_alerts(inventory, TODAY)

    assert [(a.id, a.severity) for a in alerts] == [
        ("expired-old-soup", "critical"),
        ("expiring-soon-soon-soup", "warning"),
        ("expiring-soon-today-soup", "warning"),
    ]
    assert alerts[1].params == {"days": 30}
    assert alerts[0].message_key == "alerts.expiration.expired"


def test_lookahead_window_is_configurable():
    inventory = [_item("soup", expiration_date=TODAY + timedelta(days=10))]

    assert generate_alerts(inventory, TODAY, expiring_soon_days=7) == []
    assert len(generate_alerts(inventory, TODAY, expiring_soon_days=10)) == 1


def test_datetime_now_is_reduced_to_a_date():
    inventory = [_item("soup", expiration_date=TODAY)]
    late_evening = datetime(2025, 6, 15, 23, 59, tzinfo=timezone.utc)

    assert [a.id for a in generate_alerts(inventory, late_evening)] == ["expiring-soon-soup"]


def test_category_stock_thresholds():
    inventory = [
        _item("water", "water-beverages", quantity=0, recommended_quantity=10),
        _item("candles", "light-power", quantity=2, recommended_quantity=10),
        _item("gauze", "medical-health", quantity=4, recommended_quantity=10),
        _item("soap", "hygiene-sanitation", quantity=5, recommended_quantity=10),
        _item("tape", "tools-supplies", quantity=3, recommended_quantity=0),
    ]

    alerts = generate_alerts(inventory, TODAY)

    assert [(a.id, a.severity) for a in alerts] == [
        ("category-out-of-stock-water-beverages", "critical"),
        ("category-critically-low-light-power", "critical"),
        ("category-low-stock-medical-health", "warning"),
    ]
    assert alerts[1].params == {"percent": 20}
    assert alerts[2].params == {"percent": 40}


def test_category_totals_are_aggregated():
    inventory = [
        _item("water-a", "water-beverages", quantity=0, recommended_quantity=5),
        _item("water-b", "water-beverages", quantity=4, recommended_quantity=5),
    ]

    assert [a.id for a in generate_alerts(inventory, TODAY)] == [
        "category-low-stock-water-beverages"
    ]


def test_marked_as_enough_items_count_as_stocked():
    inventory = [
        _item("water", "water-beverages", quantity=0, recommended_quantity=10, marked_as_enough=True),
    ]

    assert generate_alerts(inventory, TODAY) == []


def test_only_listed_categories_are_checked():
    inventory = [
        _item("tent", "camping-gear", quantity=0, recommended_quantity=2),
        _item("food", "food", quantity=0, recommended_quantity=2),
    ]

    assert [a.id for a in generate_alerts(inventory, TODAY)] == ["category-out-of-stock-food"]
    alerts = generate_alerts(inventory, TODAY, category_ids=["camping-gear"])
    assert [a.id for a in alerts] == ["category-out-of-stock-camping-gear"]


def test_critical_alerts_come_first_in_stable_order():
    inventory = [
        _item("soon", expiration_date=TODAY + timedelta(days=3)),
        _item("expired-a", expiration_date=TODAY - timedelta(days=3)),
        _item("expired-b", expiration_date=TODAY - timedelta(days=1)),
        _item("candles", "light-power", quantity=0, recommended_quantity=3),
    ]

    assert [a.id for a in generate_alerts(inventory, TODAY)] == [
        "expired-expired-a",
        "expired-expired-b",
        "category-out-of-stock-light-power",
        "expiring-soon-soon",
    ]


def test_messages_use_translator():
    calls = []

    def translate(key, **params):
        calls.append((key, params))
        if params.get("ns") == "products":
            return "Canned soup"
        return f"<{key}>"

    inventory = [
        _item("soup", template_id="canned-soup", expiration_date=TODAY),
        _item("water", "water-beverages", quantity=0, recommended_quantity=1),
    ]

    alerts = generate_alerts(inventory, TODAY, translate=translate)

    assert alerts[0].message == "<alerts.stock.outOfStock>"
    assert alerts[0].item_name == "<water-beverages>"
    assert alerts[1].message == "<alerts.expiration.expiringSoon>"
    assert alerts[1].item_name == "Canned soup"
    assert ("alerts.expiration.expiringSoon", {"days": 0}) in calls


def test_default_translator_returns_keys():
    alerts = generate_alerts([_item("soup", expiration_date=TODAY)], TODAY)

    assert alerts[0].message == "alerts.expiration.expiringSoon"
    assert alerts[0].item_name == "soup"


def test_count_alerts():
    inventory = [
        _item("a", expiration_date=TODAY - timedelta(days=1)),
        _item("b", expiration_date=TODAY + timedelta(days=1)),
        _item("c", expiration_date=TODAY + timedelta(days=2)),
    ]

    counts = count_alerts(generate_alerts(inventory, TODAY))

    assert (counts.critical, counts.warning, counts.info, counts.total) == (1, 2, 0, 3)


def test_empty_category_is_out_of_stock_without_a_recommendation():
    inventory = [_item("torch", "light-power", quantity=0, recommended_quantity=0)]

    assert [a.id for a in generate_alerts(inventory, TODAY)] == [
        "category-out-of-stock-light-power"
    ]

    enough = [
        _item("torch", "light-power", quantity=0, recommended_quantity=0, marked_as_enough=True)
    ]
    assert generate_alerts(enough, TODAY) == []


def _pasta_template() -> KitItem:
    return KitItem(
        id="pasta",
        label=LocalizedRef(key="pasta"),
        category="food",
        unit="kilograms",
        base_quantity=0.5,
        scale_with_people=True,
        scale_with_days=True,
        requires_water_liters=1,
    )


def test_preparation_water_shortage():
    inventory = [
        _item("pasta-1", template_id="pasta", quantity=3),
        _item(
            "bottled", "water-beverages", quantity=1.25, unit="liters", template_id="bottled-water"
        ),
    ]

    alerts = generate_alerts(inventory, TODAY, recommended_items=[_pasta_template()])

    assert [(a.id, a.severity) for a in alerts] == [("water-shortage-preparation", "warning")]
    assert alerts[0].message_key == "alerts.water.preparationShortage"
    assert alerts[0].params == {"liters": 1.8}
    assert alerts[0].item_name is None


def test_preparation_water_uses_item_value_and_stored_water():
    inventory = [
        _item("rice", quantity=2, requires_water_liters=1.5),
        _item("Drinking water", "water-beverages", quantity=3, unit="liters"),
        _item("juice", "water-beverages", quantity=10, unit="liters"),
    ]

    assert generate_alerts(inventory, TODAY) == []

    thirsty = [*inventory[:1], inventory[2]]
    assert [a.params for a in generate_alerts(thirsty, TODAY)] == [{"liters": 3.0}]
    assert generate_alerts(thirsty, TODAY, category_ids=["food"]) == []
