from __future__ import annotations

from datetime import date, timedelta

from prometheus_client import REGISTRY

from stockpile.engine.alerts import generate_alerts
from stockpile.kits.validation import validate_kit_file
from stockpile.models.inventory import InventoryItem


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_validation_counter_tracks_results(kit_payload):
    before_valid = _sample("stockpile_kit_validations_total", {"result": "valid"})
    before_invalid = _sample("stockpile_kit_validations_total", {"result": "invalid"})

    validate_kit_file(kit_payload())
    validate_kit_file("nope")

    assert _sample("stockpile_kit_validations_total", {"result": "valid"}) == before_valid + 1
    assert _sample("stockpile_kit_validations_total", {"result": "invalid"}) == before_invalid + 1


def test_registry_operations_are_counted(registry):
    labels = {"operation": "delete", "outcome": "rejected"}
    before = _sample("stockpile_kit_operations_total", labels)

    registry.delete_kit("72tuntia-standard")

    assert _sample("stockpile_kit_operations_total", labels) == before + 1


def test_alerts_are_counted_by_severity():
    today = date(2025, 6, 15)
    item = InventoryItem(
        id="soup",
        name="soup",
        category_id="food",
        quantity=1,
        unit="cans",
        recommended_quantity=1,
        expiration_date=today - timedelta(days=1),
    )
    before = _sample("stockpile_alerts_generated_total", {"severity": "critical"})

    generate_alerts([item], today)

    assert _sample("stockpile_alerts_generated_total", {"severity": "critical"}) == before + 1
