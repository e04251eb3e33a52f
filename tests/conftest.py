"""Shared pytest fixtures for the Stockpile test suite."""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict

import pytest

from stockpile.categories import CategoryCatalog
from stockpile.config import get_settings
from stockpile.db.repository import reset_repository_state
from stockpile.engine.overrides import OverrideTracker
from stockpile.kits.registry import KitRegistry
from stockpile.models.household import HouseholdProfile

_BASE_KIT: Dict[str, Any] = {
    "meta": {
        "name": "Cabin Kit",
        "version": "1.0.0",
        "description": "Supplies for the summer cabin",
        "createdAt": "2025-03-01T12:00:00.000Z",
        "language": "en",
    },
    "items": [
        {
            "id": "water",
            "names": {"en": "Water", "fi": "Vesi"},
            "category": "water-beverages",
            "unit": "liters",
            "baseQuantity": 3,
            "scaleWithPeople": True,
            "scaleWithDays": True,
            "defaultExpirationMonths": 12,
        },
        {
            "id": "flashlight",
            "i18nKey": "flashlight",
            "category": "light-power",
            "unit": "pieces",
            "baseQuantity": 1,
            "scaleWithPeople": False,
            "scaleWithDays": False,
        },
    ],
}


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_stockpile.db"
    monkeypatch.setenv("STOCKPILE_DATABASE_PATH", str(db_path))
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("STOCKPILE_DATABASE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def kit_payload() -> Callable[..., Dict[str, Any]]:
    """Factory returning a fresh, valid kit file payload (optionally with extra items)."""

    def _build(*extra_items: Dict[str, Any]) -> Dict[str, Any]:
        payload = copy.deepcopy(_BASE_KIT)
        payload["items"].extend(copy.deepcopy(list(extra_items)))
        return payload

    return _build


@pytest.fixture()
def household() -> HouseholdProfile:
    return HouseholdProfile(adults=2, children=0, supply_duration_days=3)


@pytest.fixture()
def overrides() -> OverrideTracker:
    return OverrideTracker()


@pytest.fixture()
def catalog() -> CategoryCatalog:
    return CategoryCatalog()


@pytest.fixture()
def registry(overrides, catalog) -> KitRegistry:
    return KitRegistry(overrides, catalog)
