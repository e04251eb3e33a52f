"""Pydantic models defining shared data contracts."""

from stockpile.models.alert import ALERT_PRIORITY, Alert, AlertCounts, AlertSeverity
from stockpile.models.category import CustomCategory
from stockpile.models.document import PersistedDocument, UserSettings
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import (
    InlineName,
    KitCategory,
    KitFile,
    KitItem,
    KitMeta,
    KitSummary,
    LocalizedRef,
    UploadedKit,
)

__all__ = [
    "ALERT_PRIORITY",
    "Alert",
    "AlertCounts",
    "AlertSeverity",
    "CustomCategory",
    "PersistedDocument",
    "UserSettings",
    "HouseholdProfile",
    "InventoryItem",
    "InlineName",
    "KitCategory",
    "KitFile",
    "KitItem",
    "KitMeta",
    "KitSummary",
    "LocalizedRef",
    "UploadedKit",
]
