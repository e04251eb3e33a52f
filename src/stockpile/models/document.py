"""Persisted document model (the single JSON blob stored per installation)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from stockpile.constants import (
    CHILDREN_REQUIREMENT_MULTIPLIER,
    DEFAULT_KIT_ID,
    DOCUMENT_VERSION,
)
from stockpile.models.category import CustomCategory
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserSettings(BaseModel):
    """User preferences that influence calculations and display."""

    language: Literal["en", "fi"] = "en"
    children_requirement_percentage: float = Field(
        default=CHILDREN_REQUIREMENT_MULTIPLIER * 100,
        ge=0,
        le=100,
        alias="childrenRequirementPercentage",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def children_multiplier(self) -> float:
        return self.children_requirement_percentage / 100


class PersistedDocument(BaseModel):
    """Household, settings, inventory and kit registry state in one document."""

    version: str = DOCUMENT_VERSION
    household: HouseholdProfile = Field(default_factory=HouseholdProfile)
    settings: UserSettings = Field(default_factory=UserSettings)
    items: list[InventoryItem] = Field(default_factory=list)
    disabled_categories: list[str] = Field(default_factory=list, alias="disabledCategories")
    custom_categories: list[CustomCategory] = Field(
        default_factory=list, alias="customCategories"
    )
    uploaded_kits: list[dict[str, Any]] = Field(default_factory=list, alias="uploadedKits")
    selected_kit_id: str = Field(default=DEFAULT_KIT_ID, alias="selectedKitId")
    dismissed_alert_ids: list[str] = Field(default_factory=list, alias="dismissedAlertIds")
    disabled_recommended_items: list[str] = Field(
        default_factory=list, alias="disabledRecommendedItems"
    )
    last_modified: datetime = Field(default_factory=_utcnow, alias="lastModified")

    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
