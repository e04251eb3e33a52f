"""Category models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stockpile.models.kit import KitCategory


class CustomCategory(BaseModel):
    """Category added on top of the standard set, by the user or by a kit."""

    id: str
    names: dict[str, str]
    icon: str
    color: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0, alias="sortOrder")
    description: Optional[str] = None
    source_kit_id: Optional[str] = Field(default=None, alias="sourceKitId")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_kit(cls, category: KitCategory, kit_id: str) -> "CustomCategory":
        return cls(
            id=category.id,
            names=dict(category.names),
            icon=category.icon,
            color=category.color,
            sort_order=category.sort_order,
            description=category.description,
            source_kit_id=kit_id,
        )

    def display_name(self, language: str = "en") -> str:
        return self.names.get(language) or self.names.get("en") or self.id
