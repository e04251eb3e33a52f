"""Inventory data models."""

from __future__ import annotations

import calendar
import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stockpile.models.household import HouseholdProfile
from stockpile.models.kit import KitItem, Translator


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class InventoryItem(BaseModel):
    """Item currently stored by the household."""

    id: str
    name: str
    category_id: str = Field(alias="categoryId")
    quantity: float = Field(ge=0, allow_inf_nan=False)
    unit: str
    recommended_quantity: float = Field(
        default=0.0, ge=0, allow_inf_nan=False, alias="recommendedQuantity"
    )
    expiration_date: Optional[date] = Field(default=None, alias="expirationDate")
    never_expires: bool = Field(default=False, alias="neverExpires")
    template_id: Optional[str] = Field(default=None, alias="templateId")
    marked_as_enough: bool = Field(default=False, alias="markedAsEnough")
    requires_water_liters: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="requiresWaterLiters"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def check_expiration(self) -> "InventoryItem":
        if self.never_expires and self.expiration_date is not None:
            raise ValueError("an item that never expires cannot carry an expiration date")
        return self

    def days_until_expiration(self, today: date) -> Optional[int]:
        if self.never_expires or self.expiration_date is None:
            return None
        return (self.expiration_date - today).days

    @classmethod
    def from_kit_item(
        cls,
        kit_item: KitItem,
        household: HouseholdProfile,
        *,
        quantity: float = 0.0,
        today: Optional[date] = None,
        language: str = "en",
        translate: Translator | None = None,
        children_multiplier: Optional[float] = None,
        item_id: Optional[str] = None,
    ) -> "InventoryItem":
        """Instantiate an inventory entry linked to ``kit_item``."""

        from stockpile.engine.scaling import scale_quantity

        kwargs = {}
        if children_multiplier is not None:
            kwargs["children_multiplier"] = children_multiplier
        recommended = scale_quantity(kit_item, household, **kwargs)

        expiration_date: Optional[date] = None
        never_expires = True
        if kit_item.default_expiration_months:
            never_expires = False
            expiration_date = _add_months(
                today or date.today(), round(kit_item.default_expiration_months)
            )

        return cls(
            id=item_id or uuid.uuid4().hex,
            name=kit_item.display_name(language, translate),
            category_id=kit_item.category,
            quantity=quantity,
            unit=kit_item.unit,
            recommended_quantity=recommended,
            expiration_date=expiration_date,
            never_expires=never_expires,
            template_id=kit_item.id,
            requires_water_liters=kit_item.requires_water_liters,
        )
