"""Household profile models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockpile.constants import MAX_SUPPLY_DURATION_DAYS

HouseholdPreset = Literal["single", "couple", "family"]

_PRESETS: dict[str, dict[str, object]] = {
    "single": {"adults": 1, "children": 0, "supply_duration_days": 3, "uses_freezer": False},
    "couple": {"adults": 2, "children": 0, "supply_duration_days": 3, "uses_freezer": True},
    "family": {"adults": 2, "children": 2, "supply_duration_days": 3, "uses_freezer": True},
}


class HouseholdProfile(BaseModel):
    """Household size and supply goal used to scale recommendations."""

    adults: int = Field(default=2, ge=0)
    children: int = Field(default=0, ge=0)
    pets: int = Field(default=0, ge=0)
    supply_duration_days: int = Field(default=7, ge=1, alias="supplyDurationDays")
    uses_freezer: bool = Field(default=False, alias="useFreezer")
    freezer_hold_hours: Optional[float] = Field(
        default=None, ge=0, allow_inf_nan=False, alias="freezerHoldTimeHours"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("supply_duration_days", mode="after")
    @classmethod
    def clamp_duration(cls, value: int) -> int:
        return min(value, MAX_SUPPLY_DURATION_DAYS)

    @property
    def people(self) -> int:
        return self.adults + self.children

    @classmethod
    def from_preset(cls, preset: HouseholdPreset) -> "HouseholdProfile":
        """Build one of the onboarding presets (single, couple, family)."""

        try:
            values = _PRESETS[preset]
        except KeyError as exc:
            raise ValueError(f"Unknown household preset '{preset}'") from exc
        return cls(**values)
