"""Recommendation kit models (trusted representation of a validated kit file)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from stockpile.constants import CUSTOM_KIT_PREFIX

Translator = Callable[..., str]

# Kit item attribute name -> kit file key, in export order.
ITEM_OPTIONAL_FIELDS: dict[str, str] = {
    "requires_freezer": "requiresFreezer",
    "default_expiration_months": "defaultExpirationMonths",
    "weight_grams_per_unit": "weightGramsPerUnit",
    "calories_per_100g": "caloriesPer100g",
    "calories_per_unit": "caloriesPerUnit",
    "requires_water_liters": "requiresWaterLiters",
    "capacity_mah": "capacityMah",
    "capacity_wh": "capacityWh",
}


def identity_translator(key: str, **_: Any) -> str:
    return key


class InlineName(BaseModel):
    """Item name given inline as a language -> text map (always has ``en``)."""

    kind: Literal["inline"] = "inline"
    names: dict[str, str]

    model_config = ConfigDict(frozen=True)

    def resolve(self, language: str, fallback: str) -> str:
        if self.names.get(language):
            return self.names[language]
        if self.names.get("en"):
            return self.names["en"]
        return next(iter(self.names.values()), fallback)


class LocalizedRef(BaseModel):
    """Item name resolved through the localization collaborator."""

    kind: Literal["ref"] = "ref"
    key: str

    model_config = ConfigDict(frozen=True)


ItemLabel = Annotated[Union[InlineName, LocalizedRef], Field(discriminator="kind")]


class KitItem(BaseModel):
    """Recommended item definition inside a kit."""

    id: str
    label: ItemLabel
    category: str
    unit: str
    base_quantity: float = Field(gt=0, allow_inf_nan=False, alias="baseQuantity")
    scale_with_people: bool = Field(alias="scaleWithPeople")
    scale_with_days: bool = Field(alias="scaleWithDays")
    requires_freezer: Optional[bool] = Field(default=None, alias="requiresFreezer")
    default_expiration_months: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="defaultExpirationMonths"
    )
    weight_grams_per_unit: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="weightGramsPerUnit"
    )
    calories_per_100g: Optional[float] = Field(
        default=None, ge=0, allow_inf_nan=False, alias="caloriesPer100g"
    )
    calories_per_unit: Optional[float] = Field(
        default=None, ge=0, allow_inf_nan=False, alias="caloriesPerUnit"
    )
    requires_water_liters: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="requiresWaterLiters"
    )
    capacity_mah: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="capacityMah"
    )
    capacity_wh: Optional[float] = Field(
        default=None, gt=0, allow_inf_nan=False, alias="capacityWh"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def display_name(self, language: str = "en", translate: Translator | None = None) -> str:
        """Resolve the item's display name for ``language``."""

        if isinstance(self.label, InlineName):
            return self.label.resolve(language, self.id)
        translator = translate or identity_translator
        return translator(self.label.key, ns="products", lng=language)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}
        if isinstance(self.label, InlineName):
            payload["names"] = dict(self.label.names)
        else:
            payload["i18nKey"] = self.label.key
        payload.update(
            {
                "category": self.category,
                "unit": self.unit,
                "baseQuantity": self.base_quantity,
                "scaleWithPeople": self.scale_with_people,
                "scaleWithDays": self.scale_with_days,
            }
        )
        for attr, key in ITEM_OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        return payload


class KitMeta(BaseModel):
    """Kit metadata block."""

    name: str
    version: str
    description: Optional[str] = None
    source: Optional[str] = None
    created_at: str = Field(alias="createdAt")
    language: Optional[Literal["en", "fi"]] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class KitCategory(BaseModel):
    """Custom category declared inside a kit file."""

    id: str
    names: dict[str, str]
    icon: str
    color: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0, alias="sortOrder")
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class KitFile(BaseModel):
    """A complete kit: metadata, recommended items, and category settings."""

    meta: KitMeta
    items: list[KitItem]
    categories: list[KitCategory] = Field(default_factory=list)
    disabled_categories: list[str] = Field(default_factory=list, alias="disabledCategories")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def find_item(self, item_id: str) -> Optional[KitItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "meta": self.meta.to_wire(),
            "items": [item.to_wire() for item in self.items],
        }
        if self.categories:
            payload["categories"] = [category.to_wire() for category in self.categories]
        if self.disabled_categories:
            payload["disabledCategories"] = list(self.disabled_categories)
        return payload


class UploadedKit(BaseModel):
    """Custom kit stored by the registry (uploaded or forked)."""

    id: str
    file: KitFile
    uploaded_at: datetime = Field(alias="uploadedAt")
    forked_from: Optional[str] = Field(default=None, alias="forkedFrom")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_state(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "uploadedAt": self.uploaded_at.isoformat(),
            "file": self.file.to_wire(),
        }
        if self.forked_from is not None:
            payload["forkedFrom"] = self.forked_from
        return payload


class KitSummary(BaseModel):
    """Lightweight description of an available kit."""

    id: str
    name: str
    version: str
    description: Optional[str] = None
    item_count: int
    is_builtin: bool
    forked_from: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def is_custom_kit_id(kit_id: str) -> bool:
    return kit_id.startswith(CUSTOM_KIT_PREFIX)
