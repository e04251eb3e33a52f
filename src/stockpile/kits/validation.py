"""Kit file validation, conversion to trusted models, and JSON entry points."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from stockpile.constants import SUPPORTED_LANGUAGES, VALID_UNITS
from stockpile.kits.categories import (
    declared_category_ids,
    valid_category_ids,
    validate_categories,
)
from stockpile.kits.issues import (
    ValidationIssue,
    ValidationResult,
    is_non_empty_string,
    is_number,
)
from stockpile.metrics import KIT_VALIDATIONS
from stockpile.models.kit import (
    ITEM_OPTIONAL_FIELDS,
    InlineName,
    KitCategory,
    KitFile,
    KitItem,
    KitMeta,
    LocalizedRef,
)

logger = logging.getLogger(__name__)

# Optional numeric item fields: kit file key -> whether zero is allowed.
_OPTIONAL_NUMBERS: dict[str, bool] = {
    "defaultExpirationMonths": False,
    "requiresWaterLiters": False,
    "weightGramsPerUnit": False,
    "capacityMah": False,
    "capacityWh": False,
    "caloriesPerUnit": True,
    "caloriesPer100g": True,
}

_KEY_TO_ATTR = {key: attr for attr, key in ITEM_OPTIONAL_FIELDS.items()}


class KitFileError(ValueError):
    """Base class for kit files that cannot be loaded."""


class KitParseError(KitFileError):
    """Raised when the payload is not valid JSON."""


class KitValidationError(KitFileError):
    """Raised when the payload is JSON but not a valid kit file."""

    def __init__(self, result: ValidationResult):
        super().__init__(f"Invalid kit file: {result.summary()}")
        self.result = result

    @property
    def errors(self) -> list[ValidationIssue]:
        return self.result.errors


def _validate_meta(meta: object, result: ValidationResult) -> None:
    if not isinstance(meta, Mapping):
        result.error("meta", "Missing meta object", "MISSING_META")
        return

    if not is_non_empty_string(meta.get("name")):
        result.error("meta.name", "Meta name is required", "MISSING_META_NAME")
    if not is_non_empty_string(meta.get("version")):
        result.error("meta.version", "Meta version is required", "MISSING_META_VERSION")
    if not isinstance(meta.get("createdAt"), str) or not meta["createdAt"]:
        result.error("meta.createdAt", "Meta createdAt is required", "MISSING_META_CREATED_AT")
    if "language" in meta and meta["language"] not in SUPPORTED_LANGUAGES:
        result.error(
            "meta.language",
            f"Meta language must be one of: {', '.join(SUPPORTED_LANGUAGES)}",
            "INVALID_META_LANGUAGE",
        )
    for key in ("description", "source"):
        if key in meta and not isinstance(meta[key], str):
            result.warn(f"meta.{key}", f"{key} should be a string", "INVALID_OPTIONAL")


def _validate_name(item: Mapping[str, Any], path: str, result: ValidationResult) -> None:
    has_key = "i18nKey" in item
    has_names = "names" in item

    if has_key and has_names:
        result.error(
            path,
            "Item must have either i18nKey or names, not both",
            "CONFLICTING_NAME",
        )
        return

    if has_key:
        if not is_non_empty_string(item["i18nKey"]):
            result.error(f"{path}.i18nKey", "i18nKey must be a non-empty string", "INVALID_I18N_KEY")
        return

    if not has_names:
        result.error(path, "Item must have either i18nKey or names.en", "MISSING_NAME")
        return

    names = item["names"]
    if not isinstance(names, Mapping):
        result.error(f"{path}.names", "names must be an object", "INVALID_NAMES")
        return
    if not is_non_empty_string(names.get("en")):
        result.error(f"{path}.names.en", "Item must have names.en", "MISSING_NAME")
    for lang, value in names.items():
        if lang != "en" and not is_non_empty_string(value):
            result.warn(
                f"{path}.names.{lang}",
                f"names.{lang} should be a non-empty string",
                "INVALID_NAME_VALUE",
            )


def _validate_item(
    item: object,
    index: int,
    category_ids: set[str],
    result: ValidationResult,
) -> None:
    path = f"items[{index}]"

    if not isinstance(item, Mapping):
        result.error(path, "Item must be an object", "INVALID_ITEM")
        return

    if not is_non_empty_string(item.get("id")):
        result.error(f"{path}.id", "Item ID is required", "MISSING_ID")

    _validate_name(item, path, result)

    category = item.get("category")
    if not isinstance(category, str) or category not in category_ids:
        result.error(
            f"{path}.category",
            f"Invalid category: {category!r}. Must be one of: {', '.join(sorted(category_ids))}",
            "INVALID_CATEGORY",
        )

    unit = item.get("unit")
    if not isinstance(unit, str) or unit not in VALID_UNITS:
        result.error(
            f"{path}.unit",
            f"Invalid unit: {unit!r}. Must be one of: {', '.join(VALID_UNITS)}",
            "INVALID_UNIT",
        )

    base_quantity = item.get("baseQuantity")
    if not is_number(base_quantity) or base_quantity <= 0:
        result.error(
            f"{path}.baseQuantity",
            "baseQuantity must be a positive finite number",
            "INVALID_QUANTITY",
        )

    for flag in ("scaleWithPeople", "scaleWithDays"):
        if not isinstance(item.get(flag), bool):
            result.error(f"{path}.{flag}", f"{flag} must be a boolean", "INVALID_BOOLEAN")

    if "requiresFreezer" in item and not isinstance(item["requiresFreezer"], bool):
        result.warn(
            f"{path}.requiresFreezer",
            "requiresFreezer should be a boolean",
            "INVALID_OPTIONAL",
        )

    for key, zero_allowed in _OPTIONAL_NUMBERS.items():
        if key not in item:
            continue
        value = item[key]
        if is_number(value) and (value > 0 or (zero_allowed and value == 0)):
            continue
        expectation = "a non-negative" if zero_allowed else "a positive"
        result.warn(f"{path}.{key}", f"{key} should be {expectation} finite number", "INVALID_OPTIONAL")


def _validate_items(items: object, category_ids: set[str], result: ValidationResult) -> None:
    if not isinstance(items, list):
        result.error("items", "Items must be an array", "INVALID_ITEMS")
        return
    if not items:
        result.error("items", "Items array cannot be empty", "EMPTY_ITEMS")
        return

    seen_ids: set[str] = set()
    for index, item in enumerate(items):
        if isinstance(item, Mapping) and is_non_empty_string(item.get("id")):
            item_id = item["id"]
            if item_id in seen_ids:
                result.error(f"items[{index}].id", f"Duplicate item ID: {item_id}", "DUPLICATE_ID")
            else:
                seen_ids.add(item_id)
        _validate_item(item, index, category_ids, result)


def validate_kit_file(candidate: object) -> ValidationResult:
    """
    Validate an untrusted kit file payload.

    Errors make the file unimportable. Warnings flag optional fields that are dropped
    when the file is converted with :func:`build_kit_file`.
    """

    result = ValidationResult()

    if not isinstance(candidate, Mapping):
        result.error("", "Invalid JSON structure", "INVALID_STRUCTURE")
        KIT_VALIDATIONS.labels(result="invalid").inc()
        return result

    _validate_meta(candidate.get("meta"), result)

    categories = candidate.get("categories")
    if "categories" in candidate:
        if isinstance(categories, list):
            result.extend(validate_categories(categories))
        else:
            result.error("categories", "categories must be an array", "INVALID_CATEGORIES")

    if "disabledCategories" in candidate:
        disabled = candidate["disabledCategories"]
        if not isinstance(disabled, list) or not all(isinstance(entry, str) for entry in disabled):
            result.warn(
                "disabledCategories",
                "disabledCategories should be an array of category IDs",
                "INVALID_DISABLED_CATEGORIES",
            )

    category_ids = valid_category_ids(declared_category_ids(categories))
    _validate_items(candidate.get("items"), category_ids, result)

    KIT_VALIDATIONS.labels(result="valid" if result.valid else "invalid").inc()
    logger.debug(
        "Validated kit file errors=%d warnings=%d", len(result.errors), len(result.warnings)
    )
    return result


def _build_item(item: Mapping[str, Any], path: str, warned: set[str]) -> KitItem:
    label: Union[InlineName, LocalizedRef]
    if "i18nKey" in item:
        label = LocalizedRef(key=item["i18nKey"])
    else:
        label = InlineName(
            names={
                lang: value
                for lang, value in item["names"].items()
                if f"{path}.names.{lang}" not in warned
            }
        )

    optional = {
        _KEY_TO_ATTR[key]: item[key]
        for key in ITEM_OPTIONAL_FIELDS.values()
        if key in item and f"{path}.{key}" not in warned
    }
    return KitItem(
        id=item["id"],
        label=label,
        category=item["category"],
        unit=item["unit"],
        base_quantity=item["baseQuantity"],
        scale_with_people=item["scaleWithPeople"],
        scale_with_days=item["scaleWithDays"],
        **optional,
    )


def _build_category(category: Mapping[str, Any]) -> KitCategory:
    description = category.get("description")
    return KitCategory(
        id=category["id"],
        names={lang: value for lang, value in category["names"].items() if isinstance(value, str)},
        icon=category["icon"],
        color=category.get("color"),
        sort_order=category.get("sortOrder"),
        description=description if isinstance(description, str) else None,
    )


def build_kit_file(data: Mapping[str, Any], result: Optional[ValidationResult] = None) -> KitFile:
    """Convert a validated payload into a :class:`KitFile`, dropping warned fields."""

    result = result or validate_kit_file(data)
    if not result.valid:
        raise KitValidationError(result)
    warned = result.warned_paths()

    meta = data["meta"]
    meta_fields = {
        key: meta[key]
        for key in ("description", "source", "language")
        if key in meta and f"meta.{key}" not in warned
    }
    disabled = data.get("disabledCategories", [])
    return KitFile(
        meta=KitMeta(
            name=meta["name"],
            version=meta["version"],
            created_at=meta["createdAt"],
            **meta_fields,
        ),
        items=[
            _build_item(item, f"items[{index}]", warned)
            for index, item in enumerate(data["items"])
        ],
        categories=[_build_category(category) for category in data.get("categories", [])],
        disabled_categories=[] if "disabledCategories" in warned else list(disabled),
    )


def load_kit_file(data: object) -> KitFile:
    """Validate ``data`` and return the trusted kit, raising on errors."""

    result = validate_kit_file(data)
    if not result.valid:
        raise KitValidationError(result)
    assert isinstance(data, Mapping)
    return build_kit_file(data, result)


def parse_kit_file(text: Union[str, bytes]) -> KitFile:
    """
    Parse raw kit JSON and return the trusted kit.

    Raises :class:`KitParseError` for malformed JSON and :class:`KitValidationError`
    when the document does not describe a valid kit.
    """

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise KitParseError(f"Failed to parse kit JSON: {exc}") from exc
    return load_kit_file(data)


def dump_kit_file(kit: KitFile) -> dict[str, Any]:
    """Return the kit file (export) representation of ``kit``."""

    return kit.to_wire()


def dumps_kit_file(kit: KitFile, *, indent: Optional[int] = 2) -> str:
    return json.dumps(dump_kit_file(kit), indent=indent, ensure_ascii=False)
