"""Validation rules for custom categories declared in kit files."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Iterable, Optional, Sequence

from stockpile.constants import STANDARD_CATEGORIES
from stockpile.kits.issues import ValidationResult, is_non_empty_string

_CATEGORY_ID_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
_HEX_COLOR_PATTERN = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F300-\U0001F9FF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\U0001F1E0-\U0001F1FF"
    "\U0001FA00-\U0001FAFF"
    "\u2B50"
    "]"
)


def is_valid_category_id(value: object) -> bool:
    """Kebab-case, 3-50 characters, lowercase alphanumerics and hyphens."""

    if not isinstance(value, str) or not 3 <= len(value) <= 50:
        return False
    return _CATEGORY_ID_PATTERN.match(value) is not None


def is_valid_hex_color(value: object) -> bool:
    return isinstance(value, str) and _HEX_COLOR_PATTERN.match(value) is not None


def is_valid_emoji(value: object) -> bool:
    return isinstance(value, str) and _EMOJI_PATTERN.search(value) is not None


def validate_category(category: object, index: int) -> ValidationResult:
    """Validate one category entry of a kit file."""

    result = ValidationResult()
    path = f"categories[{index}]"

    if not isinstance(category, Mapping):
        result.error(path, "Category must be an object", "INVALID_CATEGORY_ENTRY")
        return result

    if not is_valid_category_id(category.get("id")):
        result.error(
            f"{path}.id",
            "Category ID must be kebab-case, 3-50 characters",
            "INVALID_CATEGORY_ID",
        )

    names = category.get("names")
    if not isinstance(names, Mapping):
        result.error(f"{path}.names", "Category names must be an object", "INVALID_CATEGORY_NAMES")
    elif not is_non_empty_string(names.get("en")):
        result.error(
            f"{path}.names.en",
            "Category must have names.en (English name)",
            "MISSING_CATEGORY_NAME",
        )

    if not is_valid_emoji(category.get("icon")):
        result.error(f"{path}.icon", "Category icon must be a valid emoji", "INVALID_CATEGORY_ICON")

    if "color" in category and not is_valid_hex_color(category["color"]):
        result.error(
            f"{path}.color",
            "Category color must be valid hex format (#RGB or #RRGGBB)",
            "INVALID_CATEGORY_COLOR",
        )

    if "sortOrder" in category:
        sort_order = category["sortOrder"]
        if not isinstance(sort_order, int) or isinstance(sort_order, bool) or sort_order < 0:
            result.error(
                f"{path}.sortOrder",
                "sortOrder must be a non-negative integer",
                "INVALID_SORT_ORDER",
            )

    return result


def validate_categories(
    categories: Sequence[object],
    reserved_ids: Iterable[str] = STANDARD_CATEGORIES,
) -> ValidationResult:
    """Validate every category and cross-check ids for duplicates and collisions."""

    result = ValidationResult()
    reserved = set(reserved_ids)
    seen: set[str] = set()

    for index, category in enumerate(categories):
        result.extend(validate_category(category, index))
        if not isinstance(category, Mapping):
            continue
        category_id = category.get("id")
        if not isinstance(category_id, str):
            continue
        if category_id in seen:
            result.error(
                f"categories[{index}].id",
                f"Duplicate category ID: {category_id}",
                "DUPLICATE_CATEGORY_ID",
            )
        else:
            seen.add(category_id)
        if category_id in reserved:
            result.error(
                f"categories[{index}].id",
                f"Category ID '{category_id}' conflicts with standard category",
                "CATEGORY_CONFLICTS_STANDARD",
            )

    return result


def declared_category_ids(categories: object) -> set[str]:
    """Ids of the well-formed categories in a raw ``categories`` value."""

    if not isinstance(categories, list):
        return set()
    return {
        entry["id"]
        for entry in categories
        if isinstance(entry, Mapping) and is_valid_category_id(entry.get("id"))
    }


def valid_category_ids(custom_ids: Optional[Iterable[str]] = None) -> set[str]:
    ids = set(STANDARD_CATEGORIES)
    if custom_ids:
        ids.update(custom_ids)
    return ids
