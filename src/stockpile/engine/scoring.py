"""Preparedness scores: how well the inventory covers the recommended kit."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from stockpile.constants import (
    CHILDREN_REQUIREMENT_MULTIPLIER,
    DEFAULT_EMPTY_PREPAREDNESS,
    DEFAULT_FULL_PREPAREDNESS,
    MAX_ITEM_SCORE,
    STANDARD_CATEGORIES,
)
from stockpile.engine.matching import matching_entries
from stockpile.engine.scaling import scale_quantity
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem


@dataclass(frozen=True)
class ItemCoverage:
    """Coverage of one recommended item by the inventory."""

    item_id: str
    recommended: int
    actual: float
    marked_as_enough: bool
    percentage: float


@dataclass(frozen=True)
class CategoryScore:
    category_id: str
    score: int
    items: tuple[ItemCoverage, ...]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def item_coverage(
    item: KitItem,
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    *,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> Optional[ItemCoverage]:
    """Return ``None`` when the item scales to nothing for this household."""

    recommended = scale_quantity(item, household, children_multiplier=children_multiplier)
    if recommended <= 0:
        return None
    entries = matching_entries(inventory, item)
    actual = sum(entry.quantity for entry in entries)
    enough = any(entry.marked_as_enough for entry in entries)
    if enough:
        percentage = float(MAX_ITEM_SCORE)
    else:
        percentage = min(actual / recommended, 1.0) * MAX_ITEM_SCORE
    return ItemCoverage(
        item_id=item.id,
        recommended=recommended,
        actual=actual,
        marked_as_enough=enough,
        percentage=percentage,
    )


def _active(items: Iterable[KitItem], disabled_ids: Iterable[str]) -> list[KitItem]:
    disabled = set(disabled_ids)
    return [item for item in items if item.id not in disabled]


def _coverages(
    items: Iterable[KitItem],
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    children_multiplier: float,
) -> list[ItemCoverage]:
    results = []
    for item in items:
        coverage = item_coverage(
            item, inventory, household, children_multiplier=children_multiplier
        )
        if coverage is not None:
            results.append(coverage)
    return results


def _mean_score(coverages: Sequence[ItemCoverage]) -> int:
    return round_half_up(sum(c.percentage for c in coverages) / len(coverages))


def _score_category(
    category_id: str,
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    recommended_items: Iterable[KitItem],
    disabled_ids: Iterable[str],
    children_multiplier: float,
) -> CategoryScore:
    items = [
        item
        for item in _active(recommended_items, disabled_ids)
        if item.category == category_id
    ]
    coverages = _coverages(items, inventory, household, children_multiplier)
    if not coverages:
        has_inventory = any(entry.category_id == category_id for entry in inventory)
        score = DEFAULT_FULL_PREPAREDNESS if has_inventory else DEFAULT_EMPTY_PREPAREDNESS
        return CategoryScore(category_id=category_id, score=score, items=())
    return CategoryScore(
        category_id=category_id,
        score=_mean_score(coverages),
        items=tuple(coverages),
    )


def category_score(
    category_id: str,
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    recommended_items: Iterable[KitItem],
    disabled_ids: Iterable[str] = (),
    *,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> int:
    """
    Mean of the capped per-item coverage percentages within ``category_id``.

    A category without recommended items scores 100 when the user keeps anything
    in it and 0 otherwise.
    """

    return _score_category(
        category_id,
        inventory,
        household,
        recommended_items,
        disabled_ids,
        children_multiplier,
    ).score


def overall_score(
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    recommended_items: Iterable[KitItem],
    disabled_ids: Iterable[str] = (),
    *,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> int:
    """Mean coverage across every active item; freezer items need a freezer."""

    items = [
        item
        for item in _active(recommended_items, disabled_ids)
        if household.uses_freezer or not item.requires_freezer
    ]
    coverages = _coverages(items, inventory, household, children_multiplier)
    if not coverages:
        return DEFAULT_EMPTY_PREPAREDNESS
    return _mean_score(coverages)


def category_breakdown(
    inventory: Sequence[InventoryItem],
    household: HouseholdProfile,
    recommended_items: Sequence[KitItem],
    disabled_ids: Iterable[str] = (),
    *,
    category_ids: Optional[Iterable[str]] = None,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> list[CategoryScore]:
    """Per-category scores with item detail, in ``category_ids`` order."""

    if category_ids is None:
        ordered = list(STANDARD_CATEGORIES)
        for item in recommended_items:
            if item.category not in ordered:
                ordered.append(item.category)
        category_ids = ordered
    disabled = list(disabled_ids)
    return [
        _score_category(
            category_id,
            inventory,
            household,
            recommended_items,
            disabled,
            children_multiplier,
        )
        for category_id in category_ids
    ]
