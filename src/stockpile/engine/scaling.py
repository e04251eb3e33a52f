"""Scale kit quantities to a household."""

from __future__ import annotations

import math

from stockpile.constants import (
    ADULT_REQUIREMENT_MULTIPLIER,
    BASE_SUPPLY_DAYS,
    CHILDREN_REQUIREMENT_MULTIPLIER,
)
from stockpile.models.household import HouseholdProfile
from stockpile.models.kit import KitItem


def household_multiplier(
    household: HouseholdProfile,
    *,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> float:
    """Adult-equivalent head count. Pets are not part of it."""

    return (
        household.adults * ADULT_REQUIREMENT_MULTIPLIER
        + household.children * children_multiplier
    )


def scale_quantity(
    item: KitItem,
    household: HouseholdProfile,
    *,
    children_multiplier: float = CHILDREN_REQUIREMENT_MULTIPLIER,
) -> int:
    """Recommended quantity of ``item`` for ``household``, always rounded up."""

    quantity = item.base_quantity
    if item.scale_with_people:
        quantity *= household_multiplier(household, children_multiplier=children_multiplier)
    if item.scale_with_days:
        quantity *= household.supply_duration_days / BASE_SUPPLY_DAYS
    # 3 * 0.1 / 0.1 style float noise must not push an exact result up by one.
    return math.ceil(round(quantity, 9))
