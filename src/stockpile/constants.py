"""Fixed enumerations and calculation constants shared across the engine."""

from __future__ import annotations

from typing import Tuple

STANDARD_CATEGORIES: Tuple[str, ...] = (
    "water-beverages",
    "food",
    "cooking-heat",
    "light-power",
    "communication-info",
    "medical-health",
    "hygiene-sanitation",
    "tools-supplies",
    "cash-documents",
    "pets",
)

VALID_UNITS: Tuple[str, ...] = (
    "pieces",
    "liters",
    "kilograms",
    "grams",
    "cans",
    "bottles",
    "packages",
    "jars",
    "canisters",
    "boxes",
    "days",
    "rolls",
    "tubes",
    "meters",
    "pairs",
    "euros",
    "sets",
)

SUPPORTED_LANGUAGES: Tuple[str, ...] = ("en", "fi")

DEFAULT_KIT_ID = "72tuntia-standard"
CUSTOM_KIT_PREFIX = "custom:"

# Household scaling
ADULT_REQUIREMENT_MULTIPLIER = 1.0
CHILDREN_REQUIREMENT_MULTIPLIER = 0.75
BASE_SUPPLY_DAYS = 3
MAX_SUPPLY_DURATION_DAYS = 365

# Scores
MAX_ITEM_SCORE = 100
DEFAULT_FULL_PREPAREDNESS = 100
DEFAULT_EMPTY_PREPAREDNESS = 0

# Alerts
EXPIRING_SOON_ALERT_DAYS = 30
CRITICALLY_LOW_STOCK_PERCENTAGE = 25
LOW_STOCK_PERCENTAGE = 50

# Preparation water
WATER_CATEGORY_ID = "water-beverages"
BOTTLED_WATER_ITEM_ID = "bottled-water"

DOCUMENT_VERSION = "1.0.0"
