"""Link inventory entries to the recommended kit items they satisfy."""

from __future__ import annotations

import re
from typing import Iterable

from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    return _WHITESPACE.sub("-", name.strip().lower())


def matches(entry: InventoryItem, item: KitItem) -> bool:
    """Explicit template link first; unlinked entries fall back to their name."""

    if entry.template_id is not None:
        return entry.template_id == item.id
    return normalize_name(entry.name) == item.id.lower()


def matching_entries(inventory: Iterable[InventoryItem], item: KitItem) -> list[InventoryItem]:
    return [entry for entry in inventory if matches(entry, item)]
