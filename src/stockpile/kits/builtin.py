"""Built-in recommendation kits shipped with the package."""

from __future__ import annotations

import logging
from importlib import resources
from typing import Mapping

from stockpile.constants import DEFAULT_KIT_ID
from stockpile.kits.validation import parse_kit_file
from stockpile.models.kit import KitFile

logger = logging.getLogger(__name__)

BUILTIN_KIT_IDS: tuple[str, ...] = (DEFAULT_KIT_ID, "minimal-essentials")


def load_builtin_kit(kit_id: str) -> KitFile:
    """Load and validate a bundled kit from ``stockpile/kits/data``."""

    text = resources.files("stockpile.kits.data").joinpath(f"{kit_id}.json").read_text(
        encoding="utf-8"
    )
    return parse_kit_file(text)


def _load_all() -> Mapping[str, KitFile]:
    kits = {kit_id: load_builtin_kit(kit_id) for kit_id in BUILTIN_KIT_IDS}
    logger.debug("Loaded %d built-in kits", len(kits))
    return kits


BUILTIN_KITS: Mapping[str, KitFile] = _load_all()


def is_builtin_kit_id(kit_id: str) -> bool:
    return kit_id in BUILTIN_KITS


__all__ = ["BUILTIN_KITS", "BUILTIN_KIT_IDS", "is_builtin_kit_id", "load_builtin_kit"]
