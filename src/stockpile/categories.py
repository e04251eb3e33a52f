"""Active category set: standard category overrides plus custom categories."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from stockpile.constants import STANDARD_CATEGORIES
from stockpile.kits.categories import validate_category
from stockpile.models.category import CustomCategory
from stockpile.models.kit import KitFile

logger = logging.getLogger(__name__)


class CategoryCatalog:
    """
    Tracks which standard categories are disabled and which custom categories exist.

    Custom categories either belong to the user (``source_kit_id is None``) or were
    declared by the selected kit. Switching kits replaces only the kit-sourced ones.
    """

    def __init__(
        self,
        disabled_standard: Iterable[str] = (),
        custom_categories: Iterable[CustomCategory] = (),
    ) -> None:
        self._disabled: list[str] = []
        for category_id in disabled_standard:
            if category_id in STANDARD_CATEGORIES and category_id not in self._disabled:
                self._disabled.append(category_id)
        self._custom: list[CustomCategory] = list(custom_categories)

    @property
    def disabled_standard(self) -> list[str]:
        return list(self._disabled)

    @property
    def custom_categories(self) -> list[CustomCategory]:
        return list(self._custom)

    def get_custom(self, category_id: str) -> Optional[CustomCategory]:
        return next((c for c in self._custom if c.id == category_id), None)

    def active_category_ids(self) -> list[str]:
        """Enabled standard categories in canonical order, then custom ones."""

        standard = [c for c in STANDARD_CATEGORIES if c not in self._disabled]
        custom = sorted(
            self._custom,
            key=lambda c: (c.sort_order is None, c.sort_order or 0),
        )
        return standard + [c.id for c in custom]

    def known_category_ids(self) -> set[str]:
        return set(STANDARD_CATEGORIES) | {c.id for c in self._custom}

    def add_custom_category(self, category: CustomCategory) -> bool:
        """Add a user-created category; invalid or clashing ids are rejected."""

        payload = category.model_dump(by_alias=True, exclude_none=True, exclude={"source_kit_id"})
        result = validate_category(payload, 0)
        if not result.valid:
            logger.warning("Rejected custom category %s: %s", category.id, result.summary())
            return False
        if category.id in self.known_category_ids():
            logger.warning("Category %s already exists", category.id)
            return False
        self._custom.append(category.model_copy(update={"source_kit_id": None}))
        return True

    def remove_custom_category(self, category_id: str) -> bool:
        if self.get_custom(category_id) is None:
            logger.warning("Cannot remove unknown custom category %s", category_id)
            return False
        self._custom = [c for c in self._custom if c.id != category_id]
        return True

    def disable_standard(self, category_id: str) -> bool:
        if category_id not in STANDARD_CATEGORIES:
            logger.warning("Cannot disable non-standard category %s", category_id)
            return False
        if category_id not in self._disabled:
            self._disabled.append(category_id)
        return True

    def enable_standard(self, category_id: str) -> bool:
        if category_id not in STANDARD_CATEGORIES:
            logger.warning("Cannot enable non-standard category %s", category_id)
            return False
        if category_id in self._disabled:
            self._disabled.remove(category_id)
        return True

    def apply_kit(self, kit_id: str, kit: KitFile) -> None:
        """Replace kit-sourced categories and standard overrides with ``kit``'s settings."""

        user_defined = [c for c in self._custom if c.source_kit_id is None]
        user_ids = {c.id for c in user_defined}
        from_kit = []
        for category in kit.categories:
            if category.id in user_ids:
                logger.warning(
                    "Kit category %s shadowed by user category",
                    category.id,
                    extra={"kit_id": kit_id},
                )
                continue
            from_kit.append(CustomCategory.from_kit(category, kit_id))
        self._custom = user_defined + from_kit
        self._disabled = [c for c in STANDARD_CATEGORIES if c in kit.disabled_categories]
        logger.debug(
            "Applied kit categories custom=%d disabled=%d",
            len(from_kit),
            len(self._disabled),
            extra={"kit_id": kit_id},
        )
