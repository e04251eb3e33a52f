"""Session object tying the persisted document to the kit registry and the engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

from pydantic import ValidationError

from stockpile.categories import CategoryCatalog
from stockpile.config import Settings, get_settings
from stockpile.db.documents import DocumentStore
from stockpile.engine.alerts import generate_alerts
from stockpile.engine.overrides import OverrideTracker
from stockpile.engine.scaling import scale_quantity
from stockpile.engine.scoring import CategoryScore, category_breakdown, overall_score
from stockpile.kits.registry import KitRegistry
from stockpile.models.alert import Alert
from stockpile.models.document import PersistedDocument, UserSettings
from stockpile.models.household import HouseholdProfile
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem, Translator, identity_translator

logger = logging.getLogger(__name__)

_EDITABLE_INVENTORY_FIELDS = set(InventoryItem.model_fields)


@dataclass(frozen=True)
class PreparednessSummary:
    overall: int
    categories: list[CategoryScore]


class Workspace:
    """
    One user session over the persisted document.

    Build it with :meth:`load`; mutate through its methods or through the exposed
    ``registry``, ``overrides`` and ``categories`` services, then call :meth:`save`.
    """

    def __init__(
        self,
        store: DocumentStore,
        document: PersistedDocument,
        *,
        settings: Optional[Settings] = None,
        translate: Optional[Translator] = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.translate: Translator = translate or identity_translator
        self.household = document.household
        self.user_settings = document.settings
        self.items: list[InventoryItem] = list(document.items)
        self.overrides = OverrideTracker(
            document.dismissed_alert_ids, document.disabled_recommended_items
        )
        self.categories = CategoryCatalog(document.disabled_categories, document.custom_categories)
        self.registry = KitRegistry.from_state(
            self.overrides,
            self.categories,
            uploaded_kits=document.uploaded_kits,
            selected_kit_id=document.selected_kit_id,
        )

    @classmethod
    def load(
        cls,
        store: DocumentStore,
        *,
        settings: Optional[Settings] = None,
        translate: Optional[Translator] = None,
    ) -> "Workspace":
        """Open the stored document; a missing or corrupt one starts from defaults."""

        settings = settings or get_settings()
        raw = store.load()
        document: Optional[PersistedDocument] = None
        if raw is not None:
            try:
                document = PersistedDocument.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Stored document is invalid, starting fresh: %s", exc)

        if document is not None:
            return cls(store, document, settings=settings, translate=translate)

        fresh = PersistedDocument(
            selected_kit_id=settings.default_kit_id,
            settings=UserSettings(
                children_requirement_percentage=settings.children_multiplier * 100
            ),
        )
        workspace = cls(store, fresh, settings=settings, translate=translate)
        workspace.categories.apply_kit(
            workspace.registry.selected_kit_id, workspace.registry.active_kit()
        )
        return workspace

    # Recommendations

    @property
    def children_multiplier(self) -> float:
        return self.user_settings.children_multiplier

    def recommended_items(self) -> list[KitItem]:
        return self.registry.recommended_items()

    def active_recommended_items(self) -> list[KitItem]:
        return [
            item
            for item in self.registry.recommended_items()
            if not self.overrides.is_disabled(item.id)
        ]

    def recommended_quantity(self, kit_item: KitItem) -> int:
        return scale_quantity(kit_item, self.household, children_multiplier=self.children_multiplier)

    def scores(self) -> PreparednessSummary:
        recommended = self.registry.recommended_items()
        disabled = self.overrides.disabled_recommended_items
        return PreparednessSummary(
            overall=overall_score(
                self.items,
                self.household,
                recommended,
                disabled,
                children_multiplier=self.children_multiplier,
            ),
            categories=category_breakdown(
                self.items,
                self.household,
                recommended,
                disabled,
                category_ids=self.categories.active_category_ids(),
                children_multiplier=self.children_multiplier,
            ),
        )

    # Alerts

    def alerts(self, now: Union[date, datetime, None] = None) -> list[Alert]:
        return generate_alerts(
            self.items,
            now or datetime.now(timezone.utc),
            translate=self.translate,
            category_ids=self.categories.active_category_ids(),
            recommended_items=self.registry.recommended_items(),
            expiring_soon_days=self.settings.expiring_soon_days,
            critically_low_percentage=self.settings.critically_low_percentage,
            low_stock_percentage=self.settings.low_stock_percentage,
        )

    def visible_alerts(self, now: Union[date, datetime, None] = None) -> list[Alert]:
        return self.overrides.visible_alerts(self.alerts(now))

    def hidden_alerts_count(self, now: Union[date, datetime, None] = None) -> int:
        return self.overrides.hidden_count(self.alerts(now))

    # Inventory

    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def add_item(self, item: InventoryItem) -> bool:
        if self.get_item(item.id) is not None:
            logger.warning("Inventory already has item %s", item.id, extra={"item_id": item.id})
            return False
        if item.category_id not in self.categories.known_category_ids():
            logger.warning(
                "Unknown category %s", item.category_id, extra={"item_id": item.id}
            )
            return False
        self.items.append(item)
        return True

    def add_item_from_kit(
        self,
        kit_item_id: str,
        *,
        quantity: float = 0.0,
        today: Optional[date] = None,
    ) -> Optional[InventoryItem]:
        """Create an inventory entry linked to a recommended item of the active kit."""

        kit_item = self.registry.active_kit().find_item(kit_item_id)
        if kit_item is None:
            logger.warning(
                "Active kit has no item %s", kit_item_id, extra={"item_id": kit_item_id}
            )
            return None
        item = InventoryItem.from_kit_item(
            kit_item,
            self.household,
            quantity=quantity,
            today=today,
            language=self.user_settings.language,
            translate=self.translate,
            children_multiplier=self.children_multiplier,
        )
        self.items.append(item)
        return item

    def update_item(self, item_id: str, **changes: Any) -> bool:
        current = self.get_item(item_id)
        if current is None:
            logger.warning("Inventory has no item %s", item_id, extra={"item_id": item_id})
            return False
        if "id" in changes and changes["id"] != item_id:
            logger.warning("Inventory item ids cannot change", extra={"item_id": item_id})
            return False
        unknown = set(changes) - _EDITABLE_INVENTORY_FIELDS
        if unknown:
            logger.warning(
                "Unknown inventory fields: %s", ", ".join(sorted(unknown)), extra={"item_id": item_id}
            )
            return False
        try:
            updated = InventoryItem.model_validate({**current.model_dump(), **changes})
        except ValidationError as exc:
            logger.warning("Rejected inventory update: %s", exc, extra={"item_id": item_id})
            return False
        self.items = [updated if item.id == item_id else item for item in self.items]
        return True

    def remove_item(self, item_id: str) -> bool:
        if self.get_item(item_id) is None:
            logger.warning("Inventory has no item %s", item_id, extra={"item_id": item_id})
            return False
        self.items = [item for item in self.items if item.id != item_id]
        return True

    def mark_item_enough(self, item_id: str, enough: bool = True) -> bool:
        return self.update_item(item_id, marked_as_enough=enough)

    # Household and settings

    def set_household(self, household: HouseholdProfile) -> None:
        """Replace the household and rescale kit-linked inventory recommendations."""

        self.household = household
        kit = self.registry.active_kit()
        rescaled = []
        for item in self.items:
            kit_item = kit.find_item(item.template_id) if item.template_id else None
            if kit_item is not None:
                item = item.model_copy(
                    update={"recommended_quantity": float(self.recommended_quantity(kit_item))}
                )
            rescaled.append(item)
        self.items = rescaled

    def set_user_settings(self, user_settings: UserSettings) -> None:
        self.user_settings = user_settings

    # Persistence

    def to_document(self) -> PersistedDocument:
        registry_state = self.registry.to_state()
        return PersistedDocument(
            household=self.household,
            settings=self.user_settings,
            items=self.items,
            disabled_categories=self.categories.disabled_standard,
            custom_categories=self.categories.custom_categories,
            uploaded_kits=registry_state["uploaded_kits"],
            selected_kit_id=registry_state["selected_kit_id"],
            dismissed_alert_ids=self.overrides.dismissed_alert_ids,
            disabled_recommended_items=self.overrides.disabled_recommended_items,
        )

    def save(self) -> PersistedDocument:
        document = self.to_document()
        self.store.save(document.to_json_dict())
        logger.info(
            "Saved workspace items=%d kits=%d",
            len(document.items),
            len(document.uploaded_kits),
            extra={"kit_id": self.registry.selected_kit_id},
        )
        return document
