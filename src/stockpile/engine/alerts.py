"""Alert generation from the current inventory."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, Union

from stockpile.constants import (
    BOTTLED_WATER_ITEM_ID,
    CRITICALLY_LOW_STOCK_PERCENTAGE,
    EXPIRING_SOON_ALERT_DAYS,
    LOW_STOCK_PERCENTAGE,
    STANDARD_CATEGORIES,
    WATER_CATEGORY_ID,
)
from stockpile.engine.scoring import round_half_up
from stockpile.metrics import ALERTS_GENERATED
from stockpile.models.alert import ALERT_PRIORITY, Alert, AlertCounts, AlertSeverity
from stockpile.models.inventory import InventoryItem
from stockpile.models.kit import KitItem, Translator, identity_translator

logger = logging.getLogger(__name__)


def _make_alert(
    translate: Translator,
    alert_id: str,
    severity: AlertSeverity,
    message_key: str,
    item_name: Optional[str],
    **params: Any,
) -> Alert:
    return Alert(
        id=alert_id,
        severity=severity,
        message=translate(message_key, **params),
        message_key=message_key,
        params=params,
        item_name=item_name,
    )


def _item_name(item: InventoryItem, translate: Translator) -> str:
    """Translated product name for kit-linked items, stored name otherwise."""

    if item.template_id:
        translated = translate(item.template_id, ns="products")
        if translated != item.template_id:
            return translated
    return item.name


def expiration_alerts(
    inventory: Iterable[InventoryItem],
    today: date,
    translate: Translator,
    *,
    expiring_soon_days: int = EXPIRING_SOON_ALERT_DAYS,
) -> list[Alert]:
    alerts = []
    for item in inventory:
        days = item.days_until_expiration(today)
        if days is None:
            continue
        if days < 0:
            alerts.append(
                _make_alert(
                    translate,
                    f"expired-{item.id}",
                    "critical",
                    "alerts.expiration.expired",
                    _item_name(item, translate),
                )
            )
        elif days <= expiring_soon_days:
            alerts.append(
                _make_alert(
                    translate,
                    f"expiring-soon-{item.id}",
                    "warning",
                    "alerts.expiration.expiringSoon",
                    _item_name(item, translate),
                    days=days,
                )
            )
    return alerts


def _effective_quantity(item: InventoryItem) -> float:
    if item.marked_as_enough:
        return max(item.quantity, item.recommended_quantity)
    return item.quantity


def category_stock_alerts(
    inventory: Sequence[InventoryItem],
    translate: Translator,
    *,
    category_ids: Iterable[str] = STANDARD_CATEGORIES,
    critically_low_percentage: float = CRITICALLY_LOW_STOCK_PERCENTAGE,
    low_stock_percentage: float = LOW_STOCK_PERCENTAGE,
) -> list[Alert]:
    alerts = []
    for category_id in category_ids:
        items = [item for item in inventory if item.category_id == category_id]
        if not items:
            continue

        actual = sum(_effective_quantity(item) for item in items)
        recommended = sum(item.recommended_quantity for item in items)

        # Empty shelves are out of stock even when nothing is recommended for them.
        if actual == 0 and not any(item.marked_as_enough for item in items):
            alerts.append(
                _make_alert(
                    translate,
                    f"category-out-of-stock-{category_id}",
                    "critical",
                    "alerts.stock.outOfStock",
                    translate(category_id, ns="categories"),
                )
            )
            continue
        if recommended <= 0 or actual >= recommended:
            continue

        category_name = translate(category_id, ns="categories")
        percent = actual / recommended * 100
        if percent < critically_low_percentage:
            alerts.append(
                _make_alert(
                    translate,
                    f"category-critically-low-{category_id}",
                    "critical",
                    "alerts.stock.criticallyLow",
                    category_name,
                    percent=round_half_up(percent),
                )
            )
        elif percent < low_stock_percentage:
            alerts.append(
                _make_alert(
                    translate,
                    f"category-low-stock-{category_id}",
                    "warning",
                    "alerts.stock.runningLow",
                    category_name,
                    percent=round_half_up(percent),
                )
            )
    return alerts


def _water_per_unit(item: InventoryItem, templates: dict[str, KitItem]) -> float:
    if item.requires_water_liters:
        return item.requires_water_liters
    template = templates.get(item.template_id) if item.template_id else None
    if template is not None and template.requires_water_liters:
        return template.requires_water_liters
    return 0.0


def _is_drinking_water(item: InventoryItem) -> bool:
    if item.category_id != WATER_CATEGORY_ID or item.unit != "liters":
        return False
    return item.template_id == BOTTLED_WATER_ITEM_ID or "water" in item.name.lower()


def water_shortage_alerts(
    inventory: Iterable[InventoryItem],
    translate: Translator,
    *,
    recommended_items: Iterable[KitItem] = (),
) -> list[Alert]:
    """Warn when stored food needs more preparation water than is stored."""

    templates = {item.id: item for item in recommended_items}
    inventory = list(inventory)
    required = sum(
        _water_per_unit(item, templates) * item.quantity for item in inventory if item.quantity > 0
    )
    available = sum(item.quantity for item in inventory if _is_drinking_water(item))
    shortfall = required - available
    if shortfall <= 0:
        return []
    liters = math.ceil(round(shortfall * 10, 9)) / 10
    return [
        _make_alert(
            translate,
            "water-shortage-preparation",
            "warning",
            "alerts.water.preparationShortage",
            None,
            liters=liters,
        )
    ]


def generate_alerts(
    inventory: Sequence[InventoryItem],
    now: Union[date, datetime],
    *,
    translate: Optional[Translator] = None,
    category_ids: Optional[Iterable[str]] = None,
    recommended_items: Iterable[KitItem] = (),
    expiring_soon_days: int = EXPIRING_SOON_ALERT_DAYS,
    critically_low_percentage: float = CRITICALLY_LOW_STOCK_PERCENTAGE,
    low_stock_percentage: float = LOW_STOCK_PERCENTAGE,
) -> list[Alert]:
    """
    Build every alert for ``inventory`` as of ``now``.

    Critical alerts come first, then warnings, then informational alerts. Within one
    severity the generation order (expiration alerts, category stock, then the
    preparation water check) is kept. ``recommended_items`` supplies the per-unit
    preparation water of kit-linked items; the water check only runs while the
    water category is among ``category_ids``.
    """

    translator = translate or identity_translator
    today = now.date() if isinstance(now, datetime) else now
    checked = STANDARD_CATEGORIES if category_ids is None else tuple(category_ids)

    alerts = expiration_alerts(
        inventory, today, translator, expiring_soon_days=expiring_soon_days
    )
    alerts.extend(
        category_stock_alerts(
            inventory,
            translator,
            category_ids=checked,
            critically_low_percentage=critically_low_percentage,
            low_stock_percentage=low_stock_percentage,
        )
    )
    if WATER_CATEGORY_ID in checked:
        alerts.extend(
            water_shortage_alerts(inventory, translator, recommended_items=recommended_items)
        )
    alerts.sort(key=lambda alert: ALERT_PRIORITY[alert.severity])

    for alert in alerts:
        ALERTS_GENERATED.labels(severity=alert.severity).inc()
    logger.debug("Generated %d alerts for %d items", len(alerts), len(inventory))
    return alerts


def count_alerts(alerts: Iterable[Alert]) -> AlertCounts:
    counts = {"critical": 0, "warning": 0, "info": 0}
    for alert in alerts:
        counts[alert.severity] += 1
    return AlertCounts(total=sum(counts.values()), **counts)
