"""User overrides on top of generated alerts and recommendations."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from stockpile.models.alert import Alert

logger = logging.getLogger(__name__)


class OverrideTracker:
    """
    Dismissed alert ids and disabled recommended item ids.

    Dismissed ids are never pruned automatically: an id whose condition no longer
    holds simply matches nothing until it is reactivated.
    """

    def __init__(
        self,
        dismissed_alert_ids: Iterable[str] = (),
        disabled_recommended_items: Iterable[str] = (),
    ) -> None:
        # dicts keep insertion order for persistence
        self._dismissed: dict[str, None] = dict.fromkeys(dismissed_alert_ids)
        self._disabled: dict[str, None] = dict.fromkeys(disabled_recommended_items)

    @property
    def dismissed_alert_ids(self) -> list[str]:
        return list(self._dismissed)

    @property
    def disabled_recommended_items(self) -> list[str]:
        return list(self._disabled)

    def dismiss(self, alert_id: str) -> None:
        self._dismissed[alert_id] = None

    def reactivate(self, alert_id: str) -> bool:
        if alert_id not in self._dismissed:
            logger.warning("Alert %s is not dismissed", alert_id, extra={"alert_id": alert_id})
            return False
        del self._dismissed[alert_id]
        return True

    def reactivate_all(self) -> None:
        self._dismissed.clear()

    def is_dismissed(self, alert_id: str) -> bool:
        return alert_id in self._dismissed

    def visible_alerts(self, alerts: Sequence[Alert]) -> list[Alert]:
        return [alert for alert in alerts if alert.id not in self._dismissed]

    def hidden_alerts(self, alerts: Sequence[Alert]) -> list[Alert]:
        return [alert for alert in alerts if alert.id in self._dismissed]

    def hidden_count(self, alerts: Sequence[Alert]) -> int:
        """Dismissed alerts that would currently fire; stale ids do not count."""

        return len(self.hidden_alerts(alerts))

    def disable_recommendation(self, item_id: str) -> None:
        self._disabled[item_id] = None

    def enable_recommendation(self, item_id: str) -> bool:
        if item_id not in self._disabled:
            logger.warning("Recommendation %s is not disabled", item_id, extra={"item_id": item_id})
            return False
        del self._disabled[item_id]
        return True

    def enable_all_recommendations(self) -> None:
        self._disabled.clear()

    def is_disabled(self, item_id: str) -> bool:
        return item_id in self._disabled
