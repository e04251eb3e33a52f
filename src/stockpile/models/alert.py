"""Alert models."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

AlertSeverity = Literal["critical", "warning", "info"]

ALERT_PRIORITY: dict[str, int] = {"critical": 0, "warning": 1, "info": 2}


class Alert(BaseModel):
    """Transient warning derived from the current inventory."""

    id: str
    severity: AlertSeverity
    message: str
    message_key: str
    params: dict[str, Union[int, float, str]] = Field(default_factory=dict)
    item_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class AlertCounts(BaseModel):
    """Alert totals per severity."""

    critical: int = 0
    warning: int = 0
    info: int = 0
    total: int = 0

    model_config = ConfigDict(frozen=True)
