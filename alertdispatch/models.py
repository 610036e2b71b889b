"""Core alert data models.

This module defines the raw alert record handed to the dispatch pipeline
and the label/annotation mapping type exposed to templates.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Well-known annotation keys
DASHBOARD_UID_ANNOTATION = "__dashboardUid__"
PANEL_ID_ANNOTATION = "__panelId__"
ORG_ID_ANNOTATION = "__orgId__"
VALUES_ANNOTATION = "__values__"
VALUE_STRING_ANNOTATION = "__value_string__"
IMAGE_ANNOTATION = "image"

ALERT_NAME_LABEL = "alertname"


class AlertStatus(str, Enum):
    """Status of a single alert or of a whole batch."""
    FIRING = "firing"
    RESOLVED = "resolved"


class Alert(BaseModel):
    """One firing or resolved alert as received by the pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    status: AlertStatus = Field(
        default=AlertStatus.FIRING,
        description="Whether the alert is firing or resolved"
    )
    labels: Dict[str, str] = Field(
        default_factory=dict,
        description="Identifying labels"
    )
    annotations: Dict[str, str] = Field(
        default_factory=dict,
        description="Descriptive annotations"
    )
    starts_at: Optional[datetime] = Field(
        default=None,
        alias="startsAt",
        description="When the alert started firing"
    )
    ends_at: Optional[datetime] = Field(
        default=None,
        alias="endsAt",
        description="When the alert resolved"
    )
    generator_url: str = Field(
        default="",
        alias="generatorURL",
        description="Link back to the alert source"
    )

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING


def is_private_key(key: str) -> bool:
    """Check whether a label or annotation key is reserved for internal use."""
    return len(key) > 4 and key.startswith("__") and key.endswith("__")


class KV(dict):
    """String mapping for labels and annotations with template helpers."""

    def sorted_pairs(self) -> List[Tuple[str, str]]:
        """Return pairs sorted by key, with the alert name always first."""
        keys = sorted(k for k in self if k != ALERT_NAME_LABEL)
        if ALERT_NAME_LABEL in self:
            keys.insert(0, ALERT_NAME_LABEL)
        return [(k, self[k]) for k in keys]

    def names(self) -> List[str]:
        return [k for k, _ in self.sorted_pairs()]

    def sorted_values(self) -> List[str]:
        return [v for _, v in self.sorted_pairs()]

    def remove(self, keys: Iterable[str]) -> "KV":
        """Return a copy without the given keys."""
        excluded = set(keys)
        return KV((k, v) for k, v in self.items() if k not in excluded)

    def without_private(self) -> "KV":
        return KV((k, v) for k, v in self.items() if not is_private_key(k))
