"""Extended view of an alert batch.

The extended view is the template-ready representation of one notification:
per-alert fingerprints and contextual URLs, batch status, group labels and
the labels/annotations shared by every alert. It is built once per notify
call and never mutated afterwards.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote_plus, urlencode

from ..fingerprint import fingerprint_hex
from ..models import (
    DASHBOARD_UID_ANNOTATION,
    IMAGE_ANNOTATION,
    ORG_ID_ANNOTATION,
    PANEL_ID_ANNOTATION,
    VALUE_STRING_ANNOTATION,
    VALUES_ANNOTATION,
    KV,
    Alert,
    AlertStatus,
)


logger = logging.getLogger(__name__)

SILENCE_PATH = "/alerting/silence/new"
SILENCE_ALERTMANAGER = "grafana"


@dataclass(frozen=True)
class TruncationState:
    """How many alerts were cut from the rendered sequence."""
    max_alerts: int = 0
    truncated_count: int = 0


@dataclass(frozen=True)
class ExtendedAlert:
    """Render record for a single alert."""

    status: str
    labels: KV
    annotations: KV
    fingerprint: str
    silence_url: str
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    generator_url: str = ""
    dashboard_url: str = ""
    panel_url: str = ""
    values: Dict[str, float] = field(default_factory=dict)
    value_string: str = ""
    image_url: str = ""

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        data = {
            "status": self.status,
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
            "startsAt": self.starts_at.isoformat() if self.starts_at else None,
            "endsAt": self.ends_at.isoformat() if self.ends_at else None,
            "generatorURL": self.generator_url,
            "fingerprint": self.fingerprint,
            "silenceURL": self.silence_url,
            "dashboardURL": self.dashboard_url,
            "panelURL": self.panel_url,
            "values": dict(self.values),
            "valueString": self.value_string,
        }
        if self.image_url:
            data["imageURL"] = self.image_url
        return data


class ExtendedAlerts(list):
    """Sequence of extended alerts with status filters."""

    def firing(self) -> "ExtendedAlerts":
        return ExtendedAlerts(a for a in self if a.is_firing)

    def resolved(self) -> "ExtendedAlerts":
        return ExtendedAlerts(a for a in self if not a.is_firing)


@dataclass(frozen=True)
class ExtendedData:
    """Full render context for one notification."""

    receiver: str
    status: str
    alerts: ExtendedAlerts
    group_labels: KV
    common_labels: KV
    common_annotations: KV
    external_url: str
    truncation: TruncationState = field(default_factory=TruncationState)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation embedded in payloads."""
        return {
            "receiver": self.receiver,
            "status": self.status,
            "alerts": [a.to_dict() for a in self.alerts],
            "groupLabels": dict(self.group_labels),
            "commonLabels": dict(self.common_labels),
            "commonAnnotations": dict(self.common_annotations),
            "externalURL": self.external_url,
        }

    def template_context(self) -> Dict[str, Any]:
        """Variables visible to templates."""
        return {
            "Receiver": self.receiver,
            "Status": self.status,
            "Alerts": self.alerts,
            "GroupLabels": self.group_labels,
            "CommonLabels": self.common_labels,
            "CommonAnnotations": self.common_annotations,
            "ExternalURL": self.external_url,
        }


def batch_status(alerts: Sequence[Alert]) -> AlertStatus:
    """Firing if any alert fires, resolved otherwise."""
    if any(a.is_firing for a in alerts):
        return AlertStatus.FIRING
    return AlertStatus.RESOLVED


def common_pairs(maps: Sequence[Mapping[str, str]]) -> KV:
    """Pairs present with the same value in every mapping."""
    if not maps:
        return KV()
    common = KV(maps[0])
    for other in maps[1:]:
        for key in list(common):
            if key not in other or other[key] != common[key]:
                del common[key]
    return common


def silence_url(external_url: str, labels: KV) -> str:
    """Build a URL that pre-fills a silence with exact-match matchers."""
    url = f"{external_url}{SILENCE_PATH}?alertmanager={SILENCE_ALERTMANAGER}"
    for name, value in labels.sorted_pairs():
        url += "&matcher=" + quote_plus(f"{name}={value}")
    return url


def dashboard_urls(external_url: str, annotations: Mapping[str, str]) -> Dict[str, str]:
    """Derive dashboard and panel URLs from well-known annotations."""
    dashboard_uid = annotations.get(DASHBOARD_UID_ANNOTATION, "")
    if not dashboard_uid:
        return {}

    query = {}
    org_id = annotations.get(ORG_ID_ANNOTATION, "")
    if org_id:
        query["orgId"] = org_id

    base = f"{external_url}/d/{quote_plus(dashboard_uid)}"
    urls = {"dashboard_url": f"{base}?{urlencode(query)}" if query else base}

    panel_id = annotations.get(PANEL_ID_ANNOTATION, "")
    if panel_id:
        query["viewPanel"] = panel_id
        urls["panel_url"] = f"{base}?{urlencode(query)}"
    return urls


def parse_values(raw: str) -> Dict[str, float]:
    """Decode the values annotation, dropping anything that is not numeric."""
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.debug(f"Ignoring undecodable values annotation: {raw!r}")
        return {}
    if not isinstance(decoded, dict):
        return {}

    values = {}
    for ref_id, value in decoded.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        values[str(ref_id)] = float(value)
    return values


def extend_alert(alert: Alert, external_url: str) -> ExtendedAlert:
    """Build the render record for one alert."""
    labels = KV(alert.labels).without_private()
    annotations = KV(alert.annotations)
    image_url = annotations.pop(IMAGE_ANNOTATION, "")

    return ExtendedAlert(
        status=alert.status.value,
        labels=labels,
        annotations=annotations.without_private(),
        fingerprint=fingerprint_hex(alert.labels),
        silence_url=silence_url(external_url, labels),
        starts_at=alert.starts_at,
        ends_at=alert.ends_at,
        generator_url=alert.generator_url,
        values=parse_values(alert.annotations.get(VALUES_ANNOTATION, "")),
        value_string=alert.annotations.get(VALUE_STRING_ANNOTATION, ""),
        image_url=image_url,
        **dashboard_urls(external_url, alert.annotations),
    )


def truncate_alerts(alerts: List[ExtendedAlert], max_alerts: int) -> TruncationState:
    """Cut the sequence in place down to max_alerts (0 = unlimited)."""
    if max_alerts <= 0 or len(alerts) <= max_alerts:
        return TruncationState(max_alerts=max_alerts)
    truncated = len(alerts) - max_alerts
    del alerts[max_alerts:]
    return TruncationState(max_alerts=max_alerts, truncated_count=truncated)


def build_extended_data(
    alerts: Sequence[Alert],
    group_labels: Optional[Mapping[str, str]] = None,
    receiver: str = "",
    external_url: str = "",
    max_alerts: int = 0
) -> ExtendedData:
    """Build the extended view for a batch of alerts.

    Common labels and annotations are reduced over the full batch before
    truncation is applied to the per-alert sequence.

    Args:
        alerts: Alerts in input order
        group_labels: Grouping key/value pairs for this batch
        receiver: Name of the receiver the batch is routed to
        external_url: Base URL used for silence and dashboard links
        max_alerts: Maximum number of alerts to render (0 = unlimited)

    Returns:
        Immutable extended view
    """
    external_url = (external_url or "").rstrip("/")

    extended = [extend_alert(a, external_url) for a in alerts]
    common_labels = common_pairs([a.labels for a in extended])
    common_annotations = common_pairs([a.annotations for a in extended])
    truncation = truncate_alerts(extended, max_alerts)

    return ExtendedData(
        receiver=receiver,
        status=batch_status(alerts).value,
        alerts=ExtendedAlerts(extended),
        group_labels=KV(group_labels or {}),
        common_labels=common_labels,
        common_annotations=common_annotations,
        external_url=external_url,
        truncation=truncation,
    )
