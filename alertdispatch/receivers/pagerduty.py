"""PagerDuty Events API v2 receiver."""

import hashlib
import json
import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert, AlertStatus
from ..templates.defaults import DEFAULT_MESSAGE_TITLE_EMBED
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver, truncate
from .errors import MissingIntegrationKeyError
from .http import SendRequest
from .settings import get_str


logger = logging.getLogger(__name__)

EVENTS_API_URL = "https://events.pagerduty.com/v2/enqueue"

DEFAULT_SEVERITY = "critical"
DEFAULT_CLASS = "default"
DEFAULT_GROUP = "default"
DEFAULT_CLIENT = "Grafana"
DEFAULT_COMPONENT = "Grafana"
DEFAULT_CLIENT_URL = "{{ ExternalURL }}"

VALID_SEVERITIES = ("critical", "error", "warning", "info")
MAX_SUMMARY_LENGTH = 1024


def default_custom_details() -> Dict[str, str]:
    return {
        "firing": "{{ alert_details(Alerts.firing()) }}",
        "resolved": "{{ alert_details(Alerts.resolved()) }}",
        "num_firing": "{{ Alerts.firing() | length }}",
        "num_resolved": "{{ Alerts.resolved() | length }}",
    }


class PagerDutyConfig(BaseModel):
    """Validated PagerDuty receiver settings."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Integration (routing) key")
    severity: str = Field(default=DEFAULT_SEVERITY, description="Severity template")
    custom_details: Dict[str, str] = Field(default_factory=default_custom_details)
    event_class: str = Field(default=DEFAULT_CLASS, description="Event class template")
    component: str = Field(default=DEFAULT_COMPONENT, description="Component template")
    group: str = Field(default=DEFAULT_GROUP, description="Group template")
    summary: str = Field(default=DEFAULT_MESSAGE_TITLE_EMBED, description="Summary template")
    source: str = Field(description="Event source template")
    client: str = Field(default=DEFAULT_CLIENT, description="Client name template")
    client_url: str = Field(default=DEFAULT_CLIENT_URL, description="Client URL template")


def dedup_key(group_key: str) -> str:
    return hashlib.sha256(group_key.encode("utf-8")).hexdigest()


@register_receiver("pagerduty")
class PagerDutyNotifier(BaseNotifier):
    """Triggers and resolves PagerDuty incidents per alert group."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> PagerDutyConfig:
        settings = factory_config.decoded_settings()

        key = factory_config.secret("integrationKey", get_str(settings, "integrationKey"))
        if not key:
            raise MissingIntegrationKeyError()

        client = get_str(settings, "client", DEFAULT_CLIENT)
        source = get_str(settings, "source")
        if not source:
            try:
                source = factory_config.hostname_resolver.hostname()
            except OSError as e:
                logger.debug(f"Could not resolve hostname, using client as source: {e}")
                source = client

        return PagerDutyConfig(
            key=key,
            severity=get_str(settings, "severity", DEFAULT_SEVERITY),
            event_class=get_str(settings, "class", DEFAULT_CLASS),
            component=get_str(settings, "component", DEFAULT_COMPONENT),
            group=get_str(settings, "group", DEFAULT_GROUP),
            summary=get_str(settings, "summary", DEFAULT_MESSAGE_TITLE_EMBED),
            source=source,
            client=client,
            client_url=get_str(settings, "client_url", DEFAULT_CLIENT_URL),
        )

    def severity(self, data: ExtendedData) -> str:
        severity = self.render(self.settings.severity, data).strip().lower()
        if severity not in VALID_SEVERITIES:
            logger.warning(
                f"Severity {severity!r} is not supported by PagerDuty, using {DEFAULT_SEVERITY}"
            )
            return DEFAULT_SEVERITY
        return severity

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> Dict[str, Any]:
        event_action = "trigger" if data.status == AlertStatus.FIRING.value else "resolve"
        client_url = self.render(self.settings.client_url, data)

        details = {
            name: self.render(template, data)
            for name, template in self.settings.custom_details.items()
        }

        message = {
            "routing_key": self.settings.key,
            "dedup_key": dedup_key(context.group_key),
            "event_action": event_action,
            "payload": {
                "summary": truncate(self.render(self.settings.summary, data), MAX_SUMMARY_LENGTH),
                "source": self.render(self.settings.source, data),
                "severity": self.severity(data),
                "class": self.render(self.settings.event_class, data),
                "component": self.render(self.settings.component, data),
                "group": self.render(self.settings.group, data),
                "custom_details": details,
            },
            "client": self.render(self.settings.client, data),
            "client_url": client_url,
            "links": [{"href": client_url, "text": "External URL"}],
        }

        images = [
            {"src": a.image_url, "alt": a.labels.get("alertname", "")}
            for a in data.alerts if a.image_url
        ]
        if images:
            message["images"] = images
        return message

    def build_requests(
        self,
        payload: Dict[str, Any],
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        return [SendRequest(url=EVENTS_API_URL, body=json.dumps(payload))]
