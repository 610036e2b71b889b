"""Kafka REST proxy receiver.

Publishes one JSON record per notification to a topic through a Kafka REST
proxy, using either the v2 records API or the v3 cluster records API.
"""

import hashlib
import json
import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert, AlertStatus
from ..templates.defaults import DEFAULT_MESSAGE_EMBED, DEFAULT_MESSAGE_TITLE_EMBED
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver
from .errors import (
    MissingClusterIDError,
    MissingEndpointError,
    MissingTopicError,
    UnsupportedOptionError,
)
from .http import BasicAuth, SendRequest
from .settings import get_str


logger = logging.getLogger(__name__)

API_VERSION_V2 = "v2"
API_VERSION_V3 = "v3"
SUPPORTED_API_VERSIONS = (API_VERSION_V2, API_VERSION_V3)

V2_CONTENT_TYPE = "application/vnd.kafka.json.v2+json"
V2_ACCEPT = "application/vnd.kafka.v2+json"

DEFAULT_CLIENT = "Grafana"


class KafkaConfig(BaseModel):
    """Validated Kafka REST proxy receiver settings."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(description="REST proxy base URL without trailing slash")
    topic: str = Field(description="Topic to publish to")
    description: str = Field(default=DEFAULT_MESSAGE_TITLE_EMBED, description="Description template")
    details: str = Field(default=DEFAULT_MESSAGE_EMBED, description="Details template")
    username: str = Field(default="", description="HTTP basic auth username")
    password: str = Field(default="", description="HTTP basic auth password")
    api_version: str = Field(default=API_VERSION_V2, description="REST proxy API version")
    kafka_cluster_id: str = Field(default="", description="Cluster id, required for v3")


def incident_key(group_key: str) -> str:
    """Stable key identifying the alert group across notifications."""
    return hashlib.sha256(group_key.encode("utf-8")).hexdigest()


@register_receiver("kafka")
class KafkaNotifier(BaseNotifier):
    """Publishes notifications to a Kafka topic through a REST proxy."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> KafkaConfig:
        settings = factory_config.decoded_settings()

        endpoint = get_str(settings, "kafkaRestProxy").rstrip("/")
        if not endpoint:
            raise MissingEndpointError()

        topic = get_str(settings, "kafkaTopic")
        if not topic:
            raise MissingTopicError()

        api_version = get_str(settings, "apiVersion", API_VERSION_V2)
        if api_version not in SUPPORTED_API_VERSIONS:
            raise UnsupportedOptionError(
                f"unsupported api version: {api_version}",
                field="apiVersion",
                value=api_version
            )

        cluster_id = get_str(settings, "kafkaClusterId")
        if api_version == API_VERSION_V3 and not cluster_id:
            raise MissingClusterIDError()

        return KafkaConfig(
            endpoint=endpoint,
            topic=topic,
            description=get_str(settings, "description", DEFAULT_MESSAGE_TITLE_EMBED),
            details=get_str(settings, "details", DEFAULT_MESSAGE_EMBED),
            username=get_str(settings, "username"),
            password=factory_config.secret("password", get_str(settings, "password")),
            api_version=api_version,
            kafka_cluster_id=cluster_id,
        )

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> Dict[str, Any]:
        state = "alerting" if data.status == AlertStatus.FIRING.value else "ok"
        value = {
            "alert_state": state,
            "client": DEFAULT_CLIENT,
            "client_url": self.rule_url(),
            "description": self.render(self.settings.description, data),
            "details": self.render(self.settings.details, data),
            "incident_key": incident_key(context.group_key),
        }

        contexts = [
            {"type": "image", "src": a.image_url}
            for a in data.alerts if a.image_url
        ]
        if contexts:
            value["contexts"] = contexts

        if self.settings.api_version == API_VERSION_V3:
            return {"value": {"type": "JSON", "data": value}}
        return {"records": [{"value": value}]}

    def topic_url(self) -> str:
        if self.settings.api_version == API_VERSION_V3:
            return (
                f"{self.settings.endpoint}/kafka/v3/clusters/{self.settings.kafka_cluster_id}"
                f"/topics/{self.settings.topic}/records"
            )
        return f"{self.settings.endpoint}/topics/{self.settings.topic}"

    def build_requests(
        self,
        payload: Dict[str, Any],
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        headers = {}
        content_type = "application/json"
        if self.settings.api_version == API_VERSION_V2:
            content_type = V2_CONTENT_TYPE
            headers["Accept"] = V2_ACCEPT

        basic_auth = None
        if self.settings.username:
            basic_auth = BasicAuth(self.settings.username, self.settings.password)

        return [SendRequest(
            url=self.topic_url(),
            body=json.dumps(payload),
            headers=headers,
            basic_auth=basic_auth,
            content_type=content_type,
        )]
