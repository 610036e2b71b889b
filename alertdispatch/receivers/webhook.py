"""Generic webhook receiver.

Posts the extended view of a batch, together with rendered title and
message, to a configurable URL. The URL itself is a template, so it can
carry query parameters derived from the batch.
"""

import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert, AlertStatus
from ..templates.defaults import DEFAULT_MESSAGE_EMBED, DEFAULT_MESSAGE_TITLE_EMBED
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver
from .errors import MissingURLError, MutuallyExclusiveOptionsError, UnsupportedOptionError
from .http import BasicAuth, SendRequest
from .settings import get_int, get_str


logger = logging.getLogger(__name__)

WEBHOOK_PAYLOAD_VERSION = "1"
DEFAULT_AUTHORIZATION_SCHEME = "Bearer"
SUPPORTED_METHODS = ("POST", "PUT")


class WebhookConfig(BaseModel):
    """Validated webhook receiver settings."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Webhook endpoint URL template")
    http_method: str = Field(default="POST", description="HTTP method (POST or PUT)")
    max_alerts: int = Field(default=0, description="Maximum alerts per payload (0 = unlimited)")
    username: str = Field(default="", description="HTTP basic auth username")
    password: str = Field(default="", description="HTTP basic auth password")
    authorization_scheme: str = Field(default="", description="Authorization header scheme")
    authorization_credentials: str = Field(default="", description="Authorization header credentials")
    title: str = Field(default=DEFAULT_MESSAGE_TITLE_EMBED, description="Title template")
    message: str = Field(default=DEFAULT_MESSAGE_EMBED, description="Message template")


class WebhookMessage(BaseModel):
    """Structured webhook payload."""

    model_config = ConfigDict(populate_by_name=True)

    receiver: str
    status: str
    alerts: List[Dict[str, Any]]
    group_labels: Dict[str, str] = Field(alias="groupLabels")
    common_labels: Dict[str, str] = Field(alias="commonLabels")
    common_annotations: Dict[str, str] = Field(alias="commonAnnotations")
    external_url: str = Field(alias="externalURL")

    version: str = WEBHOOK_PAYLOAD_VERSION
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    org_id: int = Field(default=0, alias="orgId")
    title: str = ""
    state: str = ""
    message: str = ""

    @classmethod
    def from_extended(cls, data: ExtendedData, **fields: Any) -> "WebhookMessage":
        return cls(**data.to_dict(), **fields)


@register_receiver("webhook")
class WebhookNotifier(BaseNotifier):
    """Sends the extended view as JSON to an arbitrary HTTP endpoint."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> WebhookConfig:
        settings = factory_config.decoded_settings()

        url = get_str(settings, "url")
        if not url:
            raise MissingURLError("required field 'url' is not specified")

        http_method = get_str(settings, "httpMethod", "POST").upper()
        if http_method not in SUPPORTED_METHODS:
            raise UnsupportedOptionError(
                f"unsupported HTTP method: {http_method}",
                field="httpMethod",
                value=http_method
            )

        max_alerts = get_int(settings, "maxAlerts", 0)
        if max_alerts < 0:
            raise UnsupportedOptionError(
                "maxAlerts must not be negative",
                field="maxAlerts",
                value=max_alerts
            )

        username = get_str(settings, "username")
        password = factory_config.secret("password", get_str(settings, "password"))
        credentials = factory_config.secret(
            "authorization_credentials",
            get_str(settings, "authorization_credentials")
        )
        if (username or password) and credentials:
            raise MutuallyExclusiveOptionsError(
                "both HTTP Basic Authentication and Authorization Header are set, only 1 is permitted",
                first="username",
                second="authorization_credentials"
            )

        scheme = get_str(settings, "authorization_scheme")
        if credentials and not scheme:
            scheme = DEFAULT_AUTHORIZATION_SCHEME

        return WebhookConfig(
            url=url,
            http_method=http_method,
            max_alerts=max_alerts,
            username=username,
            password=password,
            authorization_scheme=scheme,
            authorization_credentials=credentials,
            title=get_str(settings, "title", DEFAULT_MESSAGE_TITLE_EMBED),
            message=get_str(settings, "message", DEFAULT_MESSAGE_EMBED),
        )

    @property
    def max_alerts(self) -> int:
        return self.settings.max_alerts

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> WebhookMessage:
        state = "alerting" if data.status == AlertStatus.FIRING.value else "ok"
        return WebhookMessage.from_extended(
            data,
            group_key=context.group_key,
            truncated_alerts=data.truncation.truncated_count,
            org_id=self.org_id,
            title=self.render(self.settings.title, data),
            state=state,
            message=self.render(self.settings.message, data),
        )

    def build_requests(
        self,
        payload: WebhookMessage,
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        headers = {}
        if self.settings.authorization_credentials:
            headers["Authorization"] = (
                f"{self.settings.authorization_scheme} {self.settings.authorization_credentials}"
            )

        basic_auth = None
        if self.settings.username or self.settings.password:
            basic_auth = BasicAuth(self.settings.username, self.settings.password)

        return [SendRequest(
            url=self.render(self.settings.url, data),
            body=payload.model_dump_json(by_alias=True),
            method=self.settings.http_method,
            headers=headers,
            basic_auth=basic_auth,
        )]
