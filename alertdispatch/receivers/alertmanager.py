"""Alertmanager receiver.

Forwards the raw alert batch to one or more Alertmanager instances. Every
instance receives the same body; the notification only fails when no
instance accepted it.
"""

import json
import logging
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver
from .delivery import NotifyResult, deliver_all
from .errors import MissingURLError, UnsupportedOptionError
from .http import BasicAuth, SendRequest
from .settings import get_str


logger = logging.getLogger(__name__)

ALERTS_API_PATH = "/api/v2/alerts"


class AlertmanagerConfig(BaseModel):
    """Validated Alertmanager receiver settings."""

    model_config = ConfigDict(frozen=True)

    urls: Tuple[str, ...] = Field(description="Alert API URLs of every instance")
    user: str = Field(default="", description="HTTP basic auth username")
    password: str = Field(default="", description="HTTP basic auth password")


def alerts_api_url(base_url: str) -> str:
    return base_url.rstrip("/") + ALERTS_API_PATH


@register_receiver("alertmanager")
class AlertmanagerNotifier(BaseNotifier):
    """Posts alerts to the v2 alerts API of every configured Alertmanager."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> AlertmanagerConfig:
        settings = factory_config.decoded_settings()

        raw_urls = get_str(settings, "url")
        urls = [u.strip() for u in raw_urls.split(",") if u.strip()]
        if not urls:
            raise MissingURLError()

        for url in urls:
            if not url.startswith(("http://", "https://")):
                raise UnsupportedOptionError(
                    f"invalid url property in settings: {url}",
                    field="url",
                    value=url
                )

        return AlertmanagerConfig(
            urls=tuple(alerts_api_url(u) for u in urls),
            user=get_str(settings, "basicAuthUser"),
            password=factory_config.secret(
                "basicAuthPassword",
                get_str(settings, "basicAuthPassword")
            ),
        )

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> str:
        return json.dumps([
            a.model_dump(mode="json", by_alias=True, exclude_none=True)
            for a in alerts
        ])

    def build_requests(
        self,
        payload: str,
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        basic_auth = None
        if self.settings.user:
            basic_auth = BasicAuth(self.settings.user, self.settings.password)

        return [
            SendRequest(url=url, body=payload, basic_auth=basic_auth)
            for url in self.settings.urls
        ]

    async def deliver(self, requests: Sequence[SendRequest]) -> NotifyResult:
        return await deliver_all(self.sender, requests, description="alert to Alertmanager")
