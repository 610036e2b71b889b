"""Pushover receiver."""

import logging
from typing import Dict, List, Sequence
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert, AlertStatus
from ..templates.defaults import DEFAULT_MESSAGE_EMBED, DEFAULT_MESSAGE_TITLE_EMBED
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver, truncate
from .errors import MissingAPITokenError, MissingUserKeyError
from .http import SendRequest
from .settings import get_int, get_int_or_default, get_str


logger = logging.getLogger(__name__)

MESSAGES_API_URL = "https://api.pushover.net/1/messages.json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

EMERGENCY_PRIORITY = 2
MAX_TITLE_LENGTH = 250
MAX_MESSAGE_LENGTH = 1024
URL_TITLE = "Show alert rule"


class PushoverConfig(BaseModel):
    """Validated Pushover receiver settings."""

    model_config = ConfigDict(frozen=True)

    user_key: str = Field(description="Recipient user or group key")
    api_token: str = Field(description="Application API token")
    alerting_priority: int = Field(default=0, description="Priority of firing notifications")
    ok_priority: int = Field(default=0, description="Priority of resolved notifications")
    retry: int = Field(default=0, description="Emergency retry interval in seconds")
    expire: int = Field(default=0, description="Emergency expiry in seconds")
    device: str = Field(default="", description="Comma separated target devices")
    alerting_sound: str = Field(default="", description="Sound of firing notifications")
    ok_sound: str = Field(default="", description="Sound of resolved notifications")
    title: str = Field(default=DEFAULT_MESSAGE_TITLE_EMBED, description="Title template")
    message: str = Field(default=DEFAULT_MESSAGE_EMBED, description="Message template")


@register_receiver("pushover")
class PushoverNotifier(BaseNotifier):
    """Sends a push notification through the Pushover messages API."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> PushoverConfig:
        settings = factory_config.decoded_settings()

        user_key = factory_config.secret("userKey", get_str(settings, "userKey"))
        if not user_key:
            raise MissingUserKeyError()

        api_token = factory_config.secret("apiToken", get_str(settings, "apiToken"))
        if not api_token:
            raise MissingAPITokenError()

        return PushoverConfig(
            user_key=user_key,
            api_token=api_token,
            alerting_priority=get_int(
                settings, "priority", 0,
                message="failed to convert alerting priority to integer"
            ),
            ok_priority=get_int(
                settings, "okPriority", 0,
                message="failed to convert OK priority to integer"
            ),
            retry=get_int_or_default(settings, "retry", 0),
            expire=get_int_or_default(settings, "expire", 0),
            device=get_str(settings, "device"),
            alerting_sound=get_str(settings, "sound"),
            ok_sound=get_str(settings, "okSound"),
            title=get_str(settings, "title", DEFAULT_MESSAGE_TITLE_EMBED),
            message=get_str(settings, "message", DEFAULT_MESSAGE_EMBED),
        )

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> Dict[str, str]:
        firing = data.status == AlertStatus.FIRING.value
        priority = self.settings.alerting_priority if firing else self.settings.ok_priority
        sound = self.settings.alerting_sound if firing else self.settings.ok_sound

        message = self.render(self.settings.message, data)
        if not message:
            message = "(no details)"

        form = {
            "user": self.settings.user_key,
            "token": self.settings.api_token,
            "priority": str(priority),
        }
        if priority == EMERGENCY_PRIORITY:
            form["retry"] = str(self.settings.retry)
            form["expire"] = str(self.settings.expire)
        if self.settings.device:
            form["device"] = self.settings.device

        form["title"] = truncate(self.render(self.settings.title, data), MAX_TITLE_LENGTH)
        form["url"] = self.rule_url()
        form["url_title"] = URL_TITLE
        form["message"] = truncate(message, MAX_MESSAGE_LENGTH)
        form["html"] = "1"
        if sound:
            form["sound"] = sound
        return form

    def build_requests(
        self,
        payload: Dict[str, str],
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        return [SendRequest(
            url=MESSAGES_API_URL,
            body=urlencode(payload),
            content_type=FORM_CONTENT_TYPE,
        )]
