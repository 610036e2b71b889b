"""Google Chat receiver.

Sends a card message with the rendered title as header, the rendered
message as body, the first available alert image and a button linking
to the alert list.
"""

import json
import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import Alert
from ..templates.defaults import DEFAULT_MESSAGE_EMBED, DEFAULT_MESSAGE_TITLE_EMBED
from ..templates.extended import ExtendedData
from .base import BaseNotifier, FactoryConfig, NotifyContext, register_receiver
from .errors import MissingURLError
from .http import SendRequest
from .settings import get_str


logger = logging.getLogger(__name__)

OPEN_BUTTON_TEXT = "OPEN ALERTS"


class GoogleChatConfig(BaseModel):
    """Validated Google Chat receiver settings."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Incoming webhook URL of the chat space")
    title: str = Field(default=DEFAULT_MESSAGE_TITLE_EMBED, description="Title template")
    message: str = Field(default=DEFAULT_MESSAGE_EMBED, description="Message template")


@register_receiver("googlechat")
class GoogleChatNotifier(BaseNotifier):
    """Posts a card message to a Google Chat incoming webhook."""

    @classmethod
    def validate_config(cls, factory_config: FactoryConfig) -> GoogleChatConfig:
        settings = factory_config.decoded_settings()

        url = get_str(settings, "url")
        if not url:
            raise MissingURLError()

        return GoogleChatConfig(
            url=url,
            title=get_str(settings, "title", DEFAULT_MESSAGE_TITLE_EMBED),
            message=get_str(settings, "message", DEFAULT_MESSAGE_EMBED),
        )

    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> Dict[str, Any]:
        title = self.render(self.settings.title, data)
        message = self.render(self.settings.message, data)

        widgets: List[Dict[str, Any]] = []
        if message:
            widgets.append({"textParagraph": {"text": message}})

        image_url = next((a.image_url for a in data.alerts if a.image_url), "")
        if image_url:
            widgets.append({"image": {"imageUrl": image_url}})

        widgets.append({
            "buttons": [{
                "textButton": {
                    "text": OPEN_BUTTON_TEXT,
                    "onClick": {"openLink": {"url": self.rule_url()}},
                }
            }]
        })

        return {
            "previewText": title,
            "fallbackText": title,
            "cards": [{
                "header": {"title": title},
                "sections": [{"widgets": widgets}],
            }],
        }

    def build_requests(
        self,
        payload: Dict[str, Any],
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        return [SendRequest(
            url=self.settings.url,
            body=json.dumps(payload),
            content_type="application/json; charset=UTF-8",
        )]
