"""Base classes and registry for notification receivers.

This module provides the foundation for all receiver implementations: the
channel configuration handed over by the settings layer, the factory
configuration bundling the external capabilities, the notify pipeline
shared by every receiver and the registry that selects a receiver class
by its type tag.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence, Type

from ..models import Alert
from ..templates.extended import ExtendedData, build_extended_data
from ..templates.renderer import TemplateRenderer, TemplateRenderError
from .delivery import NotifyResult, deliver_all, deliver_one
from .errors import UnknownReceiverTypeError
from .hostname import HostnameResolver, SocketHostnameResolver
from .http import NotificationSender, SendRequest
from .images import ImageStore, UnavailableImageStore, with_stored_images
from .settings import RawSettings, decode_settings


logger = logging.getLogger(__name__)

RULES_LIST_PATH = "/alerting/list"

# (secure_settings, key, fallback) -> secret value
DecryptFunc = Callable[[Mapping[str, bytes], str, str], str]


def default_decrypt(secure_settings: Mapping[str, bytes], key: str, fallback: str) -> str:
    """Read a secret stored as plain bytes, falling back when it is absent."""
    value = secure_settings.get(key)
    if not value:
        return fallback
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass
class NotificationChannelConfig:
    """A receiver definition as stored by the settings layer."""

    name: str
    type: str
    settings: RawSettings = None
    secure_settings: Dict[str, bytes] = field(default_factory=dict)
    org_id: int = 0
    uid: str = ""
    disable_resolve_message: bool = False


@dataclass
class FactoryConfig:
    """Everything a receiver needs to be constructed."""

    config: NotificationChannelConfig
    sender: NotificationSender
    renderer: TemplateRenderer
    image_store: ImageStore = field(default_factory=UnavailableImageStore)
    hostname_resolver: HostnameResolver = field(default_factory=SocketHostnameResolver)
    decrypt: DecryptFunc = default_decrypt

    def decoded_settings(self) -> Dict[str, Any]:
        return decode_settings(self.config.settings)

    def secret(self, key: str, fallback: str = "") -> str:
        """Secret value for key; stored secrets take precedence over fallback."""
        return self.decrypt(self.config.secure_settings or {}, key, fallback)


@dataclass
class NotifyContext:
    """Grouping context supplied by the caller for one notify call."""

    group_key: str = ""
    group_labels: Dict[str, str] = field(default_factory=dict)
    receiver_name: str = ""


def truncate(text: str, max_length: int) -> str:
    """Cut text to max_length characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "…"


class BaseNotifier(ABC):
    """Abstract base class for notification receivers.

    Subclasses validate their settings into an immutable config model,
    build a payload from the extended view and describe the HTTP requests
    that deliver it. The notify pipeline itself is shared.
    """

    receiver_type: ClassVar[str] = ""

    def __init__(self, factory_config: FactoryConfig):
        self.settings = self.validate_config(factory_config)

        channel = factory_config.config
        self.name = channel.name
        self.uid = channel.uid
        self.org_id = channel.org_id
        self.disable_resolve_message = channel.disable_resolve_message

        self.sender = factory_config.sender
        self.renderer = factory_config.renderer
        self.image_store = factory_config.image_store

    @classmethod
    @abstractmethod
    def validate_config(cls, factory_config: FactoryConfig) -> Any:
        """Decode and validate receiver settings.

        Raises:
            ReceiverConfigError: If settings are missing, contradictory or invalid
        """
        pass

    @abstractmethod
    def build_payload(
        self,
        alerts: Sequence[Alert],
        data: ExtendedData,
        context: NotifyContext
    ) -> Any:
        """Assemble the receiver payload. Must not perform I/O.

        Raises:
            TemplateRenderError: If a configured template fails to render
        """
        pass

    @abstractmethod
    def build_requests(
        self,
        payload: Any,
        data: ExtendedData,
        context: NotifyContext
    ) -> List[SendRequest]:
        """Describe the HTTP requests that deliver the payload."""
        pass

    @property
    def max_alerts(self) -> int:
        """Maximum number of alerts passed to templates (0 = unlimited)."""
        return 0

    async def notify(
        self,
        alerts: Sequence[Alert],
        context: Optional[NotifyContext] = None
    ) -> NotifyResult:
        """Render and deliver a batch of alerts.

        Args:
            alerts: Alerts to notify about, in input order
            context: Grouping context for the batch

        Returns:
            Delivery outcome; render errors abort before any request is sent
        """
        context = context or NotifyContext()
        logger.debug(f"Sending {self.receiver_type} notification via {self.name}")

        if not self.send_resolved():
            alerts = [a for a in alerts if a.is_firing]
        if not alerts:
            return NotifyResult(delivered=True)

        await with_stored_images(self.image_store, alerts)
        data = self.extend(alerts, context)

        try:
            payload = self.build_payload(alerts, data, context)
            requests = self.build_requests(payload, data, context)
        except TemplateRenderError as e:
            logger.warning(f"Failed to render {self.receiver_type} notification for {self.name}: {e}")
            return NotifyResult(delivered=False, error=e)

        return await self.deliver(requests)

    async def deliver(self, requests: Sequence[SendRequest]) -> NotifyResult:
        if len(requests) == 1:
            return await deliver_one(self.sender, requests[0])
        return await deliver_all(
            self.sender,
            requests,
            description=f"{self.receiver_type} notification"
        )

    def extend(self, alerts: Sequence[Alert], context: NotifyContext) -> ExtendedData:
        return build_extended_data(
            alerts,
            group_labels=context.group_labels,
            receiver=context.receiver_name,
            external_url=self.renderer.external_url,
            max_alerts=self.max_alerts
        )

    def render(self, template_text: str, data: ExtendedData) -> str:
        return self.renderer.render(template_text, data)

    def rule_url(self) -> str:
        return self.renderer.external_url + RULES_LIST_PATH

    def send_resolved(self) -> bool:
        return not self.disable_resolve_message


class ReceiverRegistry:
    """Registry for managing receiver types."""

    def __init__(self):
        self._receivers: Dict[str, Type[BaseNotifier]] = {}

    def register(self, receiver_type: str, receiver_class: type) -> None:
        """Register a receiver class under a type tag.

        Raises:
            ValueError: If the class is not a BaseNotifier
        """
        if not issubclass(receiver_class, BaseNotifier):
            raise ValueError(f"Receiver class must inherit from BaseNotifier: {receiver_class}")

        receiver_class.receiver_type = receiver_type
        self._receivers[receiver_type] = receiver_class

    def get_receiver_class(self, receiver_type: str) -> Optional[Type[BaseNotifier]]:
        return self._receivers.get(receiver_type)

    def create_notifier(self, factory_config: FactoryConfig) -> BaseNotifier:
        """Create the receiver selected by the channel's type tag.

        Raises:
            UnknownReceiverTypeError: If the type is not registered
            ReceiverConfigError: If the settings are invalid
        """
        receiver_type = factory_config.config.type
        receiver_class = self.get_receiver_class(receiver_type)
        if receiver_class is None:
            raise UnknownReceiverTypeError(receiver_type)
        return receiver_class(factory_config)

    def list_receiver_types(self) -> List[str]:
        return sorted(self._receivers)


receiver_registry = ReceiverRegistry()


def register_receiver(receiver_type: str):
    """Decorator to register a receiver class under a type tag."""
    def decorator(receiver_class: type) -> type:
        receiver_registry.register(receiver_type, receiver_class)
        return receiver_class

    return decorator


def create_notifier(factory_config: FactoryConfig) -> BaseNotifier:
    return receiver_registry.create_notifier(factory_config)
