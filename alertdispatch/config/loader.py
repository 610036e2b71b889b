"""Configuration loader for dispatch settings with YAML support and environment overrides.

This module loads the receiver definitions and HTTP delivery settings from
a YAML file, applies environment-specific overrides and turns the result
into ready-to-use notifiers.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..receivers.base import (
    BaseNotifier,
    FactoryConfig,
    NotificationChannelConfig,
    create_notifier,
)
from ..receivers.hostname import HostnameResolver, SocketHostnameResolver
from ..receivers.http import DEFAULT_USER_AGENT, HttpxNotificationSender, NotificationSender
from ..receivers.images import ImageStore, UnavailableImageStore
from ..templates.renderer import TemplateRenderer


logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "ALERTDISPATCH_ENV"
DEFAULT_ENVIRONMENT = "production"


class ConfigLoadError(Exception):
    """Exception raised when configuration loading fails."""
    pass


class HttpSettings(BaseModel):
    """HTTP delivery settings shared by every receiver."""

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Total timeout for one request"
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Connection timeout for one request"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with every request"
    )


class ReceiverDefinition(BaseModel):
    """One configured receiver."""

    name: str = Field(
        min_length=1,
        description="Unique receiver name"
    )
    type: str = Field(
        min_length=1,
        description="Receiver type tag, e.g. webhook or pagerduty"
    )
    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Receiver-specific settings"
    )
    secure_settings: Dict[str, str] = Field(
        default_factory=dict,
        description="Secret settings overriding plain settings of the same name"
    )
    org_id: int = Field(
        default=0,
        ge=0,
        description="Organization the receiver belongs to"
    )
    uid: str = Field(
        default="",
        description="Stable receiver identifier"
    )
    disable_resolve_message: bool = Field(
        default=False,
        description="Do not notify about resolved alerts"
    )

    def to_channel_config(self) -> NotificationChannelConfig:
        return NotificationChannelConfig(
            name=self.name,
            type=self.type,
            settings=self.settings,
            secure_settings={k: v.encode("utf-8") for k, v in self.secure_settings.items()},
            org_id=self.org_id,
            uid=self.uid,
            disable_resolve_message=self.disable_resolve_message,
        )


class DispatchConfig(BaseModel):
    """Complete dispatch configuration."""

    external_url: str = Field(
        default="",
        description="Public base URL used for links in notifications"
    )
    templates: Dict[str, str] = Field(
        default_factory=dict,
        description="Named templates available to {% include %}"
    )
    http: HttpSettings = Field(
        default_factory=HttpSettings,
        description="HTTP delivery settings"
    )
    receivers: List[ReceiverDefinition] = Field(
        default_factory=list,
        description="Configured receivers"
    )

    @field_validator('external_url')
    @classmethod
    def validate_external_url(cls, v):
        """Validate that the external URL is absolute when set."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"external_url must be an http(s) URL: {v}")
        return v.rstrip("/")

    @model_validator(mode='after')
    def validate_unique_receiver_names(self):
        """Validate that receiver names do not repeat."""
        seen = set()
        for receiver in self.receivers:
            if receiver.name in seen:
                raise ValueError(f"duplicate receiver name: {receiver.name}")
            seen.add(receiver.name)
        return self


def load_dispatch_config(
    config_path: Optional[str] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> DispatchConfig:
    """Load DispatchConfig from YAML file with environment overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default location.
        environment: Environment name for override selection. If None, uses ENV var.
        overrides: Additional configuration overrides to apply.

    Returns:
        Validated DispatchConfig instance.

    Raises:
        ConfigLoadError: If configuration loading or validation fails.

    Example:
        >>> config = load_dispatch_config("config/dispatch.yaml", environment="staging")
        >>> [r.name for r in config.receivers]
        ['ops-webhook', 'pager']
    """
    if config_path is None:
        project_root = Path(__file__).parents[2]
        config_path = project_root / "config" / "dispatch.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML config: {e}")
    except IOError as e:
        raise ConfigLoadError(f"Failed to read config file: {e}")

    if not isinstance(config_data, dict):
        raise ConfigLoadError("Config file must contain a YAML dictionary")

    if environment is None:
        environment = os.getenv(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT)

    environments = config_data.pop("environments", None) or {}
    if environment in environments:
        config_data = _deep_merge(config_data, environments[environment] or {})
        logger.info(f"Applied environment overrides for: {environment}")

    if overrides:
        config_data = _deep_merge(config_data, overrides)
        logger.debug("Applied additional configuration overrides")

    try:
        return DispatchConfig(**config_data)
    except ValidationError as e:
        raise ConfigLoadError(f"Failed to create DispatchConfig: {e}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Lists are replaced, not merged.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def create_sender(config: DispatchConfig) -> HttpxNotificationSender:
    """Create the httpx-backed sender described by the HTTP settings."""
    return HttpxNotificationSender(
        timeout_seconds=config.http.timeout_seconds,
        connect_timeout_seconds=config.http.connect_timeout_seconds,
        verify_ssl=config.http.verify_ssl,
        user_agent=config.http.user_agent,
    )


def build_notifiers(
    config: DispatchConfig,
    sender: Optional[NotificationSender] = None,
    image_store: Optional[ImageStore] = None,
    hostname_resolver: Optional[HostnameResolver] = None
) -> Dict[str, BaseNotifier]:
    """Construct one notifier per configured receiver.

    Args:
        config: Loaded dispatch configuration
        sender: Transport shared by every notifier; built from config.http if None
        image_store: Image lookup capability
        hostname_resolver: Hostname capability for default event sources

    Returns:
        Notifiers keyed by receiver name, in configuration order

    Raises:
        ReceiverConfigError: If a receiver definition is invalid
    """
    sender = sender or create_sender(config)
    renderer = TemplateRenderer(external_url=config.external_url, templates=config.templates)
    image_store = image_store or UnavailableImageStore()
    hostname_resolver = hostname_resolver or SocketHostnameResolver()

    notifiers: Dict[str, BaseNotifier] = {}
    for definition in config.receivers:
        notifiers[definition.name] = create_notifier(FactoryConfig(
            config=definition.to_channel_config(),
            sender=sender,
            renderer=renderer,
            image_store=image_store,
            hostname_resolver=hostname_resolver,
        ))
        logger.debug(f"Configured {definition.type} receiver: {definition.name}")

    return notifiers
