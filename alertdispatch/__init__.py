"""Alert notification dispatch.

This package turns batches of firing and resolved alerts into
receiver-specific payloads and delivers them to chat webhooks, paging
services, message queues and other alerting systems.
"""

from .fingerprint import fingerprint, fingerprint_hex
from .models import KV, Alert, AlertStatus
from .receivers import (
    BaseNotifier,
    DeliveryError,
    FactoryConfig,
    HttpxNotificationSender,
    NotificationChannelConfig,
    NotifyContext,
    NotifyResult,
    ReceiverConfigError,
    create_notifier,
)
from .templates import ExtendedData, TemplateRenderer, TemplateRenderError, build_extended_data

__all__ = [
    # Models
    'Alert',
    'AlertStatus',
    'KV',
    'fingerprint',
    'fingerprint_hex',

    # Templating
    'ExtendedData',
    'build_extended_data',
    'TemplateRenderer',
    'TemplateRenderError',

    # Receivers
    'BaseNotifier',
    'FactoryConfig',
    'NotificationChannelConfig',
    'NotifyContext',
    'NotifyResult',
    'HttpxNotificationSender',
    'create_notifier',
    'ReceiverConfigError',
    'DeliveryError',
]

__version__ = "0.1.0"
