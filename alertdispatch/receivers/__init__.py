"""Notification receivers.

Importing this package registers every built-in receiver type with the
receiver registry, so create_notifier can select them by type tag.
"""

from .base import (
    BaseNotifier,
    FactoryConfig,
    NotificationChannelConfig,
    NotifyContext,
    ReceiverRegistry,
    create_notifier,
    receiver_registry,
    register_receiver,
)
from .delivery import NotifyResult, deliver_all, deliver_one
from .errors import (
    FieldNotNumericError,
    MissingFieldError,
    MutuallyExclusiveOptionsError,
    ReceiverConfigError,
    SettingsDecodeError,
    UnknownReceiverTypeError,
    UnsupportedOptionError,
)
from .hostname import HostnameResolver, SocketHostnameResolver
from .http import (
    BasicAuth,
    DeliveryError,
    HttpxNotificationSender,
    NotificationSender,
    SendRequest,
    SendResponse,
)
from .images import ImageStore, ImageStoreError, UnavailableImageStore

# Import receivers to register them
from . import alertmanager
from . import googlechat
from . import kafka
from . import pagerduty
from . import pushover
from . import webhook

__all__ = [
    # Pipeline
    'BaseNotifier',
    'FactoryConfig',
    'NotificationChannelConfig',
    'NotifyContext',
    'NotifyResult',
    'deliver_all',
    'deliver_one',

    # Registry
    'ReceiverRegistry',
    'receiver_registry',
    'register_receiver',
    'create_notifier',

    # Errors
    'ReceiverConfigError',
    'SettingsDecodeError',
    'MissingFieldError',
    'MutuallyExclusiveOptionsError',
    'UnsupportedOptionError',
    'FieldNotNumericError',
    'UnknownReceiverTypeError',
    'DeliveryError',

    # Boundaries
    'BasicAuth',
    'SendRequest',
    'SendResponse',
    'NotificationSender',
    'HttpxNotificationSender',
    'ImageStore',
    'ImageStoreError',
    'UnavailableImageStore',
    'HostnameResolver',
    'SocketHostnameResolver',
]
