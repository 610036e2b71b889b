"""Extended alert views and template rendering."""

from .defaults import (
    DEFAULT_MESSAGE,
    DEFAULT_MESSAGE_EMBED,
    DEFAULT_MESSAGE_TITLE_EMBED,
    DEFAULT_TITLE,
)
from .extended import (
    ExtendedAlert,
    ExtendedAlerts,
    ExtendedData,
    TruncationState,
    build_extended_data,
)
from .functions import alert_details, value_list
from .renderer import TemplateRenderer, TemplateRenderError

__all__ = [
    'DEFAULT_MESSAGE',
    'DEFAULT_MESSAGE_EMBED',
    'DEFAULT_MESSAGE_TITLE_EMBED',
    'DEFAULT_TITLE',
    'ExtendedAlert',
    'ExtendedAlerts',
    'ExtendedData',
    'TruncationState',
    'build_extended_data',
    'alert_details',
    'value_list',
    'TemplateRenderer',
    'TemplateRenderError',
]
