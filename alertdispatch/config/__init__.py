"""Configuration loading utilities for alert dispatch.

This package provides YAML-based configuration loading with environment
overrides for receivers and HTTP delivery settings.
"""

from .loader import (
    ConfigLoadError,
    DispatchConfig,
    HttpSettings,
    ReceiverDefinition,
    build_notifiers,
    create_sender,
    load_dispatch_config,
)

__all__ = [
    "load_dispatch_config",
    "build_notifiers",
    "create_sender",
    "DispatchConfig",
    "HttpSettings",
    "ReceiverDefinition",
    "ConfigLoadError"
]
