"""Unit tests for receiver registration and construction."""

import pytest

from alertdispatch.receivers import (
    BaseNotifier,
    ReceiverRegistry,
    UnknownReceiverTypeError,
    create_notifier,
    receiver_registry,
)
from alertdispatch.receivers.errors import SettingsDecodeError
from alertdispatch.receivers.webhook import WebhookNotifier


class TestReceiverRegistry:
    """Test the receiver registry."""

    def test_builtin_receivers_registered(self):
        """Test that importing the package registers every built-in type."""
        assert receiver_registry.list_receiver_types() == [
            "alertmanager", "googlechat", "kafka", "pagerduty", "pushover", "webhook"
        ]
        assert receiver_registry.get_receiver_class("webhook") is WebhookNotifier
        assert WebhookNotifier.receiver_type == "webhook"

    def test_unknown_type(self, make_factory_config):
        """Test that an unregistered type is rejected."""
        with pytest.raises(UnknownReceiverTypeError) as exc_info:
            create_notifier(make_factory_config("carrier-pigeon", {}))

        assert exc_info.value.receiver_type == "carrier-pigeon"
        assert exc_info.value.field == "type"

    def test_create_notifier(self, make_factory_config):
        """Test construction by type tag."""
        notifier = create_notifier(make_factory_config("webhook", {"url": "http://localhost/test"}))

        assert isinstance(notifier, WebhookNotifier)
        assert notifier.name == "webhook_testing"
        assert notifier.uid == "webhook-uid"
        assert notifier.org_id == 1

    def test_register_rejects_non_notifier(self):
        """Test that only BaseNotifier subclasses can be registered."""
        registry = ReceiverRegistry()
        with pytest.raises(ValueError):
            registry.register("bogus", dict)

    def test_register_custom_receiver(self):
        """Test registering a receiver in a separate registry."""
        registry = ReceiverRegistry()

        class EchoNotifier(BaseNotifier):
            @classmethod
            def validate_config(cls, factory_config):
                return factory_config.decoded_settings()

            def build_payload(self, alerts, data, context):
                return {}

            def build_requests(self, payload, data, context):
                return []

        registry.register("echo", EchoNotifier)

        assert registry.get_receiver_class("echo") is EchoNotifier
        assert registry.list_receiver_types() == ["echo"]
        assert receiver_registry.get_receiver_class("echo") is None

    @pytest.mark.parametrize("settings", [None, "", "not json", "[1, 2]", b"   "])
    def test_undecodable_settings(self, make_factory_config, settings):
        """Test that broken settings documents are rejected."""
        with pytest.raises(SettingsDecodeError) as exc_info:
            create_notifier(make_factory_config("webhook", settings))

        assert str(exc_info.value).startswith("failed to unmarshal settings")

    def test_json_settings_document(self, make_factory_config):
        """Test that settings may arrive as a JSON document."""
        notifier = create_notifier(make_factory_config("webhook", b'{"url": "http://localhost/test"}'))
        assert notifier.settings.url == "http://localhost/test"
