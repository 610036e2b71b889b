"""Shared test fixtures and configuration for alertdispatch tests."""

import pytest
from pathlib import Path
import sys
from typing import Dict, List, Optional

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from alertdispatch.models import Alert, AlertStatus
from alertdispatch.receivers import (
    DeliveryError,
    FactoryConfig,
    NotificationChannelConfig,
    NotificationSender,
    SendRequest,
    SendResponse,
)
from alertdispatch.receivers.hostname import HostnameResolver
from alertdispatch.templates import TemplateRenderer


EXTERNAL_URL = "http://localhost"


class RecordingSender(NotificationSender):
    """Sender that records every request instead of sending it.

    URLs listed in failing_urls raise DeliveryError; every other request
    succeeds with HTTP 200.
    """

    def __init__(self, failing_urls: Optional[List[str]] = None):
        self.requests: List[SendRequest] = []
        self.failing_urls = set(failing_urls or [])

    async def send(self, request: SendRequest) -> SendResponse:
        self.requests.append(request)
        if request.url in self.failing_urls:
            raise DeliveryError(f"unexpected status code 500 from {request.url}", url=request.url, status_code=500)
        return SendResponse(status_code=200)

    @property
    def last_request(self) -> SendRequest:
        return self.requests[-1]


class StubHostnameResolver(HostnameResolver):

    def __init__(self, name: str = "test-host", error: Optional[OSError] = None):
        self.name = name
        self.error = error

    def hostname(self) -> str:
        if self.error is not None:
            raise self.error
        return self.name


@pytest.fixture
def recording_sender():
    """Sender that records requests."""
    return RecordingSender()


@pytest.fixture
def renderer():
    """Template renderer with the test external URL."""
    return TemplateRenderer(external_url=EXTERNAL_URL)


@pytest.fixture
def make_factory_config(recording_sender, renderer):
    """Build a FactoryConfig for a receiver type and settings."""
    def _make(
        receiver_type: str,
        settings,
        secure_settings: Optional[Dict[str, bytes]] = None,
        sender: Optional[NotificationSender] = None,
        **kwargs
    ) -> FactoryConfig:
        channel_kwargs = {
            "name": f"{receiver_type}_testing",
            "type": receiver_type,
            "settings": settings,
            "secure_settings": secure_settings or {},
            "org_id": kwargs.pop("org_id", 1),
            "uid": kwargs.pop("uid", f"{receiver_type}-uid"),
            "disable_resolve_message": kwargs.pop("disable_resolve_message", False),
        }
        return FactoryConfig(
            config=NotificationChannelConfig(**channel_kwargs),
            sender=sender or recording_sender,
            renderer=renderer,
            hostname_resolver=kwargs.pop("hostname_resolver", StubHostnameResolver()),
            **kwargs
        )

    return _make


@pytest.fixture
def firing_alert():
    """Firing alert carrying dashboard and panel annotations."""
    return Alert(
        labels={"alertname": "alert1", "lbl1": "val1"},
        annotations={"ann1": "annv1", "__dashboardUid__": "abcd", "__panelId__": "efgh"},
    )


@pytest.fixture
def resolved_alert():
    """Resolved alert without annotations."""
    return Alert(
        status=AlertStatus.RESOLVED,
        labels={"alertname": "alert1", "lbl1": "val2"},
    )


@pytest.fixture
def failing_hostname_resolver():
    """Hostname resolver that cannot determine the hostname."""
    return StubHostnameResolver(error=OSError("no hostname"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
