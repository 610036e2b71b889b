"""Tests for image store enrichment."""

import json

import pytest

from alertdispatch.models import Alert
from alertdispatch.receivers import ImageStore, ImageStoreError, UnavailableImageStore, create_notifier
from alertdispatch.receivers.images import with_stored_images


class DictImageStore(ImageStore):
    """Image store keyed by alert name; unknown names raise."""

    def __init__(self, urls):
        self.urls = urls

    async def url_for(self, alert):
        name = alert.labels.get("alertname")
        if name not in self.urls:
            raise ImageStoreError(f"no image for {name}")
        return self.urls[name]


class TestWithStoredImages:
    """Test the enrichment step."""

    @pytest.mark.asyncio
    async def test_attaches_urls_and_skips_failures(self):
        alerts = [
            Alert(labels={"alertname": "a"}),
            Alert(labels={"alertname": "b"}),
            Alert(labels={"alertname": "c"}),
        ]
        store = DictImageStore({"a": "http://img/a.png", "c": None})

        attached = await with_stored_images(store, alerts)

        assert attached == 1
        assert alerts[0].annotations == {"image": "http://img/a.png"}
        assert alerts[1].annotations == {}
        assert alerts[2].annotations == {}

    @pytest.mark.asyncio
    async def test_unavailable_store(self):
        alert = Alert(labels={"alertname": "a"})
        assert await with_stored_images(UnavailableImageStore(), [alert]) == 0
        assert alert.annotations == {}

    @pytest.mark.asyncio
    async def test_notify_uses_image_store(self, make_factory_config, recording_sender):
        """Test that stored images reach the payload as imageURL."""
        notifier = create_notifier(make_factory_config(
            "webhook",
            {"url": "http://localhost/test"},
            image_store=DictImageStore({"a": "http://img/a.png"})
        ))

        await notifier.notify([Alert(labels={"alertname": "a"})])

        body = json.loads(recording_sender.last_request.body)
        assert body["alerts"][0]["imageURL"] == "http://img/a.png"
        assert "image" not in body["alerts"][0]["annotations"]

    @pytest.mark.asyncio
    async def test_unexpected_store_errors_skipped(self, make_factory_config, recording_sender):
        """Test that a broken store does not abort the notification."""
        class BrokenImageStore(ImageStore):
            async def url_for(self, alert):
                raise OSError("image directory unavailable")

        notifier = create_notifier(make_factory_config(
            "webhook",
            {"url": "http://localhost/test"},
            image_store=BrokenImageStore()
        ))

        result = await notifier.notify([Alert(labels={"alertname": "a"})])

        assert result.delivered
        body = json.loads(recording_sender.last_request.body)
        assert "imageURL" not in body["alerts"][0]
