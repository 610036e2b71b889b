"""Unit tests for the extended view builder."""

import pytest

from alertdispatch.models import KV, Alert, AlertStatus
from alertdispatch.templates.extended import (
    ExtendedAlerts,
    build_extended_data,
    common_pairs,
    dashboard_urls,
    parse_values,
    silence_url,
)


EXTERNAL_URL = "http://localhost"


class TestBuildExtendedData:
    """Test extended view construction."""

    def test_single_alert(self, firing_alert):
        """Test per-alert derived fields."""
        data = build_extended_data(
            [firing_alert],
            group_labels={"alertname": ""},
            receiver="my_receiver",
            external_url=EXTERNAL_URL
        )

        assert data.status == "firing"
        assert data.receiver == "my_receiver"
        assert data.group_labels == {"alertname": ""}
        assert data.common_labels == {"alertname": "alert1", "lbl1": "val1"}
        assert data.common_annotations == {"ann1": "annv1"}

        alert = data.alerts[0]
        assert alert.fingerprint == "fac0861a85de433a"
        assert alert.annotations == {"ann1": "annv1"}
        assert alert.dashboard_url == "http://localhost/d/abcd"
        assert alert.panel_url == "http://localhost/d/abcd?viewPanel=efgh"
        assert alert.silence_url == (
            "http://localhost/alerting/silence/new?alertmanager=grafana"
            "&matcher=alertname%3Dalert1&matcher=lbl1%3Dval1"
        )

    def test_external_url_trailing_slash(self, firing_alert):
        """Test that a trailing slash on the external URL is ignored."""
        data = build_extended_data([firing_alert], external_url="http://localhost/")
        assert data.external_url == EXTERNAL_URL
        assert data.alerts[0].dashboard_url == "http://localhost/d/abcd"

    def test_batch_status(self, firing_alert, resolved_alert):
        """Test that one firing alert makes the batch fire."""
        assert build_extended_data([resolved_alert]).status == "resolved"
        assert build_extended_data([resolved_alert, firing_alert]).status == "firing"

    def test_empty_batch(self):
        """Test the empty view."""
        data = build_extended_data([])
        assert data.status == "resolved"
        assert data.alerts == []
        assert data.common_labels == {}

    def test_common_labels_computed_before_truncation(self):
        """Test that commons cover every alert even when the view is truncated."""
        alerts = [
            Alert(labels={"alertname": "alert1", "lbl1": f"val{i}"}) for i in range(1, 4)
        ]
        data = build_extended_data(alerts, max_alerts=2)

        assert len(data.alerts) == 2
        assert data.truncation.max_alerts == 2
        assert data.truncation.truncated_count == 1
        assert data.common_labels == {"alertname": "alert1"}

    def test_no_truncation_when_within_limit(self):
        """Test that a batch within the limit is untouched."""
        alerts = [Alert(labels={"alertname": "a", "n": str(i)}) for i in range(2)]
        data = build_extended_data(alerts, max_alerts=2)

        assert len(data.alerts) == 2
        assert data.truncation.truncated_count == 0

    def test_input_order_preserved(self):
        """Test that alerts keep their input order."""
        alerts = [Alert(labels={"alertname": name}) for name in ("c", "a", "b")]
        data = build_extended_data(alerts)
        assert [a.labels["alertname"] for a in data.alerts] == ["c", "a", "b"]

    def test_private_labels_removed_but_fingerprinted(self):
        """Test that private labels are hidden but still identify the alert."""
        with_private = Alert(labels={"alertname": "a", "__rule_uid__": "x"})
        without_private = Alert(labels={"alertname": "a"})

        data = build_extended_data([with_private, without_private])

        assert data.alerts[0].labels == {"alertname": "a"}
        assert data.alerts[0].fingerprint != data.alerts[1].fingerprint

    def test_values_and_value_string(self):
        """Test decoding of the values annotations."""
        alert = Alert(
            labels={"alertname": "a"},
            annotations={
                "__values__": '{"A": 1, "B": 2.5}',
                "__value_string__": "[ var='A' value=1 ]",
            }
        )
        extended = build_extended_data([alert]).alerts[0]

        assert extended.values == {"A": 1.0, "B": 2.5}
        assert extended.value_string == "[ var='A' value=1 ]"
        assert extended.annotations == {}

    def test_image_annotation_moved(self):
        """Test that the image annotation becomes the image URL."""
        alert = Alert(labels={"alertname": "a"}, annotations={"image": "http://img/1.png"})
        extended = build_extended_data([alert]).alerts[0]

        assert extended.image_url == "http://img/1.png"
        assert "image" not in extended.annotations
        assert extended.to_dict()["imageURL"] == "http://img/1.png"

    def test_to_dict(self, firing_alert):
        """Test the wire representation."""
        data = build_extended_data(
            [firing_alert],
            group_labels={"alertname": ""},
            receiver="r",
            external_url=EXTERNAL_URL
        ).to_dict()

        assert set(data) == {
            "receiver", "status", "alerts", "groupLabels",
            "commonLabels", "commonAnnotations", "externalURL"
        }
        alert = data["alerts"][0]
        assert alert["startsAt"] is None
        assert alert["values"] == {}
        assert alert["valueString"] == ""
        assert "imageURL" not in alert

    def test_template_context(self, firing_alert):
        """Test the variables exposed to templates."""
        context = build_extended_data([firing_alert]).template_context()
        assert set(context) == {
            "Receiver", "Status", "Alerts", "GroupLabels",
            "CommonLabels", "CommonAnnotations", "ExternalURL"
        }
        assert isinstance(context["Alerts"], ExtendedAlerts)


class TestExtendedAlerts:
    """Test status filters."""

    def test_firing_and_resolved(self, firing_alert, resolved_alert):
        """Test filtering by status."""
        alerts = build_extended_data([firing_alert, resolved_alert]).alerts

        assert len(alerts.firing()) == 1
        assert alerts.firing()[0].status == AlertStatus.FIRING.value
        assert len(alerts.resolved()) == 1
        assert isinstance(alerts.resolved(), ExtendedAlerts)


class TestHelpers:
    """Test the individual derivation helpers."""

    def test_common_pairs(self):
        """Test intersection of equal pairs."""
        maps = [{"a": "1", "b": "2"}, {"a": "1", "b": "3"}, {"a": "1", "c": "4"}]
        assert common_pairs(maps) == {"a": "1"}
        assert common_pairs([]) == {}

    def test_silence_url_escapes_matchers(self):
        """Test that matcher values are query-escaped."""
        url = silence_url(EXTERNAL_URL, KV({"alertname": "disk full", "path": "/var"}))
        assert url.endswith("&matcher=alertname%3Ddisk+full&matcher=path%3D%2Fvar")

    def test_dashboard_urls_with_org(self):
        """Test that the organization is the first query parameter."""
        urls = dashboard_urls(EXTERNAL_URL, {
            "__dashboardUid__": "abcd",
            "__panelId__": "3",
            "__orgId__": "2",
        })
        assert urls["dashboard_url"] == "http://localhost/d/abcd?orgId=2"
        assert urls["panel_url"] == "http://localhost/d/abcd?orgId=2&viewPanel=3"

    def test_panel_without_dashboard_is_ignored(self):
        """Test that a panel id alone yields no URLs."""
        assert dashboard_urls(EXTERNAL_URL, {"__panelId__": "3"}) == {}

    @pytest.mark.parametrize("raw,expected", [
        ("", {}),
        ("not json", {}),
        ("[1, 2]", {}),
        ('{"A": "x", "B": true, "C": 3}', {"C": 3.0}),
    ])
    def test_parse_values_is_lenient(self, raw, expected):
        """Test that malformed values never raise."""
        assert parse_values(raw) == expected
