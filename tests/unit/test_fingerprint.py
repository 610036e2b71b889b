"""Unit tests for label-set fingerprints."""

import pytest

from alertdispatch.fingerprint import FNV_OFFSET_64, fingerprint, fingerprint_hex


class TestFingerprint:
    """Test cases for fingerprint computation."""

    def test_known_label_set(self):
        """Test fingerprint of a known label set."""
        labels = {"alertname": "alert1", "lbl1": "val1"}
        assert fingerprint_hex(labels) == "fac0861a85de433a"

    def test_empty_label_set_is_offset_basis(self):
        """Test that an empty label set hashes to the FNV offset basis."""
        assert fingerprint({}) == FNV_OFFSET_64
        assert fingerprint_hex({}) == "cbf29ce484222325"

    def test_order_independent(self):
        """Test that insertion order does not change the fingerprint."""
        first = {"alertname": "alert1", "lbl1": "val1", "zone": "eu"}
        second = {"zone": "eu", "lbl1": "val1", "alertname": "alert1"}
        assert fingerprint(first) == fingerprint(second)

    def test_separator_prevents_collisions(self):
        """Test that moving characters between name and value changes the hash."""
        assert fingerprint({"ab": "c"}) != fingerprint({"a": "bc"})

    @pytest.mark.parametrize("labels", [
        {"a": "1"},
        {"alertname": "x", "b": ""},
        {"unicode": "größe"},
    ])
    def test_hex_format(self, labels):
        """Test that hex output is 16 lowercase hex digits."""
        value = fingerprint_hex(labels)
        assert len(value) == 16
        assert value == value.lower()
        assert int(value, 16) == fingerprint(labels)
