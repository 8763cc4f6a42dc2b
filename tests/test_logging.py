"""Tests for log redaction."""

from linear_opencode.utils.logging import _filter_sensitive


def _filter(**event):
    return _filter_sensitive(None, "info", dict(event))


class TestFilterSensitive:
    def test_api_key_redacted(self):
        event = _filter(event="linear_request", detail="using lin_api_ABC123def")
        assert "ABC123def" not in event["detail"]
        assert "REDACTED" in event["detail"]

    def test_key_value_pairs_redacted(self):
        event = _filter(event="x", header="Authorization: abc.def-123", other="secret=hunter2")
        assert "abc.def-123" not in event["header"]
        assert "hunter2" not in event["other"]

    def test_plain_values_untouched(self):
        event = _filter(event="webhook_processed", type="Comment", count=3)
        assert event == {"event": "webhook_processed", "type": "Comment", "count": 3}
