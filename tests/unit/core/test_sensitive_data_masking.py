import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_password_masked(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_authorization_header_masked(self):
        event_dict = {"event": "line_push", "detail": "Authorization: channel-xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "channel-xyz" not in result["detail"]

    def test_bearer_token_masked(self):
        event_dict = {"event": "line_push", "detail": "Authorization: Bearer abc123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123" not in result["detail"]
        assert result["detail"] == "Authorization: Bearer ***MASKED***"

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "order.created", "order_number": "ORD-2026-1019-1"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_number"] == "ORD-2026-1019-1"
        assert result["event"] == "order.created"

    def test_non_string_values_untouched(self):
        event_dict = {"event": "order.created", "order_id": 5}
        assert mask_sensitive_data(None, None, event_dict)["order_id"] == 5
