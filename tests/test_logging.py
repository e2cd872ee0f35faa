import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_email_local_part_masked(self):
        event_dict = {"event": "customer.created", "email": "ana.quispe@example.com"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "ana.quispe" not in result["email"]
        assert result["email"] == "***MASKED***@example.com"

    def test_document_number_masked(self):
        event_dict = {"event": "test", "data": "document_number=45871236"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "45871236" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_password_masked_in_log_output(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked_in_log_output(self):
        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_non_string_values_untouched(self):
        event_dict = {"event": "order.rated", "score": 5, "items": ["a@b.pe"]}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["score"] == 5
        assert result["items"] == ["a@b.pe"]

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "order.created", "order_number": "ORD-20240101-ABC123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_number"] == "ORD-20240101-ABC123"
        assert result["event"] == "order.created"
