import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestRequestIdPropagation:
    def test_echoes_incoming_header(self, client):
        response = client.get("/health", HTTP_X_REQUEST_ID="courier-dispatch-123")
        assert response["X-Request-ID"] == "courier-dispatch-123"

    def test_generates_uuid4_when_header_missing(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert uuid.UUID(request_id).version == 4

    def test_api_responses_carry_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/products/")
        assert response.status_code == 200
        assert response["X-Request-ID"] == cid

    def test_request_id_reaches_log_records(self, client, caplog):
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID="dispatch-log-456")
        messages = [record.getMessage() for record in caplog.records]
        assert any("dispatch-log-456" in message for message in messages), messages
