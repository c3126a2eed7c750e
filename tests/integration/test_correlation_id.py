import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        response = client.get("/health")
        request_id = response["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_header_on_api_errors(self, api_client_with_correlation):
        api_client, cid = api_client_with_correlation
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert response["X-Request-ID"] == cid

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )

    def test_transition_logged_with_request_id(
        self, auth_client, make_order, dispatcher, caplog
    ):
        order = make_order()
        with caplog.at_level(logging.INFO):
            auth_client.post(
                "/api/v1/orders/transition/",
                {
                    "order_no": order.order_no,
                    "status": "dispatched",
                    "extra": {"dispatched_by": dispatcher.pk},
                },
                format="json",
                HTTP_X_REQUEST_ID="transition-cid-789",
            )
        messages = [r.getMessage() for r in caplog.records]
        assert any(
            "order.transitioned" in m and "transition-cid-789" in m for m in messages
        ), messages
