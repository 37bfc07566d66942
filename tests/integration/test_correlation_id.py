"""Integration tests for request correlation IDs."""

import logging
import uuid

import pytest

from modules.core.middleware import resolve_request_id

pytestmark = pytest.mark.integration


def _messages(caplog):
    return [record.getMessage() for record in caplog.records]


class TestRequestIdHeader:
    def test_echoes_caller_id(self, client):
        response = client.get("/health", HTTP_X_REQUEST_ID="checkout-trace-42")
        assert response["X-Request-ID"] == "checkout-trace-42"

    def test_generates_uuid4_when_missing(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    @pytest.mark.parametrize("raw", ["has spaces", "x" * 129, "bad\nnewline", ""])
    def test_malformed_ids_are_replaced(self, raw):
        resolved = resolve_request_id(raw)

        assert resolved != raw
        assert uuid.UUID(resolved).version == 4


class TestLogCorrelation:
    def test_request_log_carries_id(self, client, caplog):
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID="log-correlation-456")

        assert any("log-correlation-456" in message for message in _messages(caplog))

    def test_service_logs_carry_id(self, api_client_with_correlation, buyer, product, caplog):
        client, cid = api_client_with_correlation
        client.force_authenticate(user=buyer)

        with caplog.at_level(logging.INFO):
            response = client.post(
                "/api/v1/orders/",
                {
                    "items": [{"product_id": str(product.id), "quantity": 1}],
                    "shipping_address": "Ward 3, Hetauda",
                    "phone": "9845000000",
                },
                format="json",
            )

        assert response.status_code == 201
        created = [m for m in _messages(caplog) if "order.created" in m]
        assert created
        assert all(cid in message for message in created)
