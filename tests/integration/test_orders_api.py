"""Integration tests for the order endpoints.

Covers:
- Placing an order reserves stock; ``Idempotency-Key`` replays answer 200.
- Buyers see only their own orders; administrators see all.
- Cancel restores stock; foreign and non-pending orders are refused.
- Admin status updates and the mock payment round trip.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.orders.models import Order, OrderStatusHistory

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def order_body(*lines, **overrides):
    body = {
        "items": [
            {"product_id": str(product.id), "quantity": quantity}
            for product, quantity in lines
        ],
        "shipping_address": "Ward 7, Lalitpur",
        "phone": "9841000000",
        "city": "Lalitpur",
    }
    body.update(overrides)
    return body


@pytest.fixture()
def place(auth_client):
    def _place(*lines, client=None, **overrides):
        return (client or auth_client).post(
            ORDERS_URL, order_body(*lines, **overrides), format="json"
        )

    return _place


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_created_with_snapshot_prices(self, place, product, make_product):
        oil = make_product(name="Mustard Oil 1L", price=Decimal("320.00"), stock=4)

        response = place((product, 2), (oil, 1))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["payment_status"] == "pending"
        assert data["payment_method"] == "cod"
        assert data["total_amount"] == "2220.00"
        assert data["order_number"].startswith("ORD-")
        assert data["user"]["username"] == "sita"
        assert {item["subtotal"] for item in data["items"]} == {"1900.00", "320.00"}
        assert [entry["new_status"] for entry in data["history"]] == ["pending"]

        product.refresh_from_db()
        oil.refresh_from_db()
        assert product.stock == 8
        assert oil.stock == 3

    def test_insufficient_stock_changes_nothing(self, place, product, make_product):
        scarce = make_product(name="Saffron 1g", stock=1)

        response = place((product, 3), (scarce, 2))

        assert response.status_code == 409
        product.refresh_from_db()
        scarce.refresh_from_db()
        assert product.stock == 10
        assert scarce.stock == 1
        assert Order.objects.count() == 0

    def test_unknown_product(self, auth_client):
        response = auth_client.post(
            ORDERS_URL,
            {
                "items": [{"product_id": str(uuid.uuid4()), "quantity": 1}],
                "shipping_address": "Ward 7",
                "phone": "9841000000",
            },
            format="json",
        )

        assert response.status_code == 404

    def test_stale_client_price_is_refused(self, auth_client, product):
        body = order_body((product, 1))
        body["items"][0]["unit_price"] = "900.00"

        response = auth_client.post(ORDERS_URL, body, format="json")

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "price_mismatch"

    def test_idempotent_replay(self, auth_client, product):
        headers = {"HTTP_IDEMPOTENCY_KEY": "checkout-7f3a"}

        first = auth_client.post(ORDERS_URL, order_body((product, 2)), format="json", **headers)
        second = auth_client.post(ORDERS_URL, order_body((product, 2)), format="json", **headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["id"] == second.json()["id"]
        product.refresh_from_db()
        assert product.stock == 8

    def test_anonymous_rejected(self, api_client, product):
        response = api_client.post(ORDERS_URL, order_body((product, 1)), format="json")
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestReadOrders:
    def test_list_is_scoped_to_buyer(self, place, other_client, product):
        place((product, 1))
        place((product, 1), client=other_client)

        mine = other_client.get(ORDERS_URL).json()

        assert mine["count"] == 1
        assert mine["results"][0]["user"]["username"] == "ram"

    def test_admin_sees_all(self, place, other_client, admin_client, product):
        place((product, 1))
        place((product, 1), client=other_client)

        assert admin_client.get(ORDERS_URL).json()["count"] == 2

    def test_filter_by_status(self, place, auth_client, product):
        place((product, 1))
        cancelled = place((product, 1)).json()
        auth_client.post(f"{ORDERS_URL}{cancelled['id']}/cancel/", {}, format="json")

        data = auth_client.get(ORDERS_URL, {"status": "cancelled"}).json()

        assert [row["id"] for row in data["results"]] == [cancelled["id"]]

    def test_retrieve_foreign_order_forbidden(self, place, other_client, product):
        order_id = place((product, 1)).json()["id"]

        response = other_client.get(f"{ORDERS_URL}{order_id}/")

        assert response.status_code == 403

    def test_retrieve_own_order(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]

        response = auth_client.get(f"{ORDERS_URL}{order_id}/")

        assert response.status_code == 200
        assert response.json()["items"][0]["product"]["name"] == "Basmati Rice 5kg"


# ---------------------------------------------------------------------------
# Cancel / status
# ---------------------------------------------------------------------------


class TestCancelOrder:
    def test_restores_stock(self, place, auth_client, product):
        order_id = place((product, 4)).json()["id"]

        response = auth_client.post(
            f"{ORDERS_URL}{order_id}/cancel/", {"notes": "changed my mind"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        product.refresh_from_db()
        assert product.stock == 10
        assert OrderStatusHistory.objects.filter(
            order_id=order_id,
            old_status="pending",
            new_status="cancelled",
            notes="changed my mind",
        ).exists()

    def test_second_cancel_conflicts(self, place, auth_client, product):
        order_id = place((product, 4)).json()["id"]
        auth_client.post(f"{ORDERS_URL}{order_id}/cancel/", {}, format="json")

        response = auth_client.post(f"{ORDERS_URL}{order_id}/cancel/", {}, format="json")

        assert response.status_code == 409
        product.refresh_from_db()
        assert product.stock == 10

    def test_other_buyer_cannot_cancel(self, place, other_client, product):
        order_id = place((product, 1)).json()["id"]

        response = other_client.post(f"{ORDERS_URL}{order_id}/cancel/", {}, format="json")

        assert response.status_code == 403
        product.refresh_from_db()
        assert product.stock == 9


class TestUpdateStatus:
    def test_admin_moves_order_forward(self, place, admin_client, product):
        order_id = place((product, 1)).json()["id"]

        processing = admin_client.patch(
            f"{ORDERS_URL}{order_id}/", {"status": "processing"}, format="json"
        )
        delivered = admin_client.patch(
            f"{ORDERS_URL}{order_id}/", {"status": "delivered"}, format="json"
        )

        assert processing.status_code == 200
        assert delivered.json()["status"] == "delivered"
        assert {h["new_status"] for h in delivered.json()["history"]} == {
            "pending",
            "processing",
            "delivered",
        }

    def test_skipping_a_step_conflicts(self, place, admin_client, product):
        order_id = place((product, 1)).json()["id"]

        response = admin_client.patch(
            f"{ORDERS_URL}{order_id}/", {"status": "delivered"}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "invalid_order_status"

    def test_admin_cancel_restores_stock(self, place, admin_client, product):
        order_id = place((product, 3)).json()["id"]

        admin_client.patch(f"{ORDERS_URL}{order_id}/", {"status": "cancelled"}, format="json")

        product.refresh_from_db()
        assert product.stock == 10

    def test_buyer_cannot_update_status(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]

        response = auth_client.patch(
            f"{ORDERS_URL}{order_id}/", {"status": "processing"}, format="json"
        )

        assert response.status_code == 403


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class TestPayment:
    def test_mock_round_trip(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]

        initiated = auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/")
        assert initiated.status_code == 200
        pidx = initiated.json()["pidx"]
        assert pidx in initiated.json()["payment_url"]

        verified = auth_client.post(
            f"{ORDERS_URL}{order_id}/payment/verify/", {"pidx": pidx}, format="json"
        )

        assert verified.status_code == 200
        data = verified.json()
        assert data["payment_status"] == "completed"
        assert data["payment_method"] == "online"
        assert data["status"] == "processing"
        assert data["transaction_id"]

    def test_verifying_twice_is_harmless(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]
        pidx = auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/").json()["pidx"]
        url = f"{ORDERS_URL}{order_id}/payment/verify/"

        auth_client.post(url, {"pidx": pidx}, format="json")
        again = auth_client.post(url, {"pidx": pidx}, format="json")

        assert again.status_code == 200
        assert again.json()["payment_status"] == "completed"

    def test_unknown_reference(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]
        auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/")

        response = auth_client.post(
            f"{ORDERS_URL}{order_id}/payment/verify/", {"pidx": "forged"}, format="json"
        )

        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "payment_reference_not_found"

    def test_paid_order_cannot_be_initiated_again(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]
        pidx = auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/").json()["pidx"]
        auth_client.post(f"{ORDERS_URL}{order_id}/payment/verify/", {"pidx": pidx}, format="json")

        response = auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/")

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "payment_already_completed"

    def test_cancelled_order_cannot_be_paid(self, place, auth_client, product):
        order_id = place((product, 1)).json()["id"]
        auth_client.post(f"{ORDERS_URL}{order_id}/cancel/", {}, format="json")

        response = auth_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/")

        assert response.status_code == 409

    def test_other_buyer_cannot_pay(self, place, other_client, product):
        order_id = place((product, 1)).json()["id"]

        response = other_client.post(f"{ORDERS_URL}{order_id}/payment/initiate/")

        assert response.status_code == 403
