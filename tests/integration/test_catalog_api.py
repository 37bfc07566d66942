"""Integration tests for the product catalog and review endpoints."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

PRODUCTS_URL = "/api/v1/products/"
REVIEWS_URL = "/api/v1/reviews/"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class TestProductCatalog:
    def test_list_is_public_and_paginated(self, api_client, product, make_product):
        make_product(name="Chiura 1kg")

        response = api_client.get(PRODUCTS_URL)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [row["name"] for row in data["results"]] == ["Basmati Rice 5kg", "Chiura 1kg"]

    def test_filters(self, api_client, make_product):
        make_product(name="Ghee 500ml", price=Decimal("650.00"), category="dairy")
        make_product(name="Paneer 200g", price=Decimal("180.00"), category="dairy", stock=0)
        make_product(name="Rice", category="grocery")

        dairy = api_client.get(PRODUCTS_URL, {"category": "dairy"}).json()
        in_stock = api_client.get(PRODUCTS_URL, {"category": "dairy", "in_stock": "true"}).json()
        cheap = api_client.get(PRODUCTS_URL, {"max_price": "200"}).json()

        assert dairy["count"] == 2
        assert [row["name"] for row in in_stock["results"]] == ["Ghee 500ml"]
        assert {row["name"] for row in cheap["results"]} == {"Paneer 200g", "Rice"}

    def test_deleted_products_are_hidden(self, api_client, admin_client, product):
        assert admin_client.delete(f"{PRODUCTS_URL}{product.id}/").status_code == 204

        assert api_client.get(PRODUCTS_URL).json()["count"] == 0
        assert api_client.get(f"{PRODUCTS_URL}{product.id}/").status_code == 404

    def test_retrieve(self, api_client, product):
        data = api_client.get(f"{PRODUCTS_URL}{product.id}/").json()

        assert data["price"] == "950.00"
        assert data["in_stock"] is True


class TestProductAdministration:
    def test_admin_creates_product(self, admin_client):
        response = admin_client.post(
            PRODUCTS_URL,
            {"name": "Wai Wai Noodles", "price": "25.00", "stock": 120, "category": "snacks"},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["price"] == "25.00"
        assert data["stock"] == 120
        assert data["status"] == "active"

    def test_invalid_price(self, admin_client):
        response = admin_client.post(
            PRODUCTS_URL, {"name": "Free lunch", "price": "0"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "price"

    def test_buyer_cannot_create(self, auth_client):
        response = auth_client.post(
            PRODUCTS_URL, {"name": "Sneaky", "price": "1.00"}, format="json"
        )
        assert response.status_code == 403

    def test_restock(self, admin_client, product):
        response = admin_client.patch(
            f"{PRODUCTS_URL}{product.id}/stock/", {"stock": 40}, format="json"
        )

        assert response.status_code == 200
        product.refresh_from_db()
        assert product.stock == 40

    def test_negative_stock_rejected(self, admin_client, product):
        response = admin_client.patch(
            f"{PRODUCTS_URL}{product.id}/stock/", {"stock": -1}, format="json"
        )
        assert response.status_code == 400

    def test_update_unknown_product(self, admin_client):
        response = admin_client.patch(
            f"{PRODUCTS_URL}{uuid.uuid4()}/", {"name": "Ghost"}, format="json"
        )

        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "product_not_found"


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@pytest.fixture()
def delivered_order(auth_client, admin_client, product):
    order = auth_client.post(
        "/api/v1/orders/",
        {
            "items": [{"product_id": str(product.id), "quantity": 1}],
            "shipping_address": "Ward 2, Bhaktapur",
            "phone": "9803000000",
        },
        format="json",
    ).json()
    for status in ("processing", "delivered"):
        admin_client.patch(f"/api/v1/orders/{order['id']}/", {"status": status}, format="json")
    return order


def review_body(order, product, rating=5, comment="Fragrant and clean."):
    return {
        "order_id": order["id"],
        "product_id": str(product.id),
        "rating": rating,
        "comment": comment,
    }


class TestReviews:
    def test_review_after_delivery(self, auth_client, delivered_order, product):
        response = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product), format="json"
        )

        assert response.status_code == 201
        assert response.json()["username"] == "sita"
        product.refresh_from_db()
        assert product.rating == Decimal("5.00")
        assert product.total_reviews == 1

        order = auth_client.get(f"/api/v1/orders/{delivered_order['id']}/").json()
        assert order["items"][0]["reviewed"] is True

    def test_undelivered_order_cannot_be_reviewed(self, auth_client, product):
        order = auth_client.post(
            "/api/v1/orders/",
            {
                "items": [{"product_id": str(product.id), "quantity": 1}],
                "shipping_address": "Ward 2",
                "phone": "9803000000",
            },
            format="json",
        ).json()

        response = auth_client.post(REVIEWS_URL, review_body(order, product), format="json")

        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "review_not_allowed"

    def test_duplicate_review(self, auth_client, delivered_order, product):
        auth_client.post(REVIEWS_URL, review_body(delivered_order, product), format="json")

        response = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product, rating=1), format="json"
        )

        assert response.status_code == 409

    def test_rating_out_of_range(self, auth_client, delivered_order, product):
        response = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product, rating=6), format="json"
        )
        assert response.status_code == 400

    def test_check_eligibility(self, auth_client, delivered_order, product):
        params = {"order_id": delivered_order["id"], "product_id": str(product.id)}

        before = auth_client.get(f"{REVIEWS_URL}check/", params).json()
        auth_client.post(REVIEWS_URL, review_body(delivered_order, product), format="json")
        after = auth_client.get(f"{REVIEWS_URL}check/", params).json()

        assert before["can_review"] is True
        assert before["review"] is None
        assert after["can_review"] is False
        assert after["has_reviewed"] is True
        assert after["review"]["rating"] == 5

    def test_check_foreign_order(self, other_client, delivered_order, product):
        response = other_client.get(
            f"{REVIEWS_URL}check/",
            {"order_id": delivered_order["id"], "product_id": str(product.id)},
        )
        assert response.status_code == 404

    def test_product_reviews_are_public(self, api_client, auth_client, delivered_order, product):
        auth_client.post(REVIEWS_URL, review_body(delivered_order, product), format="json")

        response = api_client.get(f"{REVIEWS_URL}product/{product.id}/")

        assert response.status_code == 200
        assert [row["comment"] for row in response.json()] == ["Fragrant and clean."]

    def test_hidden_reviews_leave_listing_and_rating(
        self, api_client, auth_client, admin_client, delivered_order, product
    ):
        review = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product), format="json"
        ).json()

        response = admin_client.patch(
            f"{REVIEWS_URL}{review['id']}/visibility/", {"is_visible": False}, format="json"
        )

        assert response.status_code == 200
        assert api_client.get(f"{REVIEWS_URL}product/{product.id}/").json() == []
        product.refresh_from_db()
        assert product.total_reviews == 0
        assert product.rating == Decimal("0.00")

    def test_buyer_cannot_change_visibility(self, auth_client, delivered_order, product):
        review = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product), format="json"
        ).json()

        response = auth_client.patch(
            f"{REVIEWS_URL}{review['id']}/visibility/", {"is_visible": False}, format="json"
        )
        assert response.status_code == 403

    def test_mine_and_admin_list(self, auth_client, admin_client, delivered_order, product):
        auth_client.post(REVIEWS_URL, review_body(delivered_order, product), format="json")

        assert len(auth_client.get(f"{REVIEWS_URL}mine/").json()) == 1
        assert len(admin_client.get(REVIEWS_URL).json()) == 1
        assert auth_client.get(REVIEWS_URL).status_code == 403

    def test_delete_reopens_the_line(self, auth_client, delivered_order, product):
        review = auth_client.post(
            REVIEWS_URL, review_body(delivered_order, product), format="json"
        ).json()

        assert auth_client.delete(f"{REVIEWS_URL}{review['id']}/").status_code == 204

        check = auth_client.get(
            f"{REVIEWS_URL}check/",
            {"order_id": delivered_order["id"], "product_id": str(product.id)},
        ).json()
        assert check["can_review"] is True
