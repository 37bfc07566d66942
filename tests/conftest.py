from decimal import Decimal

import pytest

from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.products.models import Product

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _reset_throttles():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def buyer():
    return User.objects.create_user(
        username="sita", email="sita@example.com", password="testpass123"
    )


@pytest.fixture()
def other_buyer():
    return User.objects.create_user(
        username="ram", email="ram@example.com", password="testpass123"
    )


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="admin", email="admin@example.com", password="testpass123", is_staff=True
    )


@pytest.fixture()
def auth_client(buyer):
    """APIClient authenticated as the default buyer."""
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture()
def other_client(other_buyer):
    client = APIClient()
    client.force_authenticate(user=other_buyer)
    return client


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    """Factory creating persisted products with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"Product {counter['n']}",
            "price": Decimal("100.00"),
            "stock": 10,
            "category": "grocery",
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


@pytest.fixture()
def product(make_product):
    return make_product(name="Basmati Rice 5kg", price=Decimal("950.00"), stock=10)
