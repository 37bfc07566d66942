"""Unit tests for ProductDjangoRepository stock primitives and look-ups."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


class TestDecrementStock:
    def test_takes_units_when_enough(self, repo, product):
        assert repo.decrement_stock(str(product.id), 4) is True
        product.refresh_from_db()
        assert product.stock == 6

    def test_last_unit_can_be_taken_only_once(self, repo, make_product):
        product = make_product(stock=1)

        assert repo.decrement_stock(str(product.id), 1) is True
        assert repo.decrement_stock(str(product.id), 1) is False
        product.refresh_from_db()
        assert product.stock == 0

    def test_refuses_more_than_available(self, repo, product):
        assert repo.decrement_stock(str(product.id), 11) is False
        product.refresh_from_db()
        assert product.stock == 10

    def test_deleted_product_is_not_decremented(self, repo, product):
        product.delete()
        assert repo.decrement_stock(str(product.id), 1) is False

    def test_unknown_or_malformed_id(self, repo):
        assert repo.decrement_stock(str(uuid.uuid4()), 1) is False
        assert repo.decrement_stock("nope", 1) is False


class TestIncrementStock:
    def test_adds_units(self, repo, product):
        assert repo.increment_stock(str(product.id), 5) is True
        product.refresh_from_db()
        assert product.stock == 15

    def test_deleted_product_still_gets_units_back(self, repo, product):
        product.delete()
        assert repo.increment_stock(str(product.id), 2) is True
        assert Product.objects.get(id=product.id).stock == 12

    def test_unknown_product(self, repo):
        assert repo.increment_stock(str(uuid.uuid4()), 1) is False


class TestLookups:
    def test_get_by_id_hides_deleted(self, repo, product):
        product.delete()
        assert repo.get_by_id(str(product.id)) is None

    def test_malformed_id_returns_none(self, repo):
        assert repo.get_by_id("not-a-uuid") is None

    def test_count_out_of_stock(self, repo, make_product):
        make_product(stock=0)
        make_product(stock=3)
        gone = make_product(stock=0)
        gone.delete()

        assert repo.count() == 2
        assert repo.count({"stock": 0}) == 1

    def test_update_rating(self, repo, product):
        repo.update_rating(str(product.id), Decimal("4.50"), 2)
        product.refresh_from_db()
        assert product.rating == Decimal("4.50")
        assert product.total_reviews == 2
