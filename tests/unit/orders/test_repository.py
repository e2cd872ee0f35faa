"""Unit tests for OrderDjangoRepository courier look-ups."""

from __future__ import annotations

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


def _set(order, **fields):
    Order.objects.filter(pk=order.pk).update(**fields)


class TestCourierQueries:
    def test_count_active_for_courier(self, repo, make_order, courier):
        for status in OrderStatus.values:
            _set(make_order(), courier=courier, status=status)

        assert repo.count_active_for_courier(courier.id) == 3

    def test_rated_scores_only_from_delivered_orders(self, repo, make_order, courier):
        _set(make_order(), courier=courier, status=OrderStatus.DELIVERED, rating_score=5)
        _set(make_order(), courier=courier, status=OrderStatus.DELIVERED, rating_score=3)
        _set(make_order(), courier=courier, status=OrderStatus.DELIVERED)
        _set(make_order(), courier=courier, status=OrderStatus.CANCELLED, rating_score=1)

        assert sorted(repo.rated_scores_for_courier(courier.id)) == [3, 5]
        assert len(repo.delivered_for_courier(courier.id)) == 3


class TestPersistence:
    def test_get_by_id_prefetches_items(self, repo, make_order):
        order = repo.get_by_id(str(make_order().id))
        assert len(order.items.all()) == 1

    def test_get_by_id_invalid(self, repo):
        assert repo.get_by_id("nope") is None
        assert repo.get_for_update("nope") is None

    def test_orders_are_never_deleted(self, repo, make_order):
        order = make_order()
        with pytest.raises(NotImplementedError):
            repo.delete(str(order.id))
        assert Order.objects.filter(pk=order.pk).exists()
