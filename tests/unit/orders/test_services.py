"""Unit tests for OrderService (the order lifecycle engine).

Covers:
- Creation & pricing against the live catalog, with no partial writes.
- The state machine (delivered needs a courier, delivered is final for cancel).
- Courier assignment / release.
- Rating aggregation into the courier's average and delivery count.
- Wrapping of database failures and event publication on commit.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from django.db import DatabaseError
from django.utils import timezone

from modules.couriers.exceptions import CourierNotFound, CourierUnavailable
from modules.couriers.repositories import CourierDjangoRepository
from modules.customers.exceptions import CustomerNotFound
from modules.customers.repositories import CustomerDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderData,
    InvalidOrderStatus,
    InvalidRating,
    OrderAlreadyDelivered,
    OrderNotDelivered,
    OrderNotFound,
    OrderPersistenceError,
    OrderWithoutCourier,
)
from modules.orders.models import Order, OrderItem
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import ProductNotFound, ProductUnavailable
from modules.products.repositories import ProductDjangoRepository

pytestmark = pytest.mark.unit

ADDRESS = {"street": "Av. Larco", "number": "345", "district": "Miraflores"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _service(**overrides) -> OrderService:
    deps = {
        "order_repository": OrderDjangoRepository(),
        "customer_repository": CustomerDjangoRepository(),
        "product_repository": ProductDjangoRepository(),
        "courier_repository": CourierDjangoRepository(),
    }
    deps.update(overrides)
    return OrderService(**deps)


def _dto(customer, *lines, **overrides) -> CreateOrderDTO:
    payload = {
        "customer_id": customer.id,
        "items": [{"product_id": p.id, "quantity": q} for p, q in lines],
        "delivery_address": ADDRESS,
    }
    payload.update(overrides)
    return CreateOrderDTO.model_validate(payload)


@pytest.fixture()
def delivered_order(order_service, make_order, courier):
    """A delivered S/ 25.00 order carried by ``courier``."""
    order = make_order(status="confirmed")
    order_service.assign_courier(str(order.id), str(courier.id))
    return order_service.update_status(str(order.id), OrderStatus.DELIVERED)


def _assert_nothing_written():
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0


# ===========================================================================
# Creation & pricing
# ===========================================================================


class TestCreateOrder:
    def test_price_10_quantity_2_totals_25(self, order_service, customer, product):
        order = order_service.create_order(_dto(customer, (product, 2)))

        (item,) = order.items.all()
        assert item.subtotal == Decimal("20.00")
        assert order.subtotal == Decimal("20.00")
        assert order.shipping_cost == Decimal("5.00")
        assert order.discount == Decimal("0.00")
        assert order.total == Decimal("25.00")
        assert order.status == OrderStatus.PENDING

    def test_totals_persisted(self, order_service, customer, make_product):
        ceviche = make_product(price=Decimal("28.00"))
        chicha = make_product(price=Decimal("8.00"))

        order = order_service.create_order(
            _dto(
                customer,
                (ceviche, 1),
                (chicha, 3),
                shipping_cost="7.50",
                discount="4.00",
            )
        )

        stored = Order.objects.get(pk=order.pk)
        assert stored.subtotal == Decimal("52.00")
        assert stored.total == Decimal("55.50")

    def test_items_snapshot_catalog(self, order_service, customer, product):
        order = order_service.create_order(_dto(customer, (product, 1)))

        product.name = "Renamed"
        product.price = Decimal("99.00")
        product.save()

        (item,) = OrderItem.objects.filter(order=order)
        assert item.product_name != "Renamed"
        assert item.unit_price == Decimal("10.00")

    def test_stamps_customer_last_order(self, order_service, customer, product):
        order_service.create_order(_dto(customer, (product, 1)))
        customer.refresh_from_db()
        assert customer.last_order_at is not None

    def test_delivery_address_is_a_copy(self, order_service, customer, product):
        order = order_service.create_order(_dto(customer, (product, 1)))
        assert order.delivery_address["district"] == "Miraflores"
        assert order.delivery_address["city"] == "Lima"

    def test_initial_status_override(self, order_service, customer, product):
        order = order_service.create_order(
            _dto(customer, (product, 1), status="confirmed")
        )
        assert order.status == OrderStatus.CONFIRMED

    def test_default_shipping_from_settings(
        self, order_service, customer, product, settings
    ):
        settings.DEFAULT_SHIPPING_COST = Decimal("3.00")
        order = order_service.create_order(_dto(customer, (product, 1)))
        assert order.total == Decimal("13.00")

    def test_unknown_customer(self, order_service, product):
        ghost = MagicMock(id=uuid4())
        with pytest.raises(CustomerNotFound):
            order_service.create_order(_dto(ghost, (product, 1)))
        _assert_nothing_written()

    def test_unknown_product_writes_nothing(self, order_service, customer, product):
        ghost = MagicMock(id=uuid4())
        with pytest.raises(ProductNotFound):
            order_service.create_order(_dto(customer, (product, 1), (ghost, 1)))
        _assert_nothing_written()
        customer.refresh_from_db()
        assert customer.last_order_at is None

    def test_deleted_product_is_not_found(self, order_service, customer, product):
        product.delete()
        with pytest.raises(ProductNotFound):
            order_service.create_order(_dto(customer, (product, 1)))

    def test_unavailable_product(self, order_service, customer, make_product):
        available = make_product()
        sold_out = make_product(is_available=False)
        with pytest.raises(ProductUnavailable):
            order_service.create_order(_dto(customer, (available, 1), (sold_out, 1)))
        _assert_nothing_written()

    def test_discount_cannot_exceed_total(self, order_service, customer, product):
        with pytest.raises(InvalidOrderData):
            order_service.create_order(_dto(customer, (product, 1), discount="50"))
        _assert_nothing_written()

    def test_total_must_fit_money_column(self, order_service, customer, make_product):
        pricey = make_product(price=Decimal("99999999.99"))
        with pytest.raises(InvalidOrderData, match="cannot exceed"):
            order_service.create_order(_dto(customer, (pricey, 2)))
        _assert_nothing_written()

    def test_database_failure_is_wrapped(self, customer, product):
        order_repo = MagicMock()
        order_repo.create.side_effect = DatabaseError("disk full")
        service = _service(order_repository=order_repo)

        with pytest.raises(OrderPersistenceError, match="disk full"):
            service.create_order(_dto(customer, (product, 1)))

    def test_order_created_published_after_commit(
        self, customer, product, django_capture_on_commit_callbacks
    ):
        bus = MagicMock()
        service = _service(event_bus=bus)

        with django_capture_on_commit_callbacks(execute=True):
            order = service.create_order(_dto(customer, (product, 2)))

        (events,) = bus.publish_all.call_args.args
        assert [type(e) for e in events] == [OrderCreated]
        assert events[0].aggregate_id == order.id
        assert events[0].total == Decimal("25.00")

    def test_nothing_published_before_commit(self, customer, product):
        bus = MagicMock()
        _service(event_bus=bus).create_order(_dto(customer, (product, 1)))
        bus.publish_all.assert_not_called()


# ===========================================================================
# State machine
# ===========================================================================


class TestUpdateStatus:
    def test_moves_forward(self, order_service, make_order):
        order = make_order()
        updated = order_service.update_status(str(order.id), "confirmed")
        assert updated.status == OrderStatus.CONFIRMED

    def test_backwards_moves_allowed(self, order_service, make_order):
        order = make_order(status="preparing")
        updated = order_service.update_status(str(order.id), "pending")
        assert updated.status == OrderStatus.PENDING

    def test_unknown_status(self, order_service, make_order):
        order = make_order()
        with pytest.raises(InvalidOrderStatus):
            order_service.update_status(str(order.id), "lost")

    def test_delivered_without_courier(self, order_service, make_order):
        order = make_order(status="en_route")

        with pytest.raises(OrderWithoutCourier):
            order_service.update_status(str(order.id), OrderStatus.DELIVERED)

        order.refresh_from_db()
        assert order.status == OrderStatus.EN_ROUTE
        assert order.delivered_at is None

    def test_delivery_stamps_time_and_frees_courier(self, delivered_order, courier):
        assert delivered_order.status == OrderStatus.DELIVERED
        assert delivered_order.delivered_at is not None
        courier.refresh_from_db()
        assert courier.current_order_id is None

    def test_cancelled_goes_through_cancel_rules(self, order_service, make_order):
        order = make_order(notes="Sin ají")
        updated = order_service.update_status(str(order.id), "cancelled")
        assert updated.status == OrderStatus.CANCELLED
        assert updated.notes == "Sin ají\n[Cancelled]"

    def test_delivered_cannot_be_cancelled_via_status(
        self, order_service, delivered_order
    ):
        with pytest.raises(OrderAlreadyDelivered):
            order_service.update_status(str(delivered_order.id), "cancelled")
        delivered_order.refresh_from_db()
        assert delivered_order.status == OrderStatus.DELIVERED

    def test_missing_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.update_status(str(uuid4()), "confirmed")

    def test_status_event_published(
        self, make_order, django_capture_on_commit_callbacks
    ):
        order = make_order()
        bus = MagicMock()
        with django_capture_on_commit_callbacks(execute=True):
            _service(event_bus=bus).update_status(str(order.id), "confirmed")

        (events,) = bus.publish_all.call_args.args
        assert isinstance(events[0], OrderStatusChanged)
        assert events[0].new_status == "confirmed"


class TestCancelOrder:
    @pytest.mark.parametrize(
        "status", ["pending", "confirmed", "preparing", "en_route", "cancelled"]
    )
    def test_any_undelivered_order_can_be_cancelled(
        self, order_service, make_order, courier, status
    ):
        order = make_order(status="confirmed", notes="Sin cebolla")
        order_service.assign_courier(str(order.id), str(courier.id))
        if status == "cancelled":
            order_service.cancel_order(str(order.id), "Primer intento")
        else:
            order_service.update_status(str(order.id), status)

        cancelled = order_service.cancel_order(str(order.id), "Cliente ausente")

        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.notes.startswith("Sin cebolla\n")
        assert cancelled.notes.endswith("\n[Cancelled] Cliente ausente")
        courier.refresh_from_db()
        assert courier.current_order_id is None

    def test_courier_holding_another_order_is_kept(
        self, order_service, make_order, courier
    ):
        first = make_order(status="confirmed")
        second = make_order(status="confirmed")
        order_service.assign_courier(str(first.id), str(courier.id))
        order_service.assign_courier(str(second.id), str(courier.id))

        order_service.cancel_order(str(first.id), "")

        courier.refresh_from_db()
        assert courier.current_order_id == second.id

    def test_delivered_order_cannot_be_cancelled(self, order_service, delivered_order):
        with pytest.raises(OrderAlreadyDelivered):
            order_service.cancel_order(str(delivered_order.id), "too late")

        delivered_order.refresh_from_db()
        assert delivered_order.status == OrderStatus.DELIVERED
        assert "[Cancelled]" not in delivered_order.notes

    def test_missing_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.cancel_order(str(uuid4()))


# ===========================================================================
# Courier assignment
# ===========================================================================


class TestAssignCourier:
    def test_confirmed_order_goes_en_route(self, order_service, make_order, courier):
        order = make_order(status="confirmed")

        updated = order_service.assign_courier(str(order.id), str(courier.id))

        assert updated.status == OrderStatus.EN_ROUTE
        assert updated.courier_id == courier.id
        courier.refresh_from_db()
        assert courier.current_order_id == order.id

    def test_pending_order_keeps_status(self, order_service, make_order, courier):
        order = make_order()
        updated = order_service.assign_courier(str(order.id), str(courier.id))
        assert updated.status == OrderStatus.PENDING
        assert updated.courier_id == courier.id

    def test_unavailable_courier(self, order_service, make_order, make_courier):
        order = make_order(status="confirmed")
        resting = make_courier(is_available=False)

        with pytest.raises(CourierUnavailable):
            order_service.assign_courier(str(order.id), str(resting.id))

        order.refresh_from_db()
        assert order.courier_id is None
        assert order.status == OrderStatus.CONFIRMED

    def test_missing_courier(self, order_service, make_order):
        with pytest.raises(CourierNotFound):
            order_service.assign_courier(str(make_order().id), str(uuid4()))

    def test_missing_order(self, order_service, courier):
        with pytest.raises(OrderNotFound):
            order_service.assign_courier(str(uuid4()), str(courier.id))

    def test_reassignment_releases_previous_courier(
        self, order_service, make_order, make_courier
    ):
        order = make_order(status="confirmed")
        first, second = make_courier(), make_courier()
        order_service.assign_courier(str(order.id), str(first.id))

        order_service.assign_courier(str(order.id), str(second.id))

        first.refresh_from_db()
        second.refresh_from_db()
        assert first.current_order_id is None
        assert second.current_order_id == order.id


# ===========================================================================
# Rating aggregation
# ===========================================================================


class TestRateOrder:
    def test_stores_rating(self, order_service, delivered_order):
        rated = order_service.rate_order(str(delivered_order.id), 5, "Excelente")
        assert rated.rating_score == 5
        assert rated.rating_comment == "Excelente"
        assert rated.rated_at is not None

    @pytest.mark.parametrize("status", ["pending", "confirmed", "cancelled"])
    def test_only_delivered_orders(self, order_service, make_order, status):
        order = make_order(status=status)
        with pytest.raises(OrderNotDelivered):
            order_service.rate_order(str(order.id), 5)

    @pytest.mark.parametrize("score", [0, 6])
    def test_score_range(self, order_service, delivered_order, score):
        with pytest.raises(InvalidRating):
            order_service.rate_order(str(delivered_order.id), score)

    def test_missing_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.rate_order(str(uuid4()), 4)

    def test_courier_average_over_all_rated_deliveries(
        self, order_service, make_order, courier
    ):
        for score in (5, 4, 4):
            order = make_order(status="confirmed")
            order_service.assign_courier(str(order.id), str(courier.id))
            order_service.update_status(str(order.id), "delivered")
            order_service.rate_order(str(order.id), score)

        courier.refresh_from_db()
        assert courier.rating == Decimal("4.33")
        assert courier.total_deliveries == 3

    def test_re_rating_does_not_count_delivery_twice(
        self, order_service, delivered_order, courier
    ):
        order_service.rate_order(str(delivered_order.id), 2)
        order_service.rate_order(str(delivered_order.id), 4)

        courier.refresh_from_db()
        assert courier.total_deliveries == 1
        assert courier.rating == Decimal("4.00")


# ===========================================================================
# Field updates & queries
# ===========================================================================


class TestUpdateOrder:
    def test_recomputes_totals(self, order_service, make_order):
        order = make_order()
        updated = order_service.update_order(
            str(order.id),
            UpdateOrderDTO(shipping_cost=Decimal("8.00"), discount=Decimal("3.00")),
        )
        assert updated.total == Decimal("25.00")

    def test_negative_total_rejected(self, order_service, make_order):
        order = make_order()
        with pytest.raises(InvalidOrderData):
            order_service.update_order(
                str(order.id), UpdateOrderDTO(discount=Decimal("100"))
            )
        order.refresh_from_db()
        assert order.discount == Decimal("0.00")

    def test_total_must_fit_money_column(self, order_service, make_order):
        order = make_order()
        with pytest.raises(InvalidOrderData, match="cannot exceed"):
            order_service.update_order(
                str(order.id), UpdateOrderDTO(shipping_cost=Decimal("99999999.99"))
            )
        order.refresh_from_db()
        assert order.total == Decimal("25.00")

    def test_missing_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.update_order(str(uuid4()), UpdateOrderDTO(notes="x"))


class TestQueries:
    def test_get_order(self, order_service, make_order):
        order = make_order()
        assert order_service.get_order(str(order.id)).pk == order.pk

    def test_get_malformed_id(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.get_order("not-a-uuid")

    def test_list_by_customer(self, order_service, make_order, make_customer, product):
        mine = make_order()
        other = make_customer()
        order_service.create_order(_dto(other, (product, 1)))

        assert list(order_service.list_by_customer(str(mine.customer_id))) == [mine]

    def test_list_by_status(self, order_service, make_order):
        make_order()
        confirmed = make_order(status="confirmed")
        assert list(order_service.list_by_status("confirmed")) == [confirmed]

    def test_list_by_status_unknown(self, order_service):
        with pytest.raises(InvalidOrderStatus):
            order_service.list_by_status("lost")

    def test_list_by_courier(self, order_service, make_order, courier):
        order = make_order(status="confirmed")
        make_order()
        order_service.assign_courier(str(order.id), str(courier.id))
        assert list(order_service.list_by_courier(str(courier.id))) == [order]

    def test_malformed_courier_id(self, order_service):
        with pytest.raises(InvalidOrderData):
            order_service.list_by_courier("abc")

    def test_newest_first(self, order_service, make_order):
        older = make_order()
        newer = make_order()
        Order.objects.filter(pk=older.pk).update(
            created_at=timezone.now() - timedelta(hours=1)
        )
        assert list(order_service.list_orders()) == [newer, older]
