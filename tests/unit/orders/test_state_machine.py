"""Unit tests for the order status transition rules."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderAlreadyDelivered,
    OrderWithoutCourier,
)
from modules.orders.state_machine import parse_status, validate_transition

pytestmark = pytest.mark.unit


class TestParseStatus:
    @pytest.mark.parametrize("value", OrderStatus.values)
    def test_known_values(self, value):
        assert parse_status(value) == value

    @pytest.mark.parametrize("value", ["shipped", "EN_ROUTE", "", "en-route"])
    def test_unknown_values(self, value):
        with pytest.raises(InvalidOrderStatus, match="Expected one of"):
            parse_status(value)


class TestValidateTransition:
    def test_delivered_requires_courier(self):
        with pytest.raises(OrderWithoutCourier):
            validate_transition(OrderStatus.EN_ROUTE, OrderStatus.DELIVERED)

    def test_delivered_with_courier(self):
        assert (
            validate_transition(OrderStatus.EN_ROUTE, OrderStatus.DELIVERED, uuid4())
            == OrderStatus.DELIVERED
        )

    def test_cannot_cancel_delivered(self):
        with pytest.raises(OrderAlreadyDelivered):
            validate_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED, uuid4())

    @pytest.mark.parametrize(
        "current",
        [s for s in OrderStatus.values if s != OrderStatus.DELIVERED],
    )
    def test_cancel_from_any_other_state(self, current):
        assert validate_transition(current, "cancelled") == OrderStatus.CANCELLED

    @pytest.mark.parametrize(
        "current, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.EN_ROUTE),
            (OrderStatus.EN_ROUTE, OrderStatus.PENDING),
            (OrderStatus.CANCELLED, OrderStatus.PREPARING),
            (OrderStatus.DELIVERED, OrderStatus.CONFIRMED),
        ],
    )
    def test_unguarded_transitions_allowed(self, current, target):
        assert validate_transition(current, target) == target

    def test_unknown_target(self):
        with pytest.raises(InvalidOrderStatus):
            validate_transition(OrderStatus.PENDING, "lost")
