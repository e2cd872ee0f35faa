"""Unit tests for Courier behaviour."""

from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from modules.couriers.exceptions import CourierBusy
from modules.couriers.models import Courier

pytestmark = pytest.mark.unit


class TestAvailability:
    def test_free_courier_can_go_unavailable(self, courier):
        courier.set_availability(False)
        assert courier.is_available is False

    def test_busy_courier_cannot_go_unavailable(self, courier, make_order):
        courier.assign(make_order())

        with pytest.raises(CourierBusy):
            courier.set_availability(False)
        assert courier.is_available is True

    def test_busy_courier_can_stay_available(self, courier, make_order):
        courier.assign(make_order())
        courier.set_availability(True)
        assert courier.is_available is True

    def test_release_clears_current_order(self, courier, make_order):
        courier.assign(make_order())
        courier.release()
        assert courier.current_order_id is None


class TestLocation:
    def test_move_to_stamps_time(self, courier):
        courier.move_to(-12.1211, -77.0297)
        assert courier.last_latitude == -12.1211
        assert courier.last_longitude == -77.0297
        assert courier.location_updated_at is not None


class TestValidation:
    def test_clean_requires_zones(self, courier):
        courier.coverage_zones = []
        with pytest.raises(ValidationError):
            courier.clean()

    def test_email_lower_cased_on_save(self, make_courier):
        courier = make_courier(email="Luis.P@Couriers.Example.com")
        courier.refresh_from_db()
        assert courier.email == "luis.p@couriers.example.com"

    def test_new_courier_defaults(self, courier):
        fresh = Courier.objects.get(pk=courier.pk)
        assert fresh.is_available is True
        assert fresh.total_deliveries == 0
        assert str(fresh.rating) == "0.00"
